"""
Packages extracted post content into a ZIP archive.
"""

from __future__ import annotations

import io
import zipfile
from typing import Iterable, List, Optional, Sequence, Tuple

import structlog

from postharvest.crawler.http_client import PageFetcher
from postharvest.errors import ExtractionError
from postharvest.extractor.models import ExtractedContent, MediaItem, SelectionSet

logger = structlog.get_logger(__name__)

TEXT_ENTRY = "text.txt"
ARCHIVE_NAME = "linkedin-post-content.zip"
SELECTED_ARCHIVE_NAME = "linkedin-post-selected-content.zip"


def _selected(items: Sequence[MediaItem], urls: Iterable[str]) -> List[MediaItem]:
    wanted = set(urls)
    return [item for item in items if str(item.url) in wanted]


class ArchiveBuilder:
    """
    Downloads selected media and writes them under ``images/``, ``videos/``
    and ``documents/`` next to ``text.txt``.

    A media item that cannot be downloaded is logged and left out; the rest
    of the archive is still produced.
    """

    def __init__(self, fetcher: Optional[PageFetcher] = None) -> None:
        self.fetcher = fetcher or PageFetcher()

    async def build(self, content: ExtractedContent, selection: Optional[SelectionSet] = None) -> bytes:
        """Return the ZIP archive bytes for ``selection`` of ``content`` (everything when None)."""
        selection = selection or SelectionSet.everything(content)
        folders: List[Tuple[str, List[MediaItem]]] = [
            ("images", _selected(content.images, selection.image_urls)),
            ("videos", _selected(content.videos, selection.video_urls)),
            ("documents", _selected(content.documents, selection.document_urls)),
        ]

        logger.info(
            "Building archive",
            include_text=selection.include_text,
            items=sum(len(items) for _, items in folders),
        )

        buffer = io.BytesIO()
        skipped = 0
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            if selection.include_text and content.text:
                archive.writestr(TEXT_ENTRY, content.text)
            for folder, items in folders:
                for item in items:
                    data = await self._download(item)
                    if data is None:
                        skipped += 1
                        continue
                    archive.writestr(f"{folder}/{item.filename}", data)

        logger.info("Archive complete", size=buffer.tell(), skipped=skipped)
        return buffer.getvalue()

    async def _download(self, item: MediaItem) -> Optional[bytes]:
        try:
            return await self.fetcher.fetch_bytes(str(item.url))
        except ExtractionError as e:
            logger.warning("Failed to download media item", filename=item.filename, url=str(item.url), error=str(e))
            return None


def archive_name(selection: Optional[SelectionSet]) -> str:
    return SELECTED_ARCHIVE_NAME if selection is not None else ARCHIVE_NAME
