"""
Deduplicating collector for classified media.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import structlog
from pydantic import HttpUrl, TypeAdapter, ValidationError

from .classifier import document_extension
from .models import PLACEHOLDER_TEXT, DocumentItem, ExtractedContent, ImageItem, MediaItem, MediaKind, VideoItem

logger = structlog.get_logger(__name__)

_ITEM_TYPES = {
    MediaKind.IMAGE: ImageItem,
    MediaKind.VIDEO: VideoItem,
    MediaKind.DOCUMENT: DocumentItem,
}

# (filename prefix, default extension, extensions recognised in the URL path)
_FILENAME_SCHEMES = {
    MediaKind.IMAGE: ("image", "jpg", ("jpg", "jpeg", "png", "gif", "webp")),
    MediaKind.VIDEO: ("video", "mp4", ("mp4", "webm", "mov")),
    MediaKind.DOCUMENT: ("document", "pdf", ()),
}

_PATH_EXTENSION_RE = re.compile(r"\.([a-z0-9]{2,5})$", re.IGNORECASE)

_URL_ADAPTER = TypeAdapter(HttpUrl)


def _normalized(url: str) -> Optional[str]:
    try:
        return str(_URL_ADAPTER.validate_python(url))
    except ValidationError:
        return None


def filename_for(kind: MediaKind, ordinal: int, url: str = "") -> str:
    """Deterministic ``<prefix>-<n>.<ext>`` filename for the ``ordinal``-th item of ``kind``."""
    prefix, default_ext, known = _FILENAME_SCHEMES[kind]
    ext = default_ext
    if kind is MediaKind.DOCUMENT:
        ext = document_extension(url) or default_ext
    elif url:
        try:
            match = _PATH_EXTENSION_RE.search(urlparse(url).path)
        except ValueError:
            match = None
        if match and match.group(1).lower() in known:
            ext = match.group(1).lower()
    return f"{prefix}-{ordinal}.{ext}"


class MediaCollector:
    """
    Accumulates media items per kind, first occurrence wins.

    Adding a URL already present in a kind's sequence is a no-op: it neither
    changes order nor consumes a filename ordinal.
    """

    def __init__(self, image_limit: Optional[int] = None) -> None:
        self.image_limit = image_limit
        self._items: Dict[MediaKind, List[MediaItem]] = {kind: [] for kind in MediaKind}
        self._seen: Dict[MediaKind, set[str]] = {kind: set() for kind in MediaKind}

    def contains(self, kind: MediaKind, url: str) -> bool:
        """True when ``url``, once normalized, is already held for ``kind``."""
        key = _normalized(url)
        return key is not None and key in self._seen[kind]

    def add(self, kind: MediaKind, url: str, **fields: Any) -> Optional[MediaItem]:
        """
        Add an item; returns it, or None for duplicates and invalid URLs.

        Duplicates are detected on the normalized URL, so inputs differing only
        in host case or escaping collapse into one item.

        Args:
            kind: Media kind sequence to add to
            url: Absolute URL of the item
            **fields: Remaining item fields (alt, title, duration, type, size)
        """
        if self.contains(kind, url):
            return None

        ordinal = len(self._items[kind]) + 1
        try:
            item = _ITEM_TYPES[kind](url=url, filename=filename_for(kind, ordinal, url), **fields)
        except ValidationError as e:
            logger.debug("Dropping media item with invalid fields", kind=kind.value, url=url, error=str(e))
            return None

        self._items[kind].append(item)
        self._seen[kind].add(str(item.url))
        return item

    def items(self, kind: MediaKind) -> List[MediaItem]:
        return list(self._items[kind])

    def __len__(self) -> int:
        return sum(len(items) for items in self._items.values())

    def build(self, text: Optional[str] = None, placeholder: str = PLACEHOLDER_TEXT) -> ExtractedContent:
        """Freeze the collected items into an ``ExtractedContent``."""
        images = self._items[MediaKind.IMAGE]
        if self.image_limit is not None:
            images = images[: self.image_limit]
        return ExtractedContent(
            text=text.strip() if text and text.strip() else placeholder,
            images=list(images),
            videos=list(self._items[MediaKind.VIDEO]),
            documents=list(self._items[MediaKind.DOCUMENT]),
        )
