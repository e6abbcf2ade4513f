"""
Static-HTML strategy: plain HTTP GET, no script execution.

Client-rendered sections are usually missing from the raw markup, so this
strategy recovers less than the rendered one. It is the cheaper fallback.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import structlog

from postharvest.config.config import ExtractionSettings
from postharvest.crawler.http_client import PageFetcher
from postharvest.errors import NoContentError

from .classifier import MediaClassifier
from .collector import MediaCollector
from .models import ExtractedContent
from .soup_extractor import PostSoupParser

logger = structlog.get_logger(__name__)


class StaticHtmlExtractor:
    """Extractor over the raw, un-rendered page markup."""

    name = "static"

    def __init__(
        self,
        settings: ExtractionSettings,
        fetcher: PageFetcher,
        classifier: Optional[MediaClassifier] = None,
    ) -> None:
        self.settings = settings
        self.fetcher = fetcher
        self.classifier = classifier or MediaClassifier(min_url_length=settings.min_url_length)
        self.parser = PostSoupParser(self.classifier, settings.placeholder_text)

    async def extract(self, url: str) -> ExtractedContent:
        page = await self.fetcher.fetch_html(url)
        # BeautifulSoup is CPU-bound; keep it off the event loop
        content = await asyncio.to_thread(self.extract_from_html, page.html, page.final_url or url)

        if content.is_empty(self.settings.placeholder_text):
            raise NoContentError(f"No post content in static markup of {url}")

        logger.debug(
            "Static extraction finished",
            url=url,
            images=len(content.images),
            videos=len(content.videos),
            documents=len(content.documents),
        )
        return content

    def extract_from_html(self, html: str, base_url: str = "") -> ExtractedContent:
        """Mine ``html`` with the selector cascades, capping accepted images."""
        soup = self.parser.parse(html)
        collector = MediaCollector(image_limit=self.settings.static_image_limit)
        text = self.parser.extract_text(soup)
        self.parser.collect_media(soup, collector, base_url)
        return collector.build(text, placeholder=self.settings.placeholder_text)
