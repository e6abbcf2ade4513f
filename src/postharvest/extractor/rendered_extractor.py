"""
Rendered-DOM strategy: a remote headless browser renders the post.

The page is rendered by Browserless over the Chrome DevTools Protocol, so page
scripts run and the client-rendered post body is present in the returned
HTML. The remote browser session is closed on every exit path.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional

import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from postharvest.config.config import ExtractionSettings, RenderingConfig
from postharvest.errors import NoContentError, RenderingFailedError, UnconfiguredError

from .classifier import MediaClassifier
from .collector import MediaCollector
from .models import ExtractedContent
from .soup_extractor import PostSoupParser

logger = structlog.get_logger(__name__)


class RenderedDomExtractor:
    """Extractor over the fully rendered DOM of the post page."""

    name = "rendered"

    def __init__(
        self,
        settings: ExtractionSettings,
        rendering: RenderingConfig,
        classifier: Optional[MediaClassifier] = None,
        playwright_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        self.settings = settings
        self.rendering = rendering
        self.classifier = classifier or MediaClassifier(min_url_length=settings.min_url_length)
        self.parser = PostSoupParser(self.classifier, settings.placeholder_text)
        self._playwright_factory = playwright_factory

    async def extract(self, url: str) -> ExtractedContent:
        if not self.rendering.configured:
            raise UnconfiguredError("Rendering service credential (BROWSERLESS_API_KEY) is not configured")

        try:
            html = await asyncio.wait_for(self.render(url), timeout=self.rendering.timeout)
        except asyncio.TimeoutError as e:
            raise RenderingFailedError(f"Rendering {url} exceeded {self.rendering.timeout:.0f}s") from e

        content = await asyncio.to_thread(self.extract_from_html, html, url)
        if content.is_empty(self.settings.placeholder_text):
            raise NoContentError(f"Rendered page of {url} contained no post content")
        return content

    async def render(self, url: str) -> str:
        """
        Render ``url`` remotely and return the resulting HTML.

        Raises:
            RenderingFailedError: On connection, navigation or service errors
        """
        navigation_ms = self.rendering.timeout * 1000
        selector_ms = self.rendering.selector_timeout * 1000

        try:
            async with self._playwright_factory() as playwright:
                browser = await playwright.chromium.connect_over_cdp(self.rendering.cdp_url(), timeout=navigation_ms)
                try:
                    context = browser.contexts[0] if browser.contexts else await browser.new_context()
                    page = await context.new_page()
                    await page.goto(url, wait_until="domcontentloaded", timeout=navigation_ms)
                    try:
                        await page.wait_for_selector(self.rendering.wait_selector, timeout=selector_ms)
                    except PlaywrightTimeoutError:
                        logger.debug("Content selector did not appear in time", url=url)
                    return await page.content()
                finally:
                    await self._close_browser(browser, url)
        except PlaywrightTimeoutError as e:
            raise RenderingFailedError(f"Rendering service timed out on {url}: {e}") from e
        except PlaywrightError as e:
            raise RenderingFailedError(f"Rendering service failed on {url}: {e}") from e

    @staticmethod
    async def _close_browser(browser: Any, url: str) -> None:
        try:
            await browser.close()
        except PlaywrightError as e:
            logger.warning("Failed to close remote browser session", url=url, error=str(e))

    def extract_from_html(self, html: str, base_url: str = "") -> ExtractedContent:
        soup = self.parser.parse(html)
        collector = MediaCollector()
        text = self.parser.extract_text(soup)
        self.parser.collect_media(soup, collector, base_url)
        return collector.build(text, placeholder=self.settings.placeholder_text)
