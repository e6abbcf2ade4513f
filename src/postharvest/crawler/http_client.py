"""
HTTP client for direct page and media fetches.

Each call opens its own ``httpx.AsyncClient`` scoped to the request, so no
connection state is shared between concurrent extractions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import httpx
import structlog

from postharvest.config.config import CrawlerConfig
from postharvest.errors import HttpStatusError, NetworkError
from postharvest.observability.metrics import METRICS, status_class

from .user_agents import UserAgentRotator

logger = structlog.get_logger(__name__)


@dataclass
class FetchedPage:
    """Raw HTML page returned by a direct fetch."""

    url: str
    final_url: str
    status: int
    html: str
    headers: Dict[str, str]


@dataclass
class MediaStream:
    """An open upstream media response; the caller must ``aclose()`` it."""

    response: httpx.Response
    client: httpx.AsyncClient

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def is_success(self) -> bool:
        return self.response.is_success

    async def aclose(self) -> None:
        try:
            await self.response.aclose()
        finally:
            await self.client.aclose()


class PageFetcher:
    """Fetches pages and media with rotated browser-like headers."""

    def __init__(
        self,
        config: Optional[CrawlerConfig] = None,
        rotator: Optional[UserAgentRotator] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = config or CrawlerConfig()
        self.rotator = rotator or UserAgentRotator(include_mobile=self.config.include_mobile)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout, connect=min(10.0, self.config.timeout)),
            follow_redirects=True,
            transport=self._transport,
        )

    async def fetch_html(self, url: str) -> FetchedPage:
        """
        GET ``url`` and return its body as text.

        Raises:
            HttpStatusError: On a non-2xx response
            NetworkError: On transport failures and timeouts
        """
        headers = self.rotator.browser_headers()
        async with self._client() as client:
            try:
                response = await client.get(url, headers=headers)
            except httpx.TimeoutException as e:
                raise NetworkError(f"Timed out fetching {url}: {e}") from e
            except httpx.HTTPError as e:
                raise NetworkError(f"Transport error fetching {url}: {e}") from e

        METRICS["fetch_responses"].labels(status_class=status_class(response.status_code)).inc()

        if not response.is_success:
            logger.info("Page fetch returned non-success status", url=url, status=response.status_code)
            raise HttpStatusError(response.status_code, url)

        return FetchedPage(
            url=url,
            final_url=str(response.url),
            status=response.status_code,
            html=response.text,
            headers=dict(response.headers),
        )

    async def fetch_bytes(self, url: str) -> bytes:
        """Download a media asset fully into memory."""
        headers = self.rotator.media_headers(self.config.referer)
        async with self._client() as client:
            try:
                response = await client.get(url, headers=headers)
            except httpx.HTTPError as e:
                raise NetworkError(f"Transport error fetching {url}: {e}") from e
        if not response.is_success:
            raise HttpStatusError(response.status_code, url)
        return response.content

    async def open_media_stream(self, url: str) -> MediaStream:
        """
        Open a streamed GET for ``url``.

        The returned stream owns its client; close it with ``aclose()`` once the
        body has been forwarded, whatever the outcome.
        """
        client = self._client()
        request = client.build_request("GET", url, headers=self.rotator.media_headers(self.config.referer))
        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            raise NetworkError(f"Transport error fetching {url}: {e}") from e
        except BaseException:
            await client.aclose()
            raise
        return MediaStream(response=response, client=client)
