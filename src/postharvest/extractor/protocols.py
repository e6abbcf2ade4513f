"""
Protocols for pluggable extraction strategies.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import ExtractedContent


@runtime_checkable
class Extractor(Protocol):
    """One self-contained way of extracting a post, tried in cascade order."""

    name: str

    async def extract(self, url: str) -> ExtractedContent:
        """Extract content from the post at ``url``.

        Args:
            url: Validated post URL

        Returns:
            ExtractedContent with text and classified media

        Raises:
            ExtractionError: When this strategy cannot produce content
        """
        ...
