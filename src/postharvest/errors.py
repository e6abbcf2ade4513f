"""
Exception hierarchy for the extraction pipeline.

Strategy-level failures (``UnconfiguredError``, ``RenderingFailedError``,
``HttpStatusError``, ``NetworkError``, ``NoContentError``) are swallowed by the
orchestrator, which moves on to the next strategy. ``InvalidInputError`` and
``AllStrategiesFailedError`` are terminal and reach the caller.
"""

from __future__ import annotations

from typing import List, Optional, Tuple


class ExtractionError(Exception):
    """Base class for every error raised by the extraction pipeline."""


class InvalidInputError(ExtractionError, ValueError):
    """Raised when the input URL is malformed or belongs to a foreign domain."""


class UnconfiguredError(ExtractionError):
    """Raised when a strategy lacks the configuration it needs to run."""


class RenderingFailedError(ExtractionError):
    """Raised when the remote rendering service fails or times out."""


class NetworkError(ExtractionError):
    """Raised on transport-level failures (DNS, connect, read timeouts)."""


class HttpStatusError(ExtractionError):
    """Raised when the origin answers with a non-2xx status."""

    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"HTTP {status_code} while fetching {url}")
        self.status_code = status_code
        self.url = url


class NoContentError(ExtractionError):
    """Raised when a strategy ran but recovered neither text nor media."""


class AllStrategiesFailedError(ExtractionError):
    """Aggregate failure: every strategy in the cascade failed."""

    message = "Failed to extract post content"

    def __init__(self, url: str, failures: Optional[List[Tuple[str, str]]] = None) -> None:
        super().__init__(self.message)
        self.url = url
        self.failures = failures or []

    def summary(self) -> List[str]:
        """Return one ``strategy: reason`` line per failed strategy."""
        return [f"{name}: {reason}" for name, reason in self.failures]
