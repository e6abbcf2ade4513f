"""
Input validation utilities for PostHarvest.

Post URLs are checked before any network activity: they must be absolute
HTTP(S) URLs on the target domain. Proxy URLs only need to be absolute HTTP(S).
"""

from __future__ import annotations

from typing import List
from urllib.parse import urlparse

from pydantic import BaseModel, Field

from postharvest.errors import InvalidInputError


class URLValidationRules(BaseModel):
    """Rules for URL validation."""

    allowed_schemes: List[str] = Field(default=["http", "https"])
    target_domain: str = "linkedin.com"
    max_url_length: int = 2048


class InputValidator:
    """Validates user-supplied URLs."""

    def __init__(self, url_rules: URLValidationRules | None = None):
        self.url_rules = url_rules or URLValidationRules()

    def _parse_absolute(self, raw: str) -> tuple[str, str]:
        if not isinstance(raw, str):
            raise InvalidInputError("URL must be a string")

        url = raw.strip()
        if not url:
            raise InvalidInputError("URL must not be empty")
        if len(url) > self.url_rules.max_url_length:
            raise InvalidInputError(f"URL exceeds maximum length of {self.url_rules.max_url_length}")

        try:
            parsed = urlparse(url)
        except ValueError as e:
            raise InvalidInputError(f"Invalid URL format: {e}") from e

        if parsed.scheme.lower() not in self.url_rules.allowed_schemes:
            raise InvalidInputError(f"Invalid URL scheme: {parsed.scheme or '<none>'}")
        if not parsed.hostname:
            raise InvalidInputError("Must be a valid URL")

        return url, parsed.hostname.lower()

    def validate_post_url(self, raw: str) -> str:
        """
        Validate a post URL.

        Returns:
            The trimmed URL

        Raises:
            InvalidInputError: If the URL is malformed or not on the target domain
        """
        url, hostname = self._parse_absolute(raw)
        if self.url_rules.target_domain.lower() not in hostname:
            raise InvalidInputError(f"Must be a {self.url_rules.target_domain} URL")
        return url

    def validate_proxy_url(self, raw: str) -> str:
        """Validate a URL handed to the media proxy."""
        url, _ = self._parse_absolute(raw)
        return url


def validate_post_url(raw: str, target_domain: str = "linkedin.com") -> str:
    """Validate a post URL against ``target_domain``."""
    return InputValidator(URLValidationRules(target_domain=target_domain)).validate_post_url(raw)


def validate_proxy_url(raw: str) -> str:
    """Validate a proxy target URL."""
    return InputValidator().validate_proxy_url(raw)
