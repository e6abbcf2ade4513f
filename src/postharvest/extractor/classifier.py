"""
Media classifier: separates genuine post media from page chrome.

LinkedIn markup interleaves post images with profile photos, company logos,
reaction emoji and UI icons under overlapping class names, so a single
positive signal is never enough. Acceptance is conjunctive: the URL must be
absolute HTTP(S), free of every blocklist token, long enough, carry an
allowlist token for its kind, and its alt text and container class must not
look like profile chrome.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple
from urllib.parse import urlparse

from .models import MediaKind

URL_BLOCKLIST: Tuple[str, ...] = (
    "profile-displayphoto",
    "profile-displaybackgroundimage",
    "company-logo",
    "logo",
    "avatar",
    "icon",
    "emoji",
    "ghost-person",
    "background",
    "slideshow",
    "carousel-control",
    "/in/",
    "static.licdn.com",
    "/sc/h/",
)

CONTEXT_BLOCKLIST: Tuple[str, ...] = ("profile", "logo", "avatar")

IMAGE_ALLOWLIST: Tuple[str, ...] = ("media", "image", "photo", "/dms/", "licdn")
VIDEO_ALLOWLIST: Tuple[str, ...] = ("video", ".mp4", ".m3u8", ".webm", "playlist")

DOCUMENT_EXTENSION_RE = re.compile(r"\.(pdf|docx?|pptx?|xlsx?)$", re.IGNORECASE)
NON_MEDIA_EXTENSION_RE = re.compile(r"\.(js|css|json|woff2?|ttf|html?|svg)$", re.IGNORECASE)

DOCUMENT_TYPE_LABELS = {
    "pdf": "PDF Document",
    "doc": "Word Document",
    "docx": "Word Document",
    "ppt": "PowerPoint Presentation",
    "pptx": "PowerPoint Presentation",
    "xls": "Excel Spreadsheet",
    "xlsx": "Excel Spreadsheet",
}


class SourceHint(str, Enum):
    """Where a candidate URL was discovered."""

    IMG_TAG = "img-tag"
    VIDEO_TAG = "video-tag"
    ANCHOR_HREF = "anchor-href"
    SCRIPT_PAYLOAD = "script-payload"
    OG_META = "og-meta"
    STRUCTURED_DATA = "structured-data"


@dataclass(frozen=True)
class ClassificationContext:
    alt_text: str = ""
    container_class: str = ""
    source_hint: SourceHint = SourceHint.IMG_TAG


@dataclass(frozen=True)
class Classification:
    accepted: bool
    kind: MediaKind
    reason: str = ""


def document_extension(url: str) -> Optional[str]:
    """Return the lower-cased document extension of ``url``'s path, if any."""
    try:
        path = urlparse(url).path
    except ValueError:
        return None
    match = DOCUMENT_EXTENSION_RE.search(path)
    return match.group(1).lower() if match else None


def document_type_label(url: str) -> str:
    ext = document_extension(url)
    return DOCUMENT_TYPE_LABELS.get(ext or "", "Document")


def _has_non_media_extension(url: str) -> bool:
    try:
        path = urlparse(url).path
    except ValueError:
        return False
    return NON_MEDIA_EXTENSION_RE.search(path) is not None


def _is_video_like(lowered: str) -> bool:
    return any(token in lowered for token in VIDEO_ALLOWLIST)


class MediaClassifier:
    """Decides whether a discovered URL is post content and of which kind."""

    def __init__(self, min_url_length: int = 30) -> None:
        self.min_url_length = min_url_length

    def presume_kind(self, url: str, hint: SourceHint) -> MediaKind:
        """Guess the media kind from the discovery site, then from the URL."""
        if hint is SourceHint.VIDEO_TAG:
            return MediaKind.VIDEO
        if hint is SourceHint.ANCHOR_HREF:
            return MediaKind.DOCUMENT
        if hint in (SourceHint.IMG_TAG, SourceHint.OG_META):
            return MediaKind.IMAGE
        if document_extension(url):
            return MediaKind.DOCUMENT
        if "/image/" in url.lower():
            return MediaKind.IMAGE
        if _is_video_like(url.lower()):
            return MediaKind.VIDEO
        return MediaKind.IMAGE

    def is_allowlisted(self, url: str, kind: MediaKind) -> bool:
        """True when ``url`` carries an allowlist token for ``kind``."""
        lowered = url.lower()
        if kind is MediaKind.DOCUMENT:
            return document_extension(url) is not None
        if kind is MediaKind.VIDEO:
            return _is_video_like(lowered)
        return any(token in lowered for token in IMAGE_ALLOWLIST)

    def rejection_reason(self, url: str, context: ClassificationContext, kind: MediaKind) -> Optional[str]:
        """Return why ``url`` is not post content, or None when it is."""
        if not url:
            return "empty"
        lowered = url.lower()
        if not lowered.startswith(("http://", "https://")):
            return "not-absolute-http"
        if len(url) <= self.min_url_length:
            return "too-short"
        if kind is not MediaKind.DOCUMENT and _has_non_media_extension(url):
            return "non-media-asset"
        for token in URL_BLOCKLIST:
            if token in lowered:
                return f"blocklisted:{token}"
        for value in (context.alt_text, context.container_class):
            value_lower = (value or "").lower()
            for token in CONTEXT_BLOCKLIST:
                if token in value_lower:
                    return f"context-blocklisted:{token}"
        if not self.is_allowlisted(url, kind):
            return "not-allowlisted"
        return None

    def classify(
        self,
        candidate_url: str,
        context: Optional[ClassificationContext] = None,
        kind: Optional[MediaKind] = None,
    ) -> Classification:
        """
        Classify one candidate URL.

        Args:
            candidate_url: URL or string discovered on the page
            context: Alt text, container class and discovery site
            kind: Force a kind instead of presuming it from the context

        Returns:
            Classification with the accepted flag and the (presumed) kind
        """
        context = context or ClassificationContext()
        url = (candidate_url or "").strip()
        presumed = kind or self.presume_kind(url, context.source_hint)
        reason = self.rejection_reason(url, context, presumed)
        return Classification(accepted=reason is None, kind=presumed, reason=reason or "")
