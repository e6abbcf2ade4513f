"""
Script-payload-mining strategy.

Client-rendered post pages ship the real post data as inline JSON state even
when the visible DOM is a skeleton. This strategy treats all inline script
content as unstructured text and mines it in four passes, in order:

1. key/value shapes (``"imageUrl"``, media ``"url"``, ``"images"``/``"media"``
   arrays, vector-image artifacts) and escaped CDN URLs
2. bare content identifiers, expanded into CDN URLs per resolution
3. JSON-LD blocks, walked as structured data
4. bare ``https://`` URLs anywhere in the script text

Videos are mined alongside with their own key/value and ``.mp4`` patterns.
Every candidate goes through the classifier and the collector, so the first
sighting of a URL wins.
"""

from __future__ import annotations

import asyncio
import html as html_lib
import json
import re
from typing import Iterable, List, Optional, Tuple
from urllib.parse import unquote, urlparse

import structlog
from bs4 import BeautifulSoup, Tag

from postharvest.config.config import ExtractionSettings
from postharvest.crawler.http_client import PageFetcher
from postharvest.errors import NoContentError

from . import structured_data
from .classifier import ClassificationContext, MediaClassifier, SourceHint, document_type_label
from .collector import MediaCollector
from .models import ExtractedContent, MediaKind
from .soup_extractor import PostSoupParser, clean_text

logger = structlog.get_logger(__name__)

# Pass 1: key/value shapes
IMAGE_URL_RE = re.compile(r'"imageUrl"\s*:\s*"((?:[^"\\]|\\.)+)"')
MEDIA_URL_RE = re.compile(r'"url"\s*:\s*"((?:[^"\\]|\\.)*?(?:media|image|dms|licdn)(?:[^"\\]|\\.)*)"')
MEDIA_ARRAY_RE = re.compile(r'"(?:images|media)"\s*:\s*\[([^\]]*)\]')
VECTOR_IMAGE_RE = re.compile(
    r'"artifacts"\s*:\s*\[(?P<artifacts>[^\]]*)\]\s*,\s*"rootUrl"\s*:\s*"(?P<root>(?:[^"\\]|\\.)+)"'
)
ARTIFACT_RE = re.compile(
    r'"width"\s*:\s*(?P<width>\d+)[^{}]*?"fileIdentifyingUrlPathSegment"\s*:\s*"(?P<segment>(?:[^"\\]|\\.)+)"'
)
CDN_URL_RE = re.compile(r"https?:(?:\\?/){2}media\.licdn\.com(?:\\?/)dms(?:\\?/)image[^\s\"'<>]*")
QUOTED_RE = re.compile(r'"((?:[^"\\]|\\.)*)"')

# Pass 2: content identifiers of feed images
CONTENT_ID_RE = re.compile(r"\b([CD]\d[0-9A-Z]22AQ[A-Za-z0-9_-]{10,})")
ID_PATH_TEMPLATES: Tuple[str, ...] = (
    "/dms/image/v2/{id}/feedshare-shrink_2048_1536/0/",
    "/dms/image/v2/{id}/feedshare-shrink_1280/0/",
    "/dms/image/v2/{id}/feedshare-shrink_800/0/",
)

# Pass 4: bare URLs
BARE_URL_RE = re.compile(r"https?://[^\s\"'<>\\\]\[{}]+")

# Videos
VIDEO_URL_RE = re.compile(r'"(?:videoUrl|progressiveUrl|streamingLocation)"\s*:\s*"((?:[^"\\]|\\.)+)"')
MP4_URL_RE = re.compile(r"https?:(?:\\?/){2}[^\s\"'<>]+?\.mp4(?:[^\s\"'<>]*)")

# Post text inside script state
COMMENTARY_RE = re.compile(r'"commentary"\s*:\s*\{[^{}]*?"text"\s*:\s*"((?:[^"\\]|\\.)*)"')

_UNICODE_ESCAPE_RE = re.compile(r"\\u([0-9a-fA-F]{4})")


def normalize_candidate(raw: str, cdn_origin: str) -> str:
    """
    Turn an escaped script fragment into a usable URL.

    Decodes ``\\uXXXX`` escapes, unescapes ``\\/`` and ``\\"``, resolves HTML
    entities, and prefixes partial CDN paths with ``cdn_origin``.
    """
    value = _UNICODE_ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 16)), raw or "")
    value = value.replace("\\/", "/").replace('\\"', '"')
    value = html_lib.unescape(value).strip().strip("\"'\\")
    if value.startswith("//"):
        return f"https:{value}"
    if value.startswith(("/dms/", "dms/", "/playlist/", "playlist/")):
        return f"{cdn_origin.rstrip('/')}/{value.lstrip('/')}"
    return value


def _decode_json_string(raw: str) -> str:
    try:
        return json.loads(f'"{raw}"')
    except ValueError:
        return normalize_candidate(raw, "")


class ScriptPayloadExtractor:
    """Regex and structured-data mining over inline script blocks."""

    name = "script"

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
        content = await asyncio.to_thread(self.extract_from_html, page.html)
        if content.is_empty(self.settings.placeholder_text):
            raise NoContentError(f"No post content in script payloads of {url}")
        return content

    # -- orchestration of passes -------------------------------------------

    def extract_from_html(self, html: str) -> ExtractedContent:
        soup = BeautifulSoup(html, "html.parser")
        payload = self.script_payload(soup)
        json_ld = structured_data.parse_json_ld(soup)
        collector = MediaCollector()

        self._accept_all(self.mine_key_values(payload), collector, None)
        self._accept_all(self.mine_identifiers(payload, collector), collector, MediaKind.IMAGE)
        for block in json_ld:
            self._accept_all(
                structured_data.media_strings(block, self.settings.max_structured_nodes),
                collector,
                None,
                hint=SourceHint.STRUCTURED_DATA,
            )
        self._accept_all(self.mine_bare_urls(payload), collector, None)
        self._accept_all(self.mine_videos(payload), collector, MediaKind.VIDEO)

        text = self.extract_text(soup, payload, json_ld)
        return collector.build(text, placeholder=self.settings.placeholder_text)

    @staticmethod
    def script_payload(soup: BeautifulSoup) -> str:
        """Concatenated inline script state (JSON-LD excluded) plus hidden ``<code>`` state blocks."""
        parts: List[str] = []
        for script in soup.find_all("script"):
            if not isinstance(script, Tag) or script.get("src"):
                continue
            if script.get("type") == "application/ld+json":
                continue
            parts.append(script.string or script.get_text())
        for code in soup.select('code[id^="bpr-guid"], code[id^="datalet-bpr-guid"]'):
            parts.append(code.get_text())
        return "\n".join(part for part in parts if part)

    def _accept_all(
        self,
        candidates: Iterable[str],
        collector: MediaCollector,
        kind: Optional[MediaKind],
        hint: SourceHint = SourceHint.SCRIPT_PAYLOAD,
    ) -> None:
        for raw in candidates:
            candidate = normalize_candidate(raw, self.settings.cdn_origin)
            context = ClassificationContext(source_hint=hint)
            result = self.classifier.classify(candidate, context, kind=kind)
            if not result.accepted:
                continue
            if result.kind is MediaKind.IMAGE:
                collector.add(MediaKind.IMAGE, candidate, alt="Post image")
            elif result.kind is MediaKind.VIDEO:
                collector.add(MediaKind.VIDEO, candidate, title="Post video", duration="Unknown")
            else:
                name = unquote(urlparse(candidate).path.rsplit("/", 1)[-1]) or "Document"
                collector.add(
                    MediaKind.DOCUMENT,
                    candidate,
                    title=name,
                    type=document_type_label(candidate),
                    size="Unknown",
                )

    # -- pass 1 -------------------------------------------------------------

    def mine_key_values(self, payload: str) -> List[str]:
        """Key/value and CDN-shape matches, ordered by position in the payload."""
        found: List[Tuple[int, str]] = []
        for match in IMAGE_URL_RE.finditer(payload):
            found.append((match.start(), match.group(1)))
        for match in MEDIA_URL_RE.finditer(payload):
            found.append((match.start(), match.group(1)))
        for match in MEDIA_ARRAY_RE.finditer(payload):
            for quoted in QUOTED_RE.finditer(match.group(1)):
                found.append((match.start(1) + quoted.start(), quoted.group(1)))
        for match in VECTOR_IMAGE_RE.finditer(payload):
            best = self._largest_artifact(match.group("artifacts"))
            if best:
                found.append((match.start(), normalize_candidate(match.group("root"), "") + best))
        for match in CDN_URL_RE.finditer(payload):
            found.append((match.start(), match.group(0)))
        found.sort(key=lambda item: item[0])
        return [candidate for _, candidate in found]

    @staticmethod
    def _largest_artifact(artifacts: str) -> str:
        best_width = -1
        best_segment = ""
        for artifact in ARTIFACT_RE.finditer(artifacts):
            width = int(artifact.group("width"))
            if width > best_width:
                best_width = width
                best_segment = normalize_candidate(artifact.group("segment"), "")
        return best_segment

    # -- pass 2 -------------------------------------------------------------

    def mine_identifiers(self, payload: str, collector: MediaCollector) -> List[str]:
        """Synthesize CDN URLs for identifiers that no collected URL already carries."""
        known = " ".join(str(item.url) for item in collector.items(MediaKind.IMAGE))
        seen: set[str] = set()
        candidates: List[str] = []
        for match in CONTENT_ID_RE.finditer(payload):
            identifier = match.group(1)
            if identifier in seen or identifier in known:
                continue
            seen.add(identifier)
            for template in ID_PATH_TEMPLATES:
                candidates.append(self.settings.cdn_origin.rstrip("/") + template.format(id=identifier))
        return candidates

    # -- pass 4 -------------------------------------------------------------

    @staticmethod
    def mine_bare_urls(payload: str) -> List[str]:
        unescaped = _UNICODE_ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 16)), payload).replace("\\/", "/")
        return [match.group(0).rstrip(".,;)") for match in BARE_URL_RE.finditer(unescaped)]

    # -- videos -------------------------------------------------------------

    @staticmethod
    def mine_videos(payload: str) -> List[str]:
        found: List[Tuple[int, str]] = []
        for match in VIDEO_URL_RE.finditer(payload):
            found.append((match.start(), match.group(1)))
        for match in MP4_URL_RE.finditer(payload):
            found.append((match.start(), match.group(0)))
        found.sort(key=lambda item: item[0])
        return [candidate for _, candidate in found]

    # -- text ---------------------------------------------------------------

    def extract_text(self, soup: BeautifulSoup, payload: str, json_ld: List[object]) -> str:
        """Post body from JSON-LD, then script state, then page metadata."""
        for block in json_ld:
            text = structured_data.find_text(block, self.settings.max_structured_nodes)
            if text:
                return clean_text(text)

        match = COMMENTARY_RE.search(payload)
        if match:
            text = clean_text(_decode_json_string(match.group(1)))
            if text:
                return text

        return self.parser.extract_meta_text(soup) or self.settings.placeholder_text
