"""
BeautifulSoup-based mining of post markup.

Shared by the rendered-DOM and static-HTML strategies: both end up with an HTML
document and run the same prioritized selector cascades over it. The rendered
document simply contains more of the client-rendered post.
"""

from __future__ import annotations

import json
import re
from typing import Iterable, List, Optional
from urllib.parse import unquote, urljoin, urlparse

import structlog
from bs4 import BeautifulSoup, Tag

from .classifier import ClassificationContext, MediaClassifier, SourceHint, document_type_label
from .collector import MediaCollector
from .models import MediaKind

logger = structlog.get_logger(__name__)

_WHITESPACE_RE = re.compile(r"[ \t\r\f\v]+")
_BLANK_LINES_RE = re.compile(r"\n\s*\n+")


def clean_text(text: str) -> str:
    """Collapse runs of whitespace while keeping paragraph breaks."""
    text = _WHITESPACE_RE.sub(" ", text or "")
    text = _BLANK_LINES_RE.sub("\n\n", text)
    return "\n".join(line.strip() for line in text.split("\n")).strip()


def format_duration(value: Optional[str]) -> str:
    """Render a seconds count (``"165"``) as ``"2:45"``; pass labels through."""
    if not value:
        return "Unknown"
    value = value.strip()
    try:
        seconds = int(float(value))
    except ValueError:
        return value
    if seconds < 0:
        return "Unknown"
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


class PostSoupParser:
    """Runs the text, image, video and document selector cascades."""

    def __init__(self, classifier: MediaClassifier, placeholder: str) -> None:
        self.classifier = classifier
        self.placeholder = placeholder
        self.config = {
            "parser": "html.parser",
            "text_selectors": [
                ".feed-shared-update-v2__description",
                ".feed-shared-update-v2__commentary",
                ".feed-shared-text",
                ".update-components-text",
                ".attributed-text-segment-list__content",
                '[data-test-id="main-feed-activity-card__commentary"]',
                ".share-update-card__update-text",
                ".feed-shared-inline-show-more-text",
                "article .break-words",
                '[data-ad-preview="message"]',
            ],
            "image_selectors": [
                ".update-components-image img",
                ".feed-shared-image img",
                ".feed-shared-carousel img",
                ".update-components-carousel img",
                ".feed-images-content img",
                '[data-test-id*="image"] img',
                ".share-images img",
                "article img",
                "main img",
            ],
            "image_source_attrs": ["src", "data-delayed-url", "data-src", "data-ghost-url"],
            "video_selectors": ["video"],
            "document_selectors": ["a[href]"],
            "meta_text": [
                ("meta", {"property": "og:description"}),
                ("meta", {"name": "description"}),
            ],
        }

    def parse(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, self.config["parser"])

    # -- text ---------------------------------------------------------------

    def extract_text(self, soup: BeautifulSoup) -> str:
        """First non-empty selector match, then page metadata, then the placeholder."""
        for selector in self.config["text_selectors"]:
            element = soup.select_one(selector)
            if element is None:
                continue
            text = clean_text(element.get_text(" ", strip=True))
            if text:
                return text

        meta_text = self.extract_meta_text(soup)
        return meta_text or self.placeholder

    def extract_meta_text(self, soup: BeautifulSoup) -> str:
        """Social-preview description, then generic description, then title."""
        for name, attrs in self.config["meta_text"]:
            tag = soup.find(name, attrs=attrs)
            if isinstance(tag, Tag):
                content = clean_text(str(tag.get("content") or ""))
                if content:
                    return content
        title = soup.find("title")
        if isinstance(title, Tag):
            return clean_text(title.get_text(" ", strip=True))
        return ""

    # -- media --------------------------------------------------------------

    def collect_media(self, soup: BeautifulSoup, collector: MediaCollector, base_url: str = "") -> None:
        """Classify every image, video and document candidate into ``collector``."""
        self.collect_images(soup, collector, base_url)
        self.collect_videos(soup, collector, base_url)
        self.collect_documents(soup, collector, base_url)

    def _absolute(self, value: Optional[str], base_url: str) -> str:
        value = (value or "").strip()
        if not value or value.startswith("data:"):
            return ""
        if base_url and not value.startswith(("http://", "https://")):
            return urljoin(base_url, value)
        return value

    @staticmethod
    def _container_class(element: Tag) -> str:
        own = " ".join(element.get("class") or [])
        parent = element.find_parent(attrs={"class": True})
        parent_class = " ".join(parent.get("class") or []) if isinstance(parent, Tag) else ""
        return f"{own} {parent_class}".strip()

    def _image_source(self, img: Tag, base_url: str) -> str:
        for attr in self.config["image_source_attrs"]:
            candidate = self._absolute(img.get(attr), base_url)
            if candidate.startswith(("http://", "https://")):
                return candidate
        return ""

    def _select_all(self, soup: BeautifulSoup, selectors: Iterable[str]) -> List[Tag]:
        seen: set[int] = set()
        ordered: List[Tag] = []
        for selector in selectors:
            for element in soup.select(selector):
                if id(element) in seen:
                    continue
                seen.add(id(element))
                ordered.append(element)
        return ordered

    def collect_images(self, soup: BeautifulSoup, collector: MediaCollector, base_url: str = "") -> None:
        for img in self._select_all(soup, self.config["image_selectors"]):
            src = self._image_source(img, base_url)
            alt = str(img.get("alt") or "").strip()
            context = ClassificationContext(
                alt_text=alt,
                container_class=self._container_class(img),
                source_hint=SourceHint.IMG_TAG,
            )
            result = self.classifier.classify(src, context, kind=MediaKind.IMAGE)
            if result.accepted:
                collector.add(MediaKind.IMAGE, src, alt=alt or "Post image")
            elif src:
                logger.debug("Image rejected", url=src, reason=result.reason)

        og_image = soup.find("meta", attrs={"property": "og:image"})
        if isinstance(og_image, Tag):
            src = self._absolute(str(og_image.get("content") or ""), base_url)
            alt_tag = soup.find("meta", attrs={"property": "og:image:alt"})
            alt = str(alt_tag.get("content") or "") if isinstance(alt_tag, Tag) else ""
            context = ClassificationContext(alt_text=alt, source_hint=SourceHint.OG_META)
            if self.classifier.classify(src, context, kind=MediaKind.IMAGE).accepted:
                collector.add(MediaKind.IMAGE, src, alt=alt or "Post image")

    def _video_sources(self, video: Tag, base_url: str) -> List[str]:
        sources = [self._absolute(video.get("src"), base_url)]
        for source in video.find_all("source"):
            sources.append(self._absolute(source.get("src"), base_url))

        data_sources = video.get("data-sources")
        if data_sources:
            try:
                decoded = json.loads(str(data_sources))
            except ValueError:
                decoded = []
            for entry in decoded if isinstance(decoded, list) else []:
                if isinstance(entry, dict):
                    sources.append(self._absolute(entry.get("src"), base_url))
        return [src for src in sources if src]

    def collect_videos(self, soup: BeautifulSoup, collector: MediaCollector, base_url: str = "") -> None:
        for index, video in enumerate(self._select_all(soup, self.config["video_selectors"]), start=1):
            title = str(video.get("aria-label") or video.get("title") or f"Video {index}").strip()
            duration = format_duration(video.get("data-duration"))
            context = ClassificationContext(
                alt_text=title,
                container_class=self._container_class(video),
                source_hint=SourceHint.VIDEO_TAG,
            )
            for src in self._video_sources(video, base_url):
                if self.classifier.classify(src, context, kind=MediaKind.VIDEO).accepted:
                    collector.add(MediaKind.VIDEO, src, title=title, duration=duration)
                    break

    def collect_documents(self, soup: BeautifulSoup, collector: MediaCollector, base_url: str = "") -> None:
        for anchor in self._select_all(soup, self.config["document_selectors"]):
            href = self._absolute(anchor.get("href"), base_url)
            if not href:
                continue
            context = ClassificationContext(
                alt_text=str(anchor.get("aria-label") or ""),
                container_class=self._container_class(anchor),
                source_hint=SourceHint.ANCHOR_HREF,
            )
            if not self.classifier.classify(href, context, kind=MediaKind.DOCUMENT).accepted:
                continue
            title = clean_text(anchor.get_text(" ", strip=True)) or unquote(urlparse(href).path.rsplit("/", 1)[-1])
            collector.add(
                MediaKind.DOCUMENT,
                href,
                title=title or "Document",
                type=document_type_label(href),
                size="Unknown",
            )
