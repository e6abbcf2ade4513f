"""
Structured Data Parser - JSON-LD blocks embedded in post pages.

Blocks are walked with an explicit stack and a node budget, so arbitrarily
deep or adversarial JSON cannot exhaust the interpreter stack.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterator, List, Optional, Tuple

import structlog
from bs4 import BeautifulSoup, Tag

logger = structlog.get_logger(__name__)

MEDIA_KEY_RE = re.compile(r"image|media|url|thumbnail|video|photo", re.IGNORECASE)
TEXT_KEYS = ("articleBody", "text", "description")


def parse_json_ld(soup: BeautifulSoup) -> List[Any]:
    """Parse every ``application/ld+json`` block; malformed blocks are skipped."""
    blocks: List[Any] = []
    for index, script in enumerate(soup.find_all("script", attrs={"type": "application/ld+json"})):
        if not isinstance(script, Tag):
            continue
        raw = script.string or script.get_text()
        if not raw or not raw.strip():
            continue
        try:
            blocks.append(json.loads(raw.strip()))
        except ValueError as e:
            logger.debug("Skipping malformed JSON-LD block", block=index, error=str(e))
    return blocks


def walk(data: Any, max_nodes: int = 10_000) -> Iterator[Tuple[Optional[str], Any]]:
    """
    Yield ``(key, value)`` for every scalar in ``data`` in document order.

    List elements inherit the key of the list that holds them. Walking stops
    silently once ``max_nodes`` nodes have been visited.
    """
    stack: List[Tuple[Optional[str], Any]] = [(None, data)]
    visited = 0
    while stack:
        if visited >= max_nodes:
            logger.debug("Structured data node budget exhausted", max_nodes=max_nodes)
            return
        key, node = stack.pop()
        visited += 1
        if isinstance(node, dict):
            stack.extend(reversed([(str(k), v) for k, v in node.items()]))
        elif isinstance(node, list):
            stack.extend(reversed([(key, item) for item in node]))
        else:
            yield key, node


def media_strings(data: Any, max_nodes: int = 10_000) -> Iterator[str]:
    """String values whose key suggests an image, media item or URL."""
    for key, value in walk(data, max_nodes):
        if key and isinstance(value, str) and MEDIA_KEY_RE.search(key):
            yield value


def find_text(data: Any, max_nodes: int = 10_000) -> str:
    """First non-empty post body, preferring ``articleBody`` over ``text`` over ``description``."""
    found = {}
    for key, value in walk(data, max_nodes):
        if key in TEXT_KEYS and key not in found and isinstance(value, str) and value.strip():
            found[key] = value.strip()
    for key in TEXT_KEYS:
        if key in found:
            return found[key]
    return ""
