"""
PostHarvest Extraction Module - Multi-Strategy Cascade Extractor

Strategies, tried in order until one returns content:
1. Rendered DOM: remote headless browser (Browserless over CDP)
2. Static HTML: direct HTTP fetch, no script execution
3. Script payload mining: regex and structured-data mining of inline state

Every discovered media URL passes through the MediaClassifier and the
deduplicating MediaCollector before it reaches a result.
"""

from .classifier import Classification, ClassificationContext, MediaClassifier, SourceHint
from .collector import MediaCollector, filename_for
from .demo import demo_content
from .manager import ExtractorManager
from .models import (
    DocumentItem,
    DownloadRequest,
    ExtractedContent,
    ExtractRequest,
    ImageItem,
    MediaKind,
    SelectionSet,
    VideoItem,
)
from .protocols import Extractor
from .rendered_extractor import RenderedDomExtractor
from .script_extractor import ScriptPayloadExtractor
from .static_extractor import StaticHtmlExtractor

__all__ = [
    "Classification",
    "ClassificationContext",
    "MediaClassifier",
    "SourceHint",
    "MediaCollector",
    "filename_for",
    "demo_content",
    "ExtractorManager",
    "DocumentItem",
    "DownloadRequest",
    "ExtractedContent",
    "ExtractRequest",
    "ImageItem",
    "MediaKind",
    "SelectionSet",
    "VideoItem",
    "Extractor",
    "RenderedDomExtractor",
    "ScriptPayloadExtractor",
    "StaticHtmlExtractor",
]
