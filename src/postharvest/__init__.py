"""
PostHarvest - LinkedIn post text and media extractor.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config import Config
from .extractor import ExtractedContent, ExtractorManager

__all__ = ["__version__", "Config", "ExtractedContent", "ExtractorManager"]
