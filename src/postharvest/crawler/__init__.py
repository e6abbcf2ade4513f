"""
HTTP fetching with rotated browser fingerprints.
"""

from .http_client import FetchedPage, MediaStream, PageFetcher
from .user_agents import UserAgentRotator

__all__ = ["FetchedPage", "MediaStream", "PageFetcher", "UserAgentRotator"]
