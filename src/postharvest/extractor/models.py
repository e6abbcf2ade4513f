"""
Data models for extraction requests and results.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Literal, Set, Union

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

PLACEHOLDER_TEXT = "No text content found in this post."


class MediaKind(str, Enum):
    """Kinds of media a post can carry."""

    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ImageItem(_FrozenModel):
    kind: Literal["image"] = "image"
    url: HttpUrl
    alt: str = ""
    filename: str


class VideoItem(_FrozenModel):
    kind: Literal["video"] = "video"
    url: HttpUrl
    title: str = "Video"
    duration: str = "Unknown"
    filename: str


class DocumentItem(_FrozenModel):
    kind: Literal["document"] = "document"
    url: HttpUrl
    title: str = "Document"
    type: str = "Document"
    size: str = "Unknown"
    filename: str


MediaItem = Union[ImageItem, VideoItem, DocumentItem]


class ExtractedContent(_FrozenModel):
    """Normalized result of one extraction call."""

    text: str = PLACEHOLDER_TEXT
    images: List[ImageItem] = Field(default_factory=list)
    videos: List[VideoItem] = Field(default_factory=list)
    documents: List[DocumentItem] = Field(default_factory=list)

    @property
    def has_media(self) -> bool:
        return bool(self.images or self.videos or self.documents)

    def is_empty(self, placeholder: str = PLACEHOLDER_TEXT) -> bool:
        """True when neither text (beyond the placeholder) nor media was found."""
        return not self.has_media and (not self.text.strip() or self.text == placeholder)


class ExtractRequest(BaseModel):
    """Body of ``POST /extract``."""

    model_config = ConfigDict(populate_by_name=True)

    url: str
    demo_mode: bool = Field(default=False, alias="demoMode")

    @field_validator("url", mode="before")
    @classmethod
    def strip_url(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v


class SelectionSet(BaseModel):
    """Subset of an ``ExtractedContent`` chosen for packaging."""

    model_config = ConfigDict(populate_by_name=True)

    include_text: bool = Field(default=True, alias="includeText")
    image_urls: Set[str] = Field(default_factory=set, alias="imageUrls")
    video_urls: Set[str] = Field(default_factory=set, alias="videoUrls")
    document_urls: Set[str] = Field(default_factory=set, alias="documentUrls")

    @classmethod
    def everything(cls, content: ExtractedContent) -> "SelectionSet":
        """Select every item of ``content``."""
        return cls(
            include_text=True,
            image_urls={str(item.url) for item in content.images},
            video_urls={str(item.url) for item in content.videos},
            document_urls={str(item.url) for item in content.documents},
        )


class DownloadRequest(BaseModel):
    """Body of ``POST /download``."""

    content: ExtractedContent
    selection: SelectionSet | None = None
