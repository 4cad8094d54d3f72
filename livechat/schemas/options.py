"""
Session Schemas

Pydantic models for choosing a live stream and for the parameters that are
replayed on every get_live_chat request.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from livechat.schemas.chat import ImageItem


class ChatTarget(BaseModel):
    """Identity selector: exactly one of channel_id, live_id or handle."""

    channel_id: Optional[str] = None
    live_id: Optional[str] = None
    handle: Optional[str] = None

    @model_validator(mode="after")
    def _exactly_one(self) -> "ChatTarget":
        given = [v for v in (self.channel_id, self.live_id, self.handle) if v]
        if len(given) != 1:
            raise ValueError("Required exactly one of channel_id, live_id or handle.")
        return self

    def page_path(self) -> str:
        """Path of the page that embeds the live chat bootstrap data."""
        if self.channel_id:
            return f"/channel/{self.channel_id}/live"
        if self.live_id:
            return f"/watch?v={self.live_id}"
        handle = self.handle if self.handle.startswith("@") else f"@{self.handle}"
        return f"/{handle}/live"


class FetchOptions(BaseModel):
    """Opaque values replayed verbatim on each batch request."""

    api_key: str
    client_version: str
    continuation: str


class VideoDetails(BaseModel):
    """Subset of the page's videoDetails block."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    video_id: str = Field(alias="videoId")
    title: str = ""
    channel_id: str = Field(default="", alias="channelId")
    author: str = ""
    is_live: bool = Field(default=False, alias="isLive")
    is_live_content: bool = Field(default=False, alias="isLiveContent")
    view_count: Optional[str] = Field(default=None, alias="viewCount")
    short_description: str = Field(default="", alias="shortDescription")
    keywords: List[str] = Field(default_factory=list)
    thumbnail: Optional[ImageItem] = None


class LivePageOptions(FetchOptions):
    """Everything the bootstrapper extracts from the live page."""

    live_id: str
    title: str
    details: Optional[VideoDetails] = None

    def fetch_options(self) -> FetchOptions:
        return FetchOptions(
            api_key=self.api_key,
            client_version=self.client_version,
            continuation=self.continuation,
        )
