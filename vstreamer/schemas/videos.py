"""Pydantic schemas for video resources and engagement counters."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..models import Reaction


class VideoResponse(BaseModel):
    """Serialized representation of a stored video."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    title: str
    description: str | None = None
    category: str | None = None
    tags: list[str] = Field(default_factory=list)
    video_url: str
    thumbnail_url: str
    like_count: int = 0
    dislike_count: int = 0
    view_count: int = 0
    created_at: datetime
    updated_at: datetime | None = None


class VideoListResponse(BaseModel):
    items: list[VideoResponse]


class VideoMessageResponse(BaseModel):
    message: str
    video: VideoResponse | None = None


class ReactionRequest(BaseModel):
    """Body of ``POST /video/{id}/reaction``; ``videoId`` is optional and must match the path."""

    model_config = ConfigDict(populate_by_name=True)

    video_id: UUID | None = Field(default=None, alias="videoId")
    desired: Reaction


class LegacyReactionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    video_id: UUID = Field(..., alias="videoId")


class ReactionResponse(BaseModel):
    video_id: UUID
    likes: int
    dislikes: int
    reaction: Reaction | None = None


class EngagementResponse(BaseModel):
    video_id: UUID
    like_count: int
    dislike_count: int
    view_count: int
    comment_count: int
    viewer_reaction: Reaction | None = None


__all__ = [
    "VideoResponse",
    "VideoListResponse",
    "VideoMessageResponse",
    "ReactionRequest",
    "LegacyReactionRequest",
    "ReactionResponse",
    "EngagementResponse",
]
