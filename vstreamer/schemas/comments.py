"""Pydantic schemas for video comments."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class CommentCreate(BaseModel):
    video_id: UUID
    comment_text: str = Field(..., min_length=1, max_length=2000)


class CommentUpdate(BaseModel):
    comment_text: str = Field(..., min_length=1, max_length=2000)


class CommentResponse(BaseModel):
    id: UUID
    video_id: UUID
    user_id: UUID
    channel_name: str | None = None
    logo_url: str | None = None
    comment_text: str
    created_at: datetime
    updated_at: datetime | None = None


class CommentListResponse(BaseModel):
    items: list[CommentResponse]


class CommentMessageResponse(BaseModel):
    message: str
    comment: CommentResponse | None = None


__all__ = [
    "CommentCreate",
    "CommentUpdate",
    "CommentResponse",
    "CommentListResponse",
    "CommentMessageResponse",
]
