"""SQLAlchemy ORM models for videos and their engagement ledger."""
from __future__ import annotations

import uuid
from enum import StrEnum

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from vstreamer.database import Base
from .base import TimestampMixin, utcnow


class Reaction(StrEnum):
    """Stored state of a user's reaction row; no row means no reaction."""

    LIKE = "like"
    DISLIKE = "dislike"


class Video(TimestampMixin, Base):
    __tablename__ = "videos"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(100), nullable=True, index=True)
    video_url = Column(String(2048), nullable=False)
    video_key = Column(String(1024), nullable=False)
    thumbnail_url = Column(String(2048), nullable=False)
    thumbnail_key = Column(String(1024), nullable=False)
    # Cached projections of ``reactions``; reconciled by reconcile_service.
    like_count = Column(Integer, nullable=False, default=0, server_default="0")
    dislike_count = Column(Integer, nullable=False, default=0, server_default="0")

    owner = relationship("User", back_populates="videos")
    tag_rows = relationship(
        "VideoTag",
        back_populates="video",
        cascade="all, delete-orphan",
        order_by="VideoTag.position",
        lazy="selectin",
    )
    reactions = relationship("VideoReaction", back_populates="video", cascade="all, delete-orphan")
    views = relationship("VideoView", back_populates="video", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="video", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("like_count >= 0", name="ck_videos_like_count_non_negative"),
        CheckConstraint("dislike_count >= 0", name="ck_videos_dislike_count_non_negative"),
    )

    @property
    def tags(self) -> list[str]:
        return [row.tag for row in self.tag_rows]

    @tags.setter
    def tags(self, values: list[str]) -> None:
        self.tag_rows = [VideoTag(tag=value, position=index) for index, value in enumerate(values)]


class VideoTag(Base):
    __tablename__ = "video_tags"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    video_id = Column(UUID(as_uuid=True), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)
    tag = Column(String(100), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    video = relationship("Video", back_populates="tag_rows")


class VideoReaction(Base):
    __tablename__ = "video_reactions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    video_id = Column(UUID(as_uuid=True), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(String(16), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False
    )

    video = relationship("Video", back_populates="reactions")
    user = relationship("User", back_populates="reactions")

    __table_args__ = (
        UniqueConstraint("video_id", "user_id", name="uq_video_reactions_video_user"),
        CheckConstraint("value IN ('like', 'dislike')", name="ck_video_reactions_value"),
    )


class VideoView(Base):
    __tablename__ = "video_views"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    video_id = Column(UUID(as_uuid=True), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    video = relationship("Video", back_populates="views")
    user = relationship("User", back_populates="views")

    __table_args__ = (UniqueConstraint("video_id", "user_id", name="uq_video_views_video_user"),)


__all__ = ["Reaction", "Video", "VideoTag", "VideoReaction", "VideoView"]
