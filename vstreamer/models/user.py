"""SQLAlchemy ORM model for channel owners and viewers."""
from __future__ import annotations

import uuid

from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from vstreamer.database import Base
from .base import TimestampMixin


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    channel_name = Column(String(150), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(32), nullable=True)
    hashed_password = Column(String(255), nullable=False)
    logo_url = Column(String(2048), nullable=True)
    logo_key = Column(String(1024), nullable=True)

    videos = relationship("Video", back_populates="owner", cascade="all, delete-orphan")
    comments = relationship("Comment", back_populates="author", cascade="all, delete-orphan")
    reactions = relationship("VideoReaction", back_populates="user", cascade="all, delete-orphan")
    views = relationship("VideoView", back_populates="user", cascade="all, delete-orphan")


__all__ = ["User"]
