"""Convenience exports for ORM models."""
from .comment import Comment
from .user import User
from .video import Reaction, Video, VideoReaction, VideoTag, VideoView

__all__ = [
    "Comment",
    "Reaction",
    "User",
    "Video",
    "VideoReaction",
    "VideoTag",
    "VideoView",
]
