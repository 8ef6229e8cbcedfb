"""Convenience exports for schema layer."""
from .auth import AuthResponse, LoginRequest, UserProfile
from .comments import (
    CommentCreate,
    CommentListResponse,
    CommentMessageResponse,
    CommentResponse,
    CommentUpdate,
)
from .videos import (
    EngagementResponse,
    LegacyReactionRequest,
    ReactionRequest,
    ReactionResponse,
    VideoListResponse,
    VideoMessageResponse,
    VideoResponse,
)

__all__ = [
    "AuthResponse",
    "LoginRequest",
    "UserProfile",
    "CommentCreate",
    "CommentUpdate",
    "CommentResponse",
    "CommentListResponse",
    "CommentMessageResponse",
    "EngagementResponse",
    "LegacyReactionRequest",
    "ReactionRequest",
    "ReactionResponse",
    "VideoListResponse",
    "VideoMessageResponse",
    "VideoResponse",
]
