"""Aggregate router exports."""
from .comments import router as comments_router
from .users import router as users_router
from .videos import router as videos_router

__all__ = ["comments_router", "users_router", "videos_router"]
