"""Pydantic schemas for channel registration and login."""
from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserProfile(BaseModel):
    """Public view of a channel account."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    channel_name: str
    email: EmailStr
    phone: str | None = None
    logo_url: str | None = None
    created_at: datetime | None = None


class AuthResponse(UserProfile):
    token: str
    token_type: str = "bearer"


__all__ = ["LoginRequest", "UserProfile", "AuthResponse"]
