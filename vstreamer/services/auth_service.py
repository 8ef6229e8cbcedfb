"""Channel registration, login and bearer-token resolution."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, UploadFile, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_session
from ..models import User
from ..security.secrets import MissingSecretError, require_secret
from .media_service import release_media, store_media, validate_upload
from .spaces_service import LOGO_FOLDER

logger = logging.getLogger(__name__)

_security = HTTPBearer(auto_error=False)
_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
_email_adapter = TypeAdapter(EmailStr)


@lru_cache(maxsize=1)
def _get_jwt_secret() -> str:
    try:
        return require_secret("JWT_SECRET_KEY")
    except MissingSecretError as exc:
        raise RuntimeError(str(exc)) from exc


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt."""

    return _pwd_context.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """Verify that ``password`` matches ``hashed_password``."""

    try:
        return _pwd_context.verify(password, hashed_password)
    except ValueError:
        logger.warning("Stored password hash could not be parsed")
        return False


def create_access_token(subject: UUID, *, expires_minutes: Optional[int] = None) -> str:
    """Create a signed JWT holding the provided ``subject``."""

    settings = get_settings()
    expire_delta = timedelta(minutes=expires_minutes or settings.jwt_expires_minutes)
    now = datetime.now(timezone.utc)
    payload = {"sub": str(subject), "exp": now + expire_delta, "iat": now}
    return jwt.encode(payload, _get_jwt_secret(), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> UUID:
    """Decode and validate a JWT, returning the embedded subject UUID."""

    settings = get_settings()
    try:
        payload = jwt.decode(token, _get_jwt_secret(), algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc

    subject = payload.get("sub")
    if not subject:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    try:
        return UUID(subject)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload") from exc


def normalize_email(email: str) -> str:
    """Validate ``email`` and return it lowercased; invalid addresses raise 422."""

    candidate = (email or "").strip().lower()
    try:
        return _email_adapter.validate_python(candidate)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Invalid email address") from exc


def find_registration_conflict(db: Session, *, channel_name: str, email: str) -> User | None:
    return db.scalar(select(User).where(or_(User.channel_name == channel_name, User.email == email)))


async def register_user(
    db: Session,
    *,
    channel_name: str,
    email: str,
    password: str,
    phone: str | None = None,
    logo: UploadFile | None = None,
) -> User:
    """Persist a new channel, storing its logo in Spaces when supplied."""

    channel_name = channel_name.strip()
    email = normalize_email(email)
    if not channel_name:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Channel name cannot be empty")

    existing = find_registration_conflict(db, channel_name=channel_name, email=email)
    if existing is not None:
        field = "Email" if existing.email == email else "Channel name"
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"{field} already registered")

    user = User(
        channel_name=channel_name,
        email=email,
        phone=(phone or "").strip() or None,
        hashed_password=hash_password(password),
    )

    if logo is not None and (logo.filename or "").strip():
        validate_upload(logo, field="logo", allowed_prefix=get_settings().allowed_image_prefix)
        stored = await store_media(logo, folder=LOGO_FOLDER)
        user.logo_url = stored.url
        user.logo_key = stored.key

    try:
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError as exc:
        # Another signup claimed the channel name or email after the check above.
        db.rollback()
        release_media([user.logo_key], fail_on_error=False)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email or channel name already registered",
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to register channel %s", channel_name)
        release_media([user.logo_key], fail_on_error=False)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Unable to register user") from exc

    logger.info("Registered channel %s (%s)", user.channel_name, user.id)
    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate a user against stored credentials."""

    user = db.scalar(select(User).where(User.email == email.strip().lower()))
    if not user:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
    db: Session = Depends(get_session),
) -> User:
    """Resolve the authenticated user from the provided bearer token."""

    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token provided")

    user_id = decode_access_token(credentials.credentials)

    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return user


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_security),
    db: Session = Depends(get_session),
) -> User | None:
    """Return the authenticated user when a bearer token is provided."""

    if not credentials or credentials.scheme.lower() != "bearer":
        return None

    try:
        user_id = decode_access_token(credentials.credentials)
    except HTTPException:
        return None

    return db.get(User, user_id)


__all__ = [
    "register_user",
    "authenticate_user",
    "create_access_token",
    "decode_access_token",
    "hash_password",
    "verify_password",
    "get_current_user",
    "get_optional_user",
]
