"""Validation and lifecycle helpers for uploaded media objects."""
from __future__ import annotations

import logging
import os
from typing import Iterable

from fastapi import HTTPException, UploadFile, status

from . import spaces_service
from .spaces_service import SpacesConfigurationError, SpacesDeletionError, SpacesUploadError, StoredObject

logger = logging.getLogger(__name__)


def upload_size(file: UploadFile) -> int:
    """Return the byte size of an upload, measuring the buffer when unknown."""

    size = getattr(file, "size", None)
    if size is not None:
        return int(size)
    buffer = file.file
    position = buffer.tell()
    buffer.seek(0, os.SEEK_END)
    size = buffer.tell()
    buffer.seek(position)
    return size


def validate_upload(
    file: UploadFile | None,
    *,
    field: str,
    allowed_prefix: str,
    max_bytes: int | None = None,
) -> UploadFile:
    if file is None or not (file.filename or "").strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{field} file is required")

    content_type = (file.content_type or "").strip().lower()
    if not content_type.startswith(allowed_prefix):
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"{field} must be of type {allowed_prefix}*",
        )

    if max_bytes is not None and upload_size(file) > max_bytes:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=f"{field} file is too large")
    return file


async def store_media(file: UploadFile, *, folder: str) -> StoredObject:
    """Upload to Spaces, translating storage failures into HTTP errors."""

    try:
        stored = await spaces_service.upload_file_to_spaces(file, folder=folder)
    except SpacesConfigurationError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    except SpacesUploadError as exc:  # pragma: no cover - network bound
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    if not stored.key.strip() or not stored.url.strip():
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Invalid media metadata returned from Spaces",
        )
    return stored


def release_media(keys: Iterable[str | None], *, fail_on_error: bool = True) -> int:
    """Delete stored objects by key and return how many were removed."""

    released = 0
    for key in keys:
        key = (key or "").strip()
        if not key:
            continue
        try:
            spaces_service.delete_file_from_spaces(key)
        except (SpacesDeletionError, SpacesConfigurationError) as exc:
            if fail_on_error:
                raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
            logger.warning("Unable to release stored object %s: %s", key, exc)
            continue
        released += 1
    return released


__all__ = ["upload_size", "validate_upload", "store_media", "release_media"]
