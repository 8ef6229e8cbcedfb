"""Business logic for uploading, editing and browsing videos."""
from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import HTTPException, UploadFile, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..models import User, Video, VideoTag
from .engagement_service import count_views, record_view, view_count_column
from .media_service import release_media, store_media, validate_upload
from .ownership import ensure_owner
from .spaces_service import THUMBNAIL_FOLDER, VIDEO_FOLDER

logger = logging.getLogger(__name__)


def parse_tags(raw: str | list[str] | None) -> list[str]:
    """Split a comma separated tag string, dropping blanks and duplicates."""

    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else raw
    tags: list[str] = []
    for part in parts:
        tag = part.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def _clean_text(value: str | None) -> str | None:
    if value is None:
        return None
    text = value.strip()
    return text or None


def video_record(video: Video, *, view_count: int) -> dict[str, Any]:
    return {
        "id": video.id,
        "user_id": video.user_id,
        "title": video.title,
        "description": video.description,
        "category": video.category,
        "tags": video.tags,
        "video_url": video.video_url,
        "thumbnail_url": video.thumbnail_url,
        "like_count": int(video.like_count or 0),
        "dislike_count": int(video.dislike_count or 0),
        "view_count": view_count,
        "created_at": video.created_at,
        "updated_at": video.updated_at,
    }


def get_video_or_404(db: Session, video_id: UUID) -> Video:
    video = db.get(Video, video_id)
    if video is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    return video


async def create_video_record(
    db: Session,
    *,
    owner: User,
    title: str,
    description: str | None = None,
    category: str | None = None,
    tags: str | list[str] | None = None,
    video_file: UploadFile | None,
    thumbnail_file: UploadFile | None,
) -> dict[str, Any]:
    """Store the video and thumbnail objects, then persist the metadata."""

    settings = get_settings()
    clean_title = _clean_text(title)
    if clean_title is None:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Title cannot be empty")

    if video_file is None or thumbnail_file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Video and thumbnail are required")
    validate_upload(
        video_file,
        field="video",
        allowed_prefix=settings.allowed_video_prefix,
        max_bytes=settings.max_video_bytes,
    )
    validate_upload(thumbnail_file, field="thumbnail", allowed_prefix=settings.allowed_image_prefix)

    stored_video = await store_media(video_file, folder=VIDEO_FOLDER)
    try:
        stored_thumbnail = await store_media(thumbnail_file, folder=THUMBNAIL_FOLDER)
    except HTTPException:
        release_media([stored_video.key], fail_on_error=False)
        raise

    video = Video(
        user_id=owner.id,
        title=clean_title,
        description=_clean_text(description),
        category=_clean_text(category),
        video_url=stored_video.url,
        video_key=stored_video.key,
        thumbnail_url=stored_thumbnail.url,
        thumbnail_key=stored_thumbnail.key,
        like_count=0,
        dislike_count=0,
    )
    video.tags = parse_tags(tags)

    try:
        db.add(video)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to persist uploaded video for user %s", owner.id)
        release_media([stored_video.key, stored_thumbnail.key], fail_on_error=False)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to save video") from exc

    db.refresh(video)
    logger.info("Video %s uploaded by user %s", video.id, owner.id)
    return video_record(video, view_count=0)


async def update_video_record(
    db: Session,
    *,
    video_id: UUID,
    requester_id: UUID,
    title: str | None = None,
    description: str | None = None,
    category: str | None = None,
    tags: str | list[str] | None = None,
    thumbnail_file: UploadFile | None = None,
) -> dict[str, Any]:
    """Apply metadata edits from the owner; blank fields keep their value."""

    video = get_video_or_404(db, video_id)
    ensure_owner(requester_id, video.user_id, resource="video", action="edit")

    new_title = _clean_text(title)
    if new_title is not None:
        video.title = new_title
    new_description = _clean_text(description)
    if new_description is not None:
        video.description = new_description
    new_category = _clean_text(category)
    if new_category is not None:
        video.category = new_category
    new_tags = parse_tags(tags)
    if new_tags:
        video.tags = new_tags

    replaced_thumbnail_key: str | None = None
    new_thumbnail_key: str | None = None
    if thumbnail_file is not None and (thumbnail_file.filename or "").strip():
        validate_upload(thumbnail_file, field="thumbnail", allowed_prefix=get_settings().allowed_image_prefix)
        stored = await store_media(thumbnail_file, folder=THUMBNAIL_FOLDER)
        replaced_thumbnail_key = video.thumbnail_key
        new_thumbnail_key = stored.key
        video.thumbnail_url = stored.url
        video.thumbnail_key = stored.key

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to update video %s", video_id)
        release_media([new_thumbnail_key], fail_on_error=False)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update video") from exc

    if replaced_thumbnail_key:
        release_media([replaced_thumbnail_key], fail_on_error=False)

    db.refresh(video)
    return video_record(video, view_count=count_views(db, video.id))


def delete_video_record(db: Session, *, video_id: UUID, requester_id: UUID) -> None:
    """Delete a video owned by the requester together with its stored objects.

    The thumbnail is released before the video file. If storage fails part way
    the request ends with 502 and the row is kept; retrying finishes the job
    because deleting an object that is already gone succeeds.
    """

    video = get_video_or_404(db, video_id)
    ensure_owner(requester_id, video.user_id, resource="video", action="delete")

    release_media([video.thumbnail_key, video.video_key], fail_on_error=True)

    try:
        db.delete(video)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete video") from exc

    logger.info("Video %s deleted by owner %s", video_id, requester_id)


def list_video_records(
    db: Session,
    *,
    owner_id: UUID | None = None,
    category: str | None = None,
    tag: str | None = None,
) -> list[dict[str, Any]]:
    """Return videos newest first, optionally filtered by owner, category or tag."""

    statement = select(Video, view_count_column())
    if owner_id is not None:
        statement = statement.where(Video.user_id == owner_id)
    if category is not None:
        statement = statement.where(Video.category == category)
    if tag is not None:
        statement = statement.where(Video.id.in_(select(VideoTag.video_id).where(VideoTag.tag == tag)))
    statement = statement.order_by(Video.created_at.desc())

    return [video_record(video, view_count=int(views or 0)) for video, views in db.execute(statement).all()]


def view_video(db: Session, *, video_id: UUID, viewer_id: UUID) -> dict[str, Any]:
    """Record the viewer in the video's view set and return the projection."""

    video = record_view(db, video_id=video_id, user_id=viewer_id)
    return video_record(video, view_count=count_views(db, video.id))


__all__ = [
    "parse_tags",
    "video_record",
    "get_video_or_404",
    "create_video_record",
    "update_video_record",
    "delete_video_record",
    "list_video_records",
    "view_video",
]
