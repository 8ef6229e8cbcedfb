"""Business logic for comments left on videos."""
from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Comment, User, Video
from .ownership import ensure_owner

logger = logging.getLogger(__name__)


def _comment_record(comment: Comment, author: User | None) -> dict[str, Any]:
    return {
        "id": comment.id,
        "video_id": comment.video_id,
        "user_id": comment.user_id,
        "channel_name": author.channel_name if author else None,
        "logo_url": author.logo_url if author else None,
        "comment_text": comment.comment_text,
        "created_at": comment.created_at,
        "updated_at": comment.updated_at,
    }


def _get_comment_or_404(db: Session, comment_id: UUID) -> Comment:
    comment = db.get(Comment, comment_id)
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    return comment


def _require_text(text: str | None) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="Comment cannot be empty")
    return cleaned


def create_comment(db: Session, *, video_id: UUID, author: User, comment_text: str) -> dict[str, Any]:
    if db.get(Video, video_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")

    comment = Comment(video_id=video_id, user_id=author.id, comment_text=_require_text(comment_text))
    db.add(comment)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to add comment") from exc

    db.refresh(comment)
    return _comment_record(comment, author)


def update_comment(db: Session, *, comment_id: UUID, requester: User, comment_text: str) -> dict[str, Any]:
    comment = _get_comment_or_404(db, comment_id)
    ensure_owner(requester.id, comment.user_id, resource="comment", action="edit")

    comment.comment_text = _require_text(comment_text)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update comment") from exc

    db.refresh(comment)
    return _comment_record(comment, requester)


def delete_comment(db: Session, *, comment_id: UUID, requester_id: UUID) -> None:
    comment = _get_comment_or_404(db, comment_id)
    ensure_owner(requester_id, comment.user_id, resource="comment", action="delete")

    try:
        db.delete(comment)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete comment") from exc

    logger.info("Comment %s deleted by author %s", comment_id, requester_id)


def list_comments(db: Session, *, video_id: UUID) -> list[dict[str, Any]]:
    """Return the video's comments newest first with author channel details."""

    stmt = (
        select(Comment, User)
        .outerjoin(User, Comment.user_id == User.id)
        .where(Comment.video_id == video_id)
        .order_by(Comment.created_at.desc())
    )
    return [_comment_record(comment, author) for comment, author in db.execute(stmt).all()]


__all__ = ["create_comment", "update_comment", "delete_comment", "list_comments"]
