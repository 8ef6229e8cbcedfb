"""Reaction and view bookkeeping for videos.

Every user holds at most one reaction row per video (``like`` or ``dislike``),
and ``Video.like_count`` / ``Video.dislike_count`` are cached projections of
those rows. Changes go through :func:`resolve_reaction`, which computes the
next state together with the counter deltas, so repeating the same reaction
never moves the counters. Views are a set of ``(video, user)`` rows; the view
count is derived on read.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Comment, Reaction, Video, VideoReaction, VideoView

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReactionTransition:
    """Outcome of applying a requested reaction to a user's current one."""

    previous: Reaction | None
    current: Reaction | None
    like_delta: int
    dislike_delta: int

    @property
    def changed(self) -> bool:
        return self.previous != self.current


def _contribution(state: Reaction | None) -> tuple[int, int]:
    if state is Reaction.LIKE:
        return 1, 0
    if state is Reaction.DISLIKE:
        return 0, 1
    return 0, 0


def resolve_reaction(current: Reaction | None, desired: Reaction | None) -> ReactionTransition:
    """Return the transition from ``current`` to ``desired``.

    ``desired=None`` withdraws the reaction. Asking for the state the user is
    already in yields zero deltas.
    """

    if current == desired:
        return ReactionTransition(previous=current, current=current, like_delta=0, dislike_delta=0)

    old_likes, old_dislikes = _contribution(current)
    new_likes, new_dislikes = _contribution(desired)
    return ReactionTransition(
        previous=current,
        current=desired,
        like_delta=new_likes - old_likes,
        dislike_delta=new_dislikes - old_dislikes,
    )


def _get_video_or_404(db: Session, video_id: UUID, *, lock: bool = False) -> Video:
    stmt = select(Video).where(Video.id == video_id)
    if lock:
        stmt = stmt.with_for_update()
    video = db.scalar(stmt)
    if video is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    return video


def _current_reaction_row(db: Session, video_id: UUID, user_id: UUID) -> VideoReaction | None:
    return db.scalar(
        select(VideoReaction).where(VideoReaction.video_id == video_id, VideoReaction.user_id == user_id)
    )


def _shifted(column, delta: int):
    # Counters never drop below zero, even if the cache has drifted.
    return case((column + delta < 0, 0), else_=column + delta)


def _apply_reaction(db: Session, *, video_id: UUID, user_id: UUID, desired: Reaction | None) -> dict[str, Any]:
    video = _get_video_or_404(db, video_id, lock=True)
    row = _current_reaction_row(db, video_id, user_id)
    current = Reaction(row.value) if row is not None else None
    transition = resolve_reaction(current, desired)

    if transition.changed:
        if transition.current is None:
            db.delete(row)
        elif row is None:
            db.add(VideoReaction(video_id=video_id, user_id=user_id, value=transition.current.value))
        else:
            row.value = transition.current.value

        db.execute(
            update(Video)
            .where(Video.id == video_id)
            .values(
                like_count=_shifted(Video.like_count, transition.like_delta),
                dislike_count=_shifted(Video.dislike_count, transition.dislike_delta),
            )
            .execution_options(synchronize_session=False)
        )

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Concurrent reaction update on video %s by user %s", video_id, user_id)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Reaction was updated concurrently; retry the request",
        ) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update reaction") from exc

    if transition.changed:
        logger.debug(
            "Reaction on video %s by user %s: %s -> %s",
            video_id,
            user_id,
            transition.previous,
            transition.current,
        )

    db.refresh(video)
    return {
        "video_id": video.id,
        "like_count": int(video.like_count or 0),
        "dislike_count": int(video.dislike_count or 0),
        "reaction": transition.current,
    }


def record_reaction(db: Session, *, video_id: UUID, user_id: UUID, desired: Reaction) -> dict[str, Any]:
    """Set the user's reaction on a video and return the updated counters."""

    return _apply_reaction(db, video_id=video_id, user_id=user_id, desired=Reaction(desired))


def clear_reaction(db: Session, *, video_id: UUID, user_id: UUID) -> dict[str, Any]:
    """Withdraw the user's reaction, if any."""

    return _apply_reaction(db, video_id=video_id, user_id=user_id, desired=None)


def get_viewer_reaction(db: Session, *, video_id: UUID, user_id: UUID | None) -> Reaction | None:
    if user_id is None:
        return None
    row = _current_reaction_row(db, video_id, user_id)
    return Reaction(row.value) if row is not None else None


def record_view(db: Session, *, video_id: UUID, user_id: UUID) -> Video:
    """Add ``user_id`` to the video's viewer set; repeat views are no-ops."""

    video = _get_video_or_404(db, video_id)
    already_viewed = db.scalar(
        select(VideoView.id).where(VideoView.video_id == video_id, VideoView.user_id == user_id).limit(1)
    )
    if already_viewed is not None:
        return video

    db.add(VideoView(video_id=video_id, user_id=user_id))
    try:
        db.commit()
    except IntegrityError:
        # A parallel request from the same user inserted the row first.
        db.rollback()
    except SQLAlchemyError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to record view") from exc

    return video


def count_views(db: Session, video_id: UUID) -> int:
    return int(db.scalar(select(func.count(VideoView.id)).where(VideoView.video_id == video_id)) or 0)


def view_count_column():
    """Correlated subquery exposing the view count alongside ``Video`` rows."""

    return (
        select(func.count(VideoView.id))
        .where(VideoView.video_id == Video.id)
        .scalar_subquery()
        .label("view_count")
    )


def engagement_snapshot(db: Session, *, video_id: UUID, viewer_id: UUID | None = None) -> dict[str, Any]:
    video = _get_video_or_404(db, video_id)
    comment_count = db.scalar(select(func.count(Comment.id)).where(Comment.video_id == video_id)) or 0
    return {
        "video_id": video.id,
        "like_count": int(video.like_count or 0),
        "dislike_count": int(video.dislike_count or 0),
        "view_count": count_views(db, video_id),
        "comment_count": int(comment_count),
        "viewer_reaction": get_viewer_reaction(db, video_id=video_id, user_id=viewer_id),
    }


__all__ = [
    "ReactionTransition",
    "resolve_reaction",
    "record_reaction",
    "clear_reaction",
    "get_viewer_reaction",
    "record_view",
    "count_views",
    "view_count_column",
    "engagement_snapshot",
]
