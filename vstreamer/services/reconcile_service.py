"""Repair cached like/dislike counters that drifted from the reaction rows."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import Reaction, Video, VideoReaction

logger = logging.getLogger(__name__)


class ReconciliationError(RuntimeError):
    """Raised when the reconciliation pass cannot complete successfully."""


@dataclass(frozen=True, slots=True)
class ReconciliationSummary:
    """Number of videos inspected and how many had their counters rewritten."""

    scanned: int
    repaired: int


def _ledger_counts(reaction: Reaction):
    return (
        select(func.count(VideoReaction.id))
        .where(VideoReaction.video_id == Video.id, VideoReaction.value == reaction.value)
        .scalar_subquery()
    )


def perform_reconciliation(session: Session) -> ReconciliationSummary:
    """Recompute every video's counters from its reaction rows.

    Raises
    ------
    ReconciliationError
        If the database work fails; the transaction is rolled back first.
    """

    stmt = select(Video, _ledger_counts(Reaction.LIKE), _ledger_counts(Reaction.DISLIKE)).with_for_update(of=Video)

    scanned = 0
    repaired = 0
    try:
        for video, likes, dislikes in session.execute(stmt).all():
            scanned += 1
            likes = int(likes or 0)
            dislikes = int(dislikes or 0)
            if video.like_count == likes and video.dislike_count == dislikes:
                continue
            logger.warning(
                "Counter drift on video %s (likes %s->%s, dislikes %s->%s)",
                video.id,
                video.like_count,
                likes,
                video.dislike_count,
                dislikes,
            )
            video.like_count = likes
            video.dislike_count = dislikes
            repaired += 1
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Reconciliation failed; transaction rolled back")
        raise ReconciliationError("counter reconciliation failed") from exc

    summary = ReconciliationSummary(scanned=scanned, repaired=repaired)
    logger.info("Reconciliation finished (scanned=%d, repaired=%d)", summary.scanned, summary.repaired)
    return summary


def run_reconciliation(session_factory: Callable[[], Session]) -> ReconciliationSummary:
    """Run a reconciliation pass on a fresh session from ``session_factory``."""

    session = session_factory()
    try:
        return perform_reconciliation(session)
    finally:
        session.close()


__all__ = [
    "ReconciliationError",
    "ReconciliationSummary",
    "perform_reconciliation",
    "run_reconciliation",
]
