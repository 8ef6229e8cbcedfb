"""Tests for the reaction state machine and view tracking."""
from __future__ import annotations

import itertools
import random
from concurrent.futures import ThreadPoolExecutor
from uuid import uuid4

import pytest
from fastapi import HTTPException
from sqlalchemy import func, select

from vstreamer.database import SessionLocal
from vstreamer.models import Reaction, Video, VideoReaction, VideoView
from vstreamer.services.engagement_service import (
    clear_reaction,
    count_views,
    engagement_snapshot,
    get_viewer_reaction,
    record_reaction,
    record_view,
    resolve_reaction,
)

LIKE = Reaction.LIKE
DISLIKE = Reaction.DISLIKE


@pytest.mark.parametrize(
    "current, desired, expected, like_delta, dislike_delta",
    [
        (None, LIKE, LIKE, 1, 0),
        (None, DISLIKE, DISLIKE, 0, 1),
        (LIKE, LIKE, LIKE, 0, 0),
        (LIKE, DISLIKE, DISLIKE, -1, 1),
        (DISLIKE, LIKE, LIKE, 1, -1),
        (DISLIKE, DISLIKE, DISLIKE, 0, 0),
        (LIKE, None, None, -1, 0),
        (DISLIKE, None, None, 0, -1),
        (None, None, None, 0, 0),
    ],
)
def test_resolve_reaction_transition_table(current, desired, expected, like_delta, dislike_delta):
    transition = resolve_reaction(current, desired)
    assert transition.current == expected
    assert transition.like_delta == like_delta
    assert transition.dislike_delta == dislike_delta
    assert transition.changed is (current != expected)


@pytest.mark.parametrize("sequence", list(itertools.product([LIKE, DISLIKE], repeat=4)))
def test_resolve_reaction_sequences_move_total_by_at_most_one(sequence):
    state = None
    likes = dislikes = 0
    for desired in sequence:
        transition = resolve_reaction(state, desired)
        assert abs(transition.like_delta + transition.dislike_delta) <= 1
        likes += transition.like_delta
        dislikes += transition.dislike_delta
        state = transition.current

    assert state == sequence[-1]
    assert (likes, dislikes) == ((1, 0) if state is LIKE else (0, 1))


def _reaction(video_id, user_id, desired):
    with SessionLocal() as session:
        return record_reaction(session, video_id=video_id, user_id=user_id, desired=desired)


def test_like_dislike_relike_then_second_user(make_user, make_video):
    owner = make_user()
    alice = make_user()
    bob = make_user()
    video = make_video(owner)

    snapshot = _reaction(video.id, alice.id, LIKE)
    assert (snapshot["like_count"], snapshot["dislike_count"]) == (1, 0)

    snapshot = _reaction(video.id, alice.id, DISLIKE)
    assert (snapshot["like_count"], snapshot["dislike_count"]) == (0, 1)

    snapshot = _reaction(video.id, alice.id, LIKE)
    assert (snapshot["like_count"], snapshot["dislike_count"]) == (1, 0)

    snapshot = _reaction(video.id, bob.id, LIKE)
    assert (snapshot["like_count"], snapshot["dislike_count"]) == (2, 0)
    assert snapshot["reaction"] is LIKE


def test_repeated_like_does_not_double_count(make_user, make_video):
    viewer = make_user()
    video = make_video(make_user())

    first = _reaction(video.id, viewer.id, LIKE)
    second = _reaction(video.id, viewer.id, LIKE)

    assert first["like_count"] == second["like_count"] == 1
    assert second["dislike_count"] == 0
    with SessionLocal() as session:
        rows = session.scalar(select(func.count(VideoReaction.id)).where(VideoReaction.video_id == video.id))
    assert rows == 1


def test_counters_match_ledger_after_random_reactions(make_user, make_video):
    video = make_video(make_user())
    users = [make_user() for _ in range(5)]
    rng = random.Random(1234)

    with SessionLocal() as session:
        for _ in range(60):
            user = rng.choice(users)
            if rng.random() < 0.15:
                clear_reaction(session, video_id=video.id, user_id=user.id)
            else:
                record_reaction(session, video_id=video.id, user_id=user.id, desired=rng.choice([LIKE, DISLIKE]))

        stored = session.get(Video, video.id)
        session.refresh(stored)
        likes = session.scalar(
            select(func.count()).where(VideoReaction.video_id == video.id, VideoReaction.value == LIKE.value)
        )
        dislikes = session.scalar(
            select(func.count()).where(VideoReaction.video_id == video.id, VideoReaction.value == DISLIKE.value)
        )

    assert stored.like_count == likes
    assert stored.dislike_count == dislikes


def test_clear_reaction_restores_neutral_state(make_user, make_video):
    viewer = make_user()
    video = make_video(make_user())
    _reaction(video.id, viewer.id, DISLIKE)

    with SessionLocal() as session:
        snapshot = clear_reaction(session, video_id=video.id, user_id=viewer.id)
        again = clear_reaction(session, video_id=video.id, user_id=viewer.id)
        assert get_viewer_reaction(session, video_id=video.id, user_id=viewer.id) is None

    assert (snapshot["like_count"], snapshot["dislike_count"]) == (0, 0)
    assert snapshot["reaction"] is None
    assert (again["like_count"], again["dislike_count"]) == (0, 0)


def test_drifted_counter_never_goes_negative(make_user, make_video):
    viewer = make_user()
    video = make_video(make_user())
    _reaction(video.id, viewer.id, LIKE)

    with SessionLocal() as session:
        stored = session.get(Video, video.id)
        stored.like_count = 0
        session.commit()

        snapshot = record_reaction(session, video_id=video.id, user_id=viewer.id, desired=DISLIKE)

    assert snapshot["like_count"] == 0
    assert snapshot["dislike_count"] == 1


def test_reaction_on_missing_video_is_not_found(make_user):
    viewer = make_user()
    with SessionLocal() as session:
        with pytest.raises(HTTPException) as exc:
            record_reaction(session, video_id=uuid4(), user_id=viewer.id, desired=LIKE)
    assert exc.value.status_code == 404


def test_record_view_is_idempotent_per_user(make_user, make_video):
    alice = make_user()
    bob = make_user()
    video = make_video(make_user())

    with SessionLocal() as session:
        record_view(session, video_id=video.id, user_id=alice.id)
        record_view(session, video_id=video.id, user_id=alice.id)
        assert count_views(session, video.id) == 1

        record_view(session, video_id=video.id, user_id=bob.id)
        assert count_views(session, video.id) == 2
        rows = session.scalar(select(func.count(VideoView.id)).where(VideoView.video_id == video.id))

    assert rows == 2


def test_record_view_on_missing_video_is_not_found(make_user):
    viewer = make_user()
    with SessionLocal() as session:
        with pytest.raises(HTTPException) as exc:
            record_view(session, video_id=uuid4(), user_id=viewer.id)
    assert exc.value.status_code == 404


def test_engagement_snapshot_reports_viewer_state(make_user, make_video):
    viewer = make_user()
    video = make_video(make_user())
    _reaction(video.id, viewer.id, DISLIKE)

    with SessionLocal() as session:
        record_view(session, video_id=video.id, user_id=viewer.id)
        snapshot = engagement_snapshot(session, video_id=video.id, viewer_id=viewer.id)
        anonymous = engagement_snapshot(session, video_id=video.id)

    assert snapshot["dislike_count"] == 1
    assert snapshot["view_count"] == 1
    assert snapshot["comment_count"] == 0
    assert snapshot["viewer_reaction"] is DISLIKE
    assert anonymous["viewer_reaction"] is None


def test_concurrent_likes_from_different_users_are_all_counted(make_user, make_video):
    video = make_video(make_user())
    voters = [make_user() for _ in range(8)]

    def _like(voter):
        with SessionLocal() as session:
            try:
                record_reaction(session, video_id=video.id, user_id=voter.id, desired=LIKE)
            except HTTPException as exc:
                return exc.status_code
            return "ok"

    with ThreadPoolExecutor(max_workers=len(voters)) as pool:
        results = list(pool.map(_like, voters))

    succeeded = results.count("ok")
    assert succeeded > 0
    with SessionLocal() as session:
        stored = session.get(Video, video.id)
        rows = session.scalar(select(func.count(VideoReaction.id)).where(VideoReaction.video_id == video.id))

    assert stored.like_count == succeeded
    assert rows == succeeded
