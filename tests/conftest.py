"""Shared fixtures: SQLite schema, authenticated users and in-memory storage."""
from __future__ import annotations

import os
from types import SimpleNamespace
from typing import Callable, Iterator
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import delete

# Configure the database URL and JWT secret before importing application modules.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///./test_vstreamer.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-signing-key")
os.environ.setdefault("DISABLE_RECONCILIATION", "true")

from vstreamer.database import Base, SessionLocal, engine  # noqa: E402
from vstreamer.main import app  # noqa: E402
from vstreamer.models import Comment, User, Video, VideoReaction, VideoTag, VideoView  # noqa: E402
from vstreamer.services import spaces_service  # noqa: E402
from vstreamer.services.auth_service import create_access_token  # noqa: E402
from vstreamer.services.spaces_service import StoredObject  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _create_schema() -> Iterator[None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_database() -> Iterator[None]:
    with SessionLocal() as session:
        for model in (Comment, VideoView, VideoReaction, VideoTag, Video, User):
            session.execute(delete(model))
        session.commit()
    yield


@pytest.fixture
def client() -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def storage(monkeypatch) -> SimpleNamespace:
    """Replace Spaces uploads and deletions with an in-memory record."""

    state = SimpleNamespace(uploaded=[], deleted=[])

    async def _fake_upload(file, *, folder: str, client=None) -> StoredObject:
        key = f"{folder}/{uuid4().hex}"
        state.uploaded.append(key)
        return StoredObject(
            url=f"https://cdn.example.test/{key}",
            key=key,
            bucket="test-bucket",
            content_type=file.content_type or "application/octet-stream",
        )

    def _fake_delete(key: str | None, *, client=None) -> None:
        state.deleted.append(key)

    monkeypatch.setattr(spaces_service, "upload_file_to_spaces", _fake_upload)
    monkeypatch.setattr(spaces_service, "delete_file_from_spaces", _fake_delete)
    return state


@pytest.fixture
def make_user() -> Callable[..., User]:
    def _make(channel_name: str | None = None) -> User:
        name = channel_name or f"channel-{uuid4().hex[:8]}"
        with SessionLocal() as session:
            user = User(channel_name=name, email=f"{name}@example.com", hashed_password="not-a-real-hash")
            session.add(user)
            session.commit()
            session.refresh(user)
            return user

    return _make


@pytest.fixture
def make_video() -> Callable[..., Video]:
    def _make(
        owner: User,
        *,
        title: str = "Demo",
        category: str | None = None,
        tags: list[str] | None = None,
    ) -> Video:
        suffix = uuid4().hex
        with SessionLocal() as session:
            video = Video(
                user_id=owner.id,
                title=title,
                category=category,
                video_url=f"https://cdn.example.test/videos/{suffix}.mp4",
                video_key=f"videos/{suffix}.mp4",
                thumbnail_url=f"https://cdn.example.test/thumbnails/{suffix}.png",
                thumbnail_key=f"thumbnails/{suffix}.png",
            )
            video.tags = tags or []
            session.add(video)
            session.commit()
            session.refresh(video)
            return video

    return _make


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers
