"""Route-level tests for uploads, owner edits, views and reactions."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vstreamer.database import SessionLocal
from vstreamer.models import Video
from vstreamer.services import spaces_service
from vstreamer.services.spaces_service import SpacesDeletionError


def _upload_files(video_type: str = "video/mp4", thumbnail: bool = True) -> dict:
    files = {"video": ("clip.mp4", b"\x00\x00\x00\x18ftypmp42", video_type)}
    if thumbnail:
        files["thumbnail"] = ("thumb.png", b"\x89PNG\r\n\x1a\n", "image/png")
    return files


def test_upload_video_stores_both_objects(client, storage, make_user, auth_headers):
    owner = make_user()

    response = client.post(
        "/api/v1/video/upload",
        data={"title": "  Sunset timelapse ", "category": "nature", "tags": "sky, sunset, sky"},
        files=_upload_files(),
        headers=auth_headers(owner),
    )

    assert response.status_code == 201, response.text
    video = response.json()["video"]
    assert video["title"] == "Sunset timelapse"
    assert video["tags"] == ["sky", "sunset"]
    assert video["user_id"] == str(owner.id)
    assert (video["like_count"], video["dislike_count"], video["view_count"]) == (0, 0, 0)
    assert video["video_url"].startswith("https://cdn.example.test/videos/")
    assert video["thumbnail_url"].startswith("https://cdn.example.test/thumbnails/")
    assert len(storage.uploaded) == 2


def test_upload_without_thumbnail_is_rejected(client, storage, make_user, auth_headers):
    response = client.post(
        "/api/v1/video/upload",
        data={"title": "No thumb"},
        files=_upload_files(thumbnail=False),
        headers=auth_headers(make_user()),
    )

    assert response.status_code == 400
    assert storage.uploaded == []


def test_upload_rejects_non_video_content(client, storage, make_user, auth_headers):
    response = client.post(
        "/api/v1/video/upload",
        data={"title": "Not a video"},
        files=_upload_files(video_type="text/plain"),
        headers=auth_headers(make_user()),
    )

    assert response.status_code == 415
    assert storage.uploaded == []


def test_upload_requires_token(client, storage):
    response = client.post("/api/v1/video/upload", data={"title": "Anon"}, files=_upload_files())

    assert response.status_code == 401
    assert response.json()["detail"] == "No token provided"


def test_reaction_endpoint_tracks_switches(client, make_user, make_video, auth_headers):
    video = make_video(make_user())
    alice = make_user()
    bob = make_user()
    url = f"/api/v1/video/{video.id}/reaction"

    assert client.post(url, json={"desired": "like"}, headers=auth_headers(alice)).json()["likes"] == 1

    switched = client.post(url, json={"desired": "dislike"}, headers=auth_headers(alice)).json()
    assert (switched["likes"], switched["dislikes"]) == (0, 1)
    assert switched["reaction"] == "dislike"

    client.post(url, json={"desired": "like"}, headers=auth_headers(alice))
    final = client.post(url, json={"videoId": str(video.id), "desired": "like"}, headers=auth_headers(bob)).json()
    assert (final["likes"], final["dislikes"]) == (2, 0)


def test_reaction_clear_endpoint(client, make_user, make_video, auth_headers):
    video = make_video(make_user())
    viewer = make_user()
    url = f"/api/v1/video/{video.id}/reaction"
    client.post(url, json={"desired": "like"}, headers=auth_headers(viewer))

    response = client.delete(url, headers=auth_headers(viewer))

    assert response.status_code == 200
    assert response.json() == {"video_id": str(video.id), "likes": 0, "dislikes": 0, "reaction": None}


def test_reaction_errors_are_distinct(client, make_user, make_video, auth_headers):
    video = make_video(make_user())
    viewer = make_user()

    missing = client.post(f"/api/v1/video/{uuid4()}/reaction", json={"desired": "like"}, headers=auth_headers(viewer))
    assert missing.status_code == 404

    anonymous = client.post(f"/api/v1/video/{video.id}/reaction", json={"desired": "like"})
    assert anonymous.status_code == 401

    mismatch = client.post(
        f"/api/v1/video/{video.id}/reaction",
        json={"videoId": str(uuid4()), "desired": "like"},
        headers=auth_headers(viewer),
    )
    assert mismatch.status_code == 422

    invalid = client.post(
        f"/api/v1/video/{video.id}/reaction",
        json={"desired": "love"},
        headers=auth_headers(viewer),
    )
    assert invalid.status_code == 422


def test_legacy_like_and_dislike_routes(client, make_user, make_video, auth_headers):
    video = make_video(make_user())
    viewer = make_user()
    body = {"videoId": str(video.id)}

    liked = client.post("/api/v1/video/like", json=body, headers=auth_headers(viewer)).json()
    again = client.post("/api/v1/video/like", json=body, headers=auth_headers(viewer)).json()
    disliked = client.post("/api/v1/video/dislike", json=body, headers=auth_headers(viewer)).json()

    assert (liked["likes"], liked["dislikes"]) == (1, 0)
    assert (again["likes"], again["dislikes"]) == (1, 0)
    assert (disliked["likes"], disliked["dislikes"]) == (0, 1)


def test_viewing_counts_each_user_once(client, make_user, make_video, auth_headers):
    video = make_video(make_user())
    alice = make_user()
    bob = make_user()
    url = f"/api/v1/video/{video.id}"

    assert client.get(url, headers=auth_headers(alice)).json()["view_count"] == 1
    assert client.get(url, headers=auth_headers(alice)).json()["view_count"] == 1
    assert client.get(url, headers=auth_headers(bob)).json()["view_count"] == 2

    engagement = client.get(f"{url}/engagement").json()
    assert engagement["view_count"] == 2
    assert engagement["viewer_reaction"] is None


def test_view_requires_authentication(client, make_user, make_video):
    video = make_video(make_user())

    assert client.get(f"/api/v1/video/{video.id}").status_code == 401


def test_update_by_non_owner_is_forbidden(client, storage, make_user, make_video, auth_headers):
    owner = make_user()
    video = make_video(owner, title="Original")

    response = client.put(
        f"/api/v1/video/update/{video.id}",
        data={"title": "Hijacked"},
        headers=auth_headers(make_user()),
    )

    assert response.status_code == 403
    with SessionLocal() as session:
        assert session.get(Video, video.id).title == "Original"


def test_owner_update_replaces_thumbnail(client, storage, make_user, make_video, auth_headers):
    owner = make_user()
    video = make_video(owner, title="Original", tags=["old"])

    response = client.put(
        f"/api/v1/video/update/{video.id}",
        data={"title": "Renamed", "description": "", "tags": "fresh, new"},
        files={"thumbnail": ("cover.jpg", b"\xff\xd8\xff", "image/jpeg")},
        headers=auth_headers(owner),
    )

    assert response.status_code == 200, response.text
    body = response.json()["video"]
    assert body["title"] == "Renamed"
    assert body["tags"] == ["fresh", "new"]
    assert body["thumbnail_url"] != video.thumbnail_url
    assert storage.deleted == [video.thumbnail_key]


def test_update_missing_video_is_not_found(client, make_user, auth_headers):
    response = client.put(f"/api/v1/video/update/{uuid4()}", data={"title": "x"}, headers=auth_headers(make_user()))

    assert response.status_code == 404


def test_delete_is_owner_only_and_releases_objects(client, storage, make_user, make_video, auth_headers):
    owner = make_user()
    video = make_video(owner)

    forbidden = client.delete(f"/api/v1/video/delete/{video.id}", headers=auth_headers(make_user()))
    assert forbidden.status_code == 403
    assert storage.deleted == []

    deleted = client.delete(f"/api/v1/video/delete/{video.id}", headers=auth_headers(owner))
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Video deleted successfully"
    assert sorted(storage.deleted) == sorted([video.video_key, video.thumbnail_key])

    gone = client.get(f"/api/v1/video/{video.id}", headers=auth_headers(owner))
    assert gone.status_code == 404


def test_listings_filter_by_owner_category_and_tag(client, make_user, make_video, auth_headers):
    alice = make_user()
    bob = make_user()
    make_video(alice, title="Alpine", category="travel", tags=["mountains"])
    make_video(bob, title="Pasta", category="food", tags=["cooking", "italian"])
    make_video(bob, title="Rome", category="travel", tags=["italian"])

    all_titles = {item["title"] for item in client.get("/api/v1/video/all").json()["items"]}
    assert all_titles == {"Alpine", "Pasta", "Rome"}

    mine = client.get("/api/v1/video/my-videos", headers=auth_headers(bob)).json()["items"]
    assert {item["title"] for item in mine} == {"Pasta", "Rome"}

    travel = client.get("/api/v1/video/category/travel").json()["items"]
    assert {item["title"] for item in travel} == {"Alpine", "Rome"}

    italian = client.get("/api/v1/video/tags/italian").json()["items"]
    assert {item["title"] for item in italian} == {"Pasta", "Rome"}

    assert client.get("/api/v1/video/tags/unknown").json()["items"] == []


def test_failed_update_releases_new_thumbnail(client, storage, make_user, make_video, auth_headers, monkeypatch):
    owner = make_user()
    video = make_video(owner, title="Original")

    def _failing_commit(self):
        raise SQLAlchemyError("disk full")

    with monkeypatch.context() as patch:
        patch.setattr(Session, "commit", _failing_commit)
        response = client.put(
            f"/api/v1/video/update/{video.id}",
            data={"title": "Renamed"},
            files={"thumbnail": ("cover.jpg", b"\xff\xd8\xff", "image/jpeg")},
            headers=auth_headers(owner),
        )

    assert response.status_code == 500
    assert len(storage.uploaded) == 1
    assert storage.deleted == storage.uploaded
    with SessionLocal() as session:
        stored = session.get(Video, video.id)
        assert stored.title == "Original"
        assert stored.thumbnail_key == video.thumbnail_key


def test_delete_keeps_row_when_storage_fails(client, storage, make_user, make_video, auth_headers, monkeypatch):
    owner = make_user()
    video = make_video(owner)

    def _fail_on_video(key, *, client=None):
        if key == video.video_key:
            raise SpacesDeletionError("Unable to delete media from storage")
        storage.deleted.append(key)

    monkeypatch.setattr(spaces_service, "delete_file_from_spaces", _fail_on_video)

    response = client.delete(f"/api/v1/video/delete/{video.id}", headers=auth_headers(owner))

    assert response.status_code == 502
    assert storage.deleted == [video.thumbnail_key]
    with SessionLocal() as session:
        assert session.get(Video, video.id) is not None
