"""Video routes: uploads, owner edits, browsing, views and reactions."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import Reaction, User
from ..schemas import (
    EngagementResponse,
    LegacyReactionRequest,
    ReactionRequest,
    ReactionResponse,
    VideoListResponse,
    VideoMessageResponse,
    VideoResponse,
)
from ..services import (
    clear_reaction,
    create_video_record,
    delete_video_record,
    engagement_snapshot,
    get_current_user,
    get_optional_user,
    list_video_records,
    record_reaction,
    update_video_record,
    view_video,
)

router = APIRouter(prefix="/api/v1/video", tags=["videos"])


def _reaction_response(snapshot: dict) -> ReactionResponse:
    return ReactionResponse(
        video_id=snapshot["video_id"],
        likes=snapshot["like_count"],
        dislikes=snapshot["dislike_count"],
        reaction=snapshot["reaction"],
    )


@router.post("/upload", response_model=VideoMessageResponse, status_code=status.HTTP_201_CREATED)
async def upload_video_endpoint(
    title: str = Form(..., min_length=1, max_length=255),
    description: str | None = Form(None),
    category: str | None = Form(None),
    tags: str | None = Form(None),
    video: UploadFile | None = File(None),
    thumbnail: UploadFile | None = File(None),
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> VideoMessageResponse:
    """Upload a video with its thumbnail as ``multipart/form-data``.

    ``tags`` is a comma separated list. Both files are stored in Spaces before
    the metadata row is written.
    """

    record = await create_video_record(
        db,
        owner=current_user,
        title=title,
        description=description,
        category=category,
        tags=tags,
        video_file=video,
        thumbnail_file=thumbnail,
    )
    return VideoMessageResponse(message="Video uploaded successfully", video=VideoResponse(**record))


@router.put("/update/{video_id}", response_model=VideoMessageResponse)
async def update_video_endpoint(
    video_id: UUID,
    title: str | None = Form(None),
    description: str | None = Form(None),
    category: str | None = Form(None),
    tags: str | None = Form(None),
    thumbnail: UploadFile | None = File(None),
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> VideoMessageResponse:
    record = await update_video_record(
        db,
        video_id=video_id,
        requester_id=current_user.id,
        title=title,
        description=description,
        category=category,
        tags=tags,
        thumbnail_file=thumbnail,
    )
    return VideoMessageResponse(message="Video updated successfully", video=VideoResponse(**record))


@router.delete("/delete/{video_id}", response_model=VideoMessageResponse)
async def delete_video_endpoint(
    video_id: UUID,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> VideoMessageResponse:
    delete_video_record(db, video_id=video_id, requester_id=current_user.id)
    return VideoMessageResponse(message="Video deleted successfully")


@router.get("/all", response_model=VideoListResponse)
async def list_all_videos_endpoint(db: Session = Depends(get_session)) -> VideoListResponse:
    return VideoListResponse(items=[VideoResponse(**item) for item in list_video_records(db)])


@router.get("/my-videos", response_model=VideoListResponse)
async def list_my_videos_endpoint(
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> VideoListResponse:
    items = list_video_records(db, owner_id=current_user.id)
    return VideoListResponse(items=[VideoResponse(**item) for item in items])


@router.get("/category/{category}", response_model=VideoListResponse)
async def list_category_videos_endpoint(category: str, db: Session = Depends(get_session)) -> VideoListResponse:
    items = list_video_records(db, category=category)
    return VideoListResponse(items=[VideoResponse(**item) for item in items])


@router.get("/tags/{tag}", response_model=VideoListResponse)
async def list_tag_videos_endpoint(tag: str, db: Session = Depends(get_session)) -> VideoListResponse:
    items = list_video_records(db, tag=tag)
    return VideoListResponse(items=[VideoResponse(**item) for item in items])


@router.post("/like", response_model=ReactionResponse)
async def like_video_endpoint(
    payload: LegacyReactionRequest,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ReactionResponse:
    snapshot = record_reaction(db, video_id=payload.video_id, user_id=current_user.id, desired=Reaction.LIKE)
    return _reaction_response(snapshot)


@router.post("/dislike", response_model=ReactionResponse)
async def dislike_video_endpoint(
    payload: LegacyReactionRequest,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ReactionResponse:
    snapshot = record_reaction(db, video_id=payload.video_id, user_id=current_user.id, desired=Reaction.DISLIKE)
    return _reaction_response(snapshot)


@router.get("/{video_id}", response_model=VideoResponse)
async def get_video_endpoint(
    video_id: UUID,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> VideoResponse:
    """Return the video and count the caller as a viewer (once per user)."""

    return VideoResponse(**view_video(db, video_id=video_id, viewer_id=current_user.id))


@router.post("/{video_id}/reaction", response_model=ReactionResponse)
async def react_to_video_endpoint(
    video_id: UUID,
    payload: ReactionRequest,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ReactionResponse:
    if payload.video_id is not None and payload.video_id != video_id:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="videoId does not match the video in the path",
        )
    snapshot = record_reaction(db, video_id=video_id, user_id=current_user.id, desired=payload.desired)
    return _reaction_response(snapshot)


@router.delete("/{video_id}/reaction", response_model=ReactionResponse)
async def clear_reaction_endpoint(
    video_id: UUID,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> ReactionResponse:
    return _reaction_response(clear_reaction(db, video_id=video_id, user_id=current_user.id))


@router.get("/{video_id}/engagement", response_model=EngagementResponse)
async def engagement_endpoint(
    video_id: UUID,
    db: Session = Depends(get_session),
    current_user: User | None = Depends(get_optional_user),
) -> EngagementResponse:
    viewer_id = current_user.id if current_user else None
    return EngagementResponse(**engagement_snapshot(db, video_id=video_id, viewer_id=viewer_id))
