"""Comment routes; edits and deletes are limited to the comment's author."""
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import User
from ..schemas import CommentCreate, CommentListResponse, CommentMessageResponse, CommentResponse, CommentUpdate
from ..services import create_comment, delete_comment, get_current_user, list_comments, update_comment

router = APIRouter(prefix="/api/v1/comment", tags=["comments"])


@router.post("/new", response_model=CommentMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_comment_endpoint(
    payload: CommentCreate,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> CommentMessageResponse:
    record = create_comment(db, video_id=payload.video_id, author=current_user, comment_text=payload.comment_text)
    return CommentMessageResponse(message="Comment added successfully", comment=CommentResponse(**record))


@router.put("/{comment_id}", response_model=CommentMessageResponse)
async def update_comment_endpoint(
    comment_id: UUID,
    payload: CommentUpdate,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> CommentMessageResponse:
    record = update_comment(db, comment_id=comment_id, requester=current_user, comment_text=payload.comment_text)
    return CommentMessageResponse(message="Comment updated successfully", comment=CommentResponse(**record))


@router.delete("/{comment_id}", response_model=CommentMessageResponse)
async def delete_comment_endpoint(
    comment_id: UUID,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> CommentMessageResponse:
    delete_comment(db, comment_id=comment_id, requester_id=current_user.id)
    return CommentMessageResponse(message="Comment deleted successfully")


@router.get("/{video_id}", response_model=CommentListResponse)
async def list_comments_endpoint(
    video_id: UUID,
    db: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> CommentListResponse:
    return CommentListResponse(items=[CommentResponse(**item) for item in list_comments(db, video_id=video_id)])
