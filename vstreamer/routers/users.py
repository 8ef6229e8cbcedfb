"""Channel signup and login routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from ..database import get_session
from ..models import User
from ..schemas import AuthResponse, LoginRequest, UserProfile
from ..services import authenticate_user, create_access_token, get_current_user, register_user

router = APIRouter(prefix="/api/v1/user", tags=["users"])


@router.post("/signup", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
async def signup_endpoint(
    channel_name: str = Form(..., min_length=1, max_length=150),
    email: str = Form(...),
    password: str = Form(..., min_length=6, max_length=128),
    phone: str | None = Form(None),
    logo: UploadFile | None = File(None),
    db: Session = Depends(get_session),
) -> UserProfile:
    """Register a channel from ``multipart/form-data``; the logo image is optional."""

    user = await register_user(
        db,
        channel_name=channel_name,
        email=email,
        password=password,
        phone=phone,
        logo=logo,
    )
    return UserProfile.model_validate(user)


@router.post("/login", response_model=AuthResponse)
async def login_endpoint(
    payload: LoginRequest,
    db: Session = Depends(get_session),
) -> AuthResponse:
    user = authenticate_user(db, str(payload.email), payload.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    profile = UserProfile.model_validate(user)
    return AuthResponse(**profile.model_dump(), token=create_access_token(user.id))


@router.get("/me", response_model=UserProfile)
async def me_endpoint(current_user: User = Depends(get_current_user)) -> UserProfile:
    return UserProfile.model_validate(current_user)
