"""Endpoints for the authenticated user's own account."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_config, get_current_user, get_db
from core import Settings
from models import User
from services.auth import (
    DuplicateIdentityError,
    PasswordMismatchError,
    change_password,
    clear_token_cookies,
    update_profile,
)
from services.videos import get_watch_history

from .auth import UserResponse
from .videos import VideoResponse

router = APIRouter(prefix="/users", tags=["users"])


class ProfileUpdateRequest(BaseModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=120)
    email: EmailStr | None = None


class PasswordChangeRequest(BaseModel):
    current_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=6, max_length=128)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.patch("/me", response_model=UserResponse)
async def update_me(
    payload: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> UserResponse:
    try:
        user = await update_profile(
            session,
            current_user,
            full_name=payload.full_name,
            email=str(payload.email) if payload.email is not None else None,
        )
    except DuplicateIdentityError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return UserResponse.model_validate(user)


@router.post("/me/password", status_code=status.HTTP_200_OK)
async def update_password(
    payload: PasswordChangeRequest,
    response: Response,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
    config: Settings = Depends(get_config),
) -> dict[str, str]:
    """Change the password; existing refresh tokens stop working."""
    try:
        await change_password(
            session,
            current_user,
            current_password=payload.current_password,
            new_password=payload.new_password,
        )
    except PasswordMismatchError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    clear_token_cookies(response, config)
    return {"detail": "Password changed"}


@router.get("/me/history", response_model=list[VideoResponse])
async def get_my_history(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> list[VideoResponse]:
    videos = await get_watch_history(session, current_user.id)
    return [VideoResponse.model_validate(video) for video in videos]
