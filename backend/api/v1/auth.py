"""Authentication endpoints."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, Response, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator, model_validator
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_config, get_current_user, get_db, get_gateway
from core import Settings
from models import User
from services import (
    MediaUploadError,
    MediaUploadGateway,
    UploadedMedia,
    UploadTooLargeError,
    discard_staged,
    stage_upload,
)
from services.auth import (
    REFRESH_COOKIE,
    DuplicateIdentityError,
    authenticate,
    clear_refresh_token,
    clear_token_cookies,
    find_identity_conflict,
    issue_token_pair,
    normalize_email,
    normalize_username,
    register_user,
    renew_session,
    set_token_cookies,
    store_refresh_token,
)

router = APIRouter(prefix="/auth", tags=["auth"])

AVATAR_FOLDER = "avatars"
COVER_IMAGE_FOLDER = "covers"


class RegisterFields(BaseModel):
    username: str = Field(min_length=3, max_length=64)
    email: EmailStr
    full_name: str = Field(min_length=1, max_length=120)
    password: str = Field(min_length=6, max_length=128)

    @field_validator("username")
    @classmethod
    def _normalize_username(cls, value: str) -> str:
        normalized = normalize_username(value)
        if "@" in normalized or " " in normalized:
            raise ValueError("Username cannot contain '@' or spaces")
        return normalized

    @field_validator("full_name")
    @classmethod
    def _strip_full_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Full name must not be blank")
        return stripped


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: EmailStr
    full_name: str
    avatar_url: str
    cover_image_url: str | None = None


class LoginRequest(BaseModel):
    username: str | None = Field(default=None, min_length=1, max_length=64)
    email: str | None = Field(default=None, min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)

    @model_validator(mode="after")
    def _require_identifier(self) -> LoginRequest:
        if not self.username and not self.email:
            raise ValueError("Either username or email is required")
        return self


class RefreshRequest(BaseModel):
    refresh_token: str | None = None


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(TokenResponse):
    user: UserResponse


def _conflict(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)


async def _stage(upload: UploadFile, config: Settings) -> Path:
    try:
        return await stage_upload(upload, config.upload_tmp_dir, config.upload_max_bytes)
    except UploadTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=str(exc),
        ) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


async def _upload(gateway: MediaUploadGateway, path: Path, folder: str) -> UploadedMedia:
    try:
        return await asyncio.to_thread(gateway.upload, path, folder=folder)
    except MediaUploadError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Media upload failed",
        ) from exc


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=UserResponse)
async def register(
    username: str = Form(...),
    email: str = Form(...),
    full_name: str = Form(...),
    password: str = Form(...),
    avatar: UploadFile = File(...),
    cover_image: UploadFile | None = File(default=None),
    session: AsyncSession = Depends(get_db),
    gateway: MediaUploadGateway = Depends(get_gateway),
    config: Settings = Depends(get_config),
) -> UserResponse:
    try:
        fields = RegisterFields(
            username=username,
            email=email,
            full_name=full_name,
            password=password,
        )
    except ValidationError as exc:
        raise RequestValidationError(
            exc.errors(include_url=False, include_context=False, include_input=False)
        ) from exc

    normalized_email = normalize_email(str(fields.email))
    conflict = await find_identity_conflict(
        session,
        username=fields.username,
        email=normalized_email,
    )
    if conflict is not None:
        raise _conflict(str(DuplicateIdentityError(conflict)))

    avatar_path: Path | None = None
    cover_path: Path | None = None
    uploaded_keys: list[str] = []
    try:
        avatar_path = await _stage(avatar, config)
        if cover_image is not None and cover_image.filename:
            cover_path = await _stage(cover_image, config)

        avatar_media = await _upload(gateway, avatar_path, AVATAR_FOLDER)
        uploaded_keys.append(avatar_media.object_key)
        cover_media = None
        if cover_path is not None:
            cover_media = await _upload(gateway, cover_path, COVER_IMAGE_FOLDER)
            uploaded_keys.append(cover_media.object_key)

        user = await register_user(
            session,
            username=fields.username,
            email=normalized_email,
            full_name=fields.full_name,
            password=fields.password,
            avatar_url=avatar_media.url,
            cover_image_url=cover_media.url if cover_media else None,
        )
    except DuplicateIdentityError as exc:
        await asyncio.to_thread(gateway.delete_quietly, *uploaded_keys)
        raise _conflict(str(exc)) from exc
    except Exception:
        await asyncio.to_thread(gateway.delete_quietly, *uploaded_keys)
        raise
    finally:
        discard_staged(avatar_path, cover_path)

    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_db),
    config: Settings = Depends(get_config),
) -> LoginResponse:
    user = await authenticate(
        session,
        username=payload.username,
        email=payload.email,
        password=payload.password,
    )
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    tokens = issue_token_pair(user, config)
    store_refresh_token(user, tokens.refresh_token)
    session.add(user)
    await session.commit()
    await session.refresh(user)

    set_token_cookies(response, tokens.access_token, tokens.refresh_token, config)
    return LoginResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        user=UserResponse.model_validate(user),
    )


@router.post("/refresh", response_model=TokenResponse)
async def refresh_tokens(
    request: Request,
    response: Response,
    payload: RefreshRequest | None = None,
    session: AsyncSession = Depends(get_db),
    config: Settings = Depends(get_config),
) -> TokenResponse:
    refresh_token = request.cookies.get(REFRESH_COOKIE) or (
        payload.refresh_token if payload else None
    )
    if not refresh_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing refresh token",
        )

    _, tokens = await renew_session(session, refresh_token, config)
    await session.commit()

    set_token_cookies(response, tokens.access_token, tokens.refresh_token, config)
    return TokenResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token)


@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(
    response: Response,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
    config: Settings = Depends(get_config),
) -> dict[str, Any]:
    await clear_refresh_token(session, current_user.id)
    await session.commit()

    clear_token_cookies(response, config)
    return {"detail": "Logged out"}
