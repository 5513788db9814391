"""Video upload and catalog endpoints."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import NoReturn

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_config, get_current_user, get_db, get_gateway
from core import Settings
from models import User, Video
from services import (
    MediaUploadError,
    MediaUploadGateway,
    UploadTooLargeError,
    discard_staged,
    stage_upload,
)
from services.videos import (
    get_video,
    increment_views,
    publish_video,
    record_watch,
    toggle_published,
)

router = APIRouter(prefix="/videos", tags=["videos"])

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 5000


class VideoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    video_url: str
    thumbnail_url: str
    title: str
    description: str
    duration: float
    views: int
    is_published: bool
    owner_id: str
    created_at: datetime


def _raise_video_not_found() -> NoReturn:
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Video not found",
    )


async def _require_video(session: AsyncSession, video_id: str) -> Video:
    video = await get_video(session, video_id)
    if video is None:
        _raise_video_not_found()
    return video


@router.post("", status_code=status.HTTP_201_CREATED, response_model=VideoResponse)
async def upload_video(
    title: str = Form(..., min_length=1, max_length=MAX_TITLE_LENGTH),
    description: str = Form(..., min_length=1, max_length=MAX_DESCRIPTION_LENGTH),
    duration: float = Form(..., ge=0),
    video_file: UploadFile = File(...),
    thumbnail: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
    gateway: MediaUploadGateway = Depends(get_gateway),
    config: Settings = Depends(get_config),
) -> VideoResponse:
    if not title.strip() or not description.strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail="Title and description must not be blank",
        )

    video_path: Path | None = None
    thumbnail_path: Path | None = None
    try:
        try:
            video_path = await stage_upload(video_file, config.upload_tmp_dir, config.upload_max_bytes)
            thumbnail_path = await stage_upload(thumbnail, config.upload_tmp_dir, config.upload_max_bytes)
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

        try:
            video = await publish_video(
                session,
                gateway,
                owner=current_user,
                title=title,
                description=description,
                duration=duration,
                video_path=video_path,
                thumbnail_path=thumbnail_path,
            )
        except MediaUploadError as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Media upload failed",
            ) from exc
    finally:
        discard_staged(video_path, thumbnail_path)

    return VideoResponse.model_validate(video)


@router.get("/{video_id}", response_model=VideoResponse)
async def watch_video(
    video_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> VideoResponse:
    """Return a video, counting the view and appending it to watch history."""
    video = await _require_video(session, video_id)
    if not video.is_published and video.owner_id != current_user.id:
        _raise_video_not_found()

    video = await increment_views(session, video)
    await record_watch(session, current_user.id, video.id)
    return VideoResponse.model_validate(video)


@router.patch("/{video_id}/publish", response_model=VideoResponse)
async def toggle_publish(
    video_id: str,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db),
) -> VideoResponse:
    video = await _require_video(session, video_id)
    if video.owner_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the owner can change publication",
        )
    video = await toggle_published(session, video)
    return VideoResponse.model_validate(video)
