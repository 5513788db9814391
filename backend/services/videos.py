"""Video catalog: publishing, view counting and watch history."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, cast

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import User, Video, WatchHistoryEntry

from .storage import MediaUploadGateway, UploadedMedia

logger = logging.getLogger(__name__)

VIDEO_FOLDER = "videos"
THUMBNAIL_FOLDER = "thumbnails"


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


async def publish_video(
    session: AsyncSession,
    gateway: MediaUploadGateway,
    *,
    owner: User,
    title: str,
    description: str,
    duration: float,
    video_path: Path,
    thumbnail_path: Path,
) -> Video:
    """Upload the media files, then record the catalog entry.

    If the thumbnail upload fails the already uploaded video object is
    removed, and a failed insert removes both objects, so a failure never
    leaves a half-published entry behind.
    """
    video_media: UploadedMedia = await asyncio.to_thread(
        gateway.upload, video_path, folder=VIDEO_FOLDER
    )
    try:
        thumbnail_media: UploadedMedia = await asyncio.to_thread(
            gateway.upload, thumbnail_path, folder=THUMBNAIL_FOLDER
        )
    except Exception:
        await asyncio.to_thread(gateway.delete_quietly, video_media.object_key)
        raise

    video = Video(
        video_url=video_media.url,
        thumbnail_url=thumbnail_media.url,
        title=title.strip(),
        description=description.strip(),
        duration=duration,
        owner_id=owner.id,
    )
    session.add(video)
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        await asyncio.to_thread(
            gateway.delete_quietly,
            video_media.object_key,
            thumbnail_media.object_key,
        )
        raise
    await session.refresh(video)
    logger.info("Video published", extra={"video_id": video.id, "owner_id": owner.id})
    return video


async def get_video(session: AsyncSession, video_id: str) -> Video | None:
    return await session.get(Video, video_id)


async def increment_views(session: AsyncSession, video: Video) -> Video:
    await session.execute(
        update(Video)
        .where(_eq(Video.id, video.id))
        .values(views=Video.views + 1)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    await session.refresh(video)
    return video


async def set_published(session: AsyncSession, video: Video, is_published: bool) -> Video:
    video.is_published = is_published
    session.add(video)
    await session.commit()
    await session.refresh(video)
    return video


async def toggle_published(session: AsyncSession, video: Video) -> Video:
    return await set_published(session, video, not video.is_published)


async def record_watch(session: AsyncSession, user_id: str, video_id: str) -> None:
    session.add(WatchHistoryEntry(user_id=user_id, video_id=video_id))
    await session.commit()


async def get_watch_history(session: AsyncSession, user_id: str) -> list[Video]:
    """Return watched videos, oldest view first; repeats stay in place."""
    entry_id = cast(Any, WatchHistoryEntry.id)
    result = await session.execute(
        select(Video)
        .join(WatchHistoryEntry, _eq(WatchHistoryEntry.video_id, Video.id))
        .where(_eq(WatchHistoryEntry.user_id, user_id))
        .order_by(entry_id.asc())
    )
    return list(result.scalars().all())
