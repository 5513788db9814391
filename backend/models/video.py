"""Video catalog model."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    true,
)
from sqlmodel import Field, SQLModel


class Video(SQLModel, table=True):
    """Uploaded video and the media URLs that back it."""

    __tablename__ = "videos"
    __table_args__ = (
        Index("ix_videos_owner_created_at", "owner_id", "created_at"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), sa_column=Column(String(36), primary_key=True))
    video_url: str = Field(sa_column=Column(String(1024), nullable=False))
    thumbnail_url: str = Field(sa_column=Column(String(1024), nullable=False))
    title: str = Field(sa_column=Column(String(200), nullable=False))
    description: str = Field(sa_column=Column(Text, nullable=False))
    duration: float = Field(sa_column=Column(Float, nullable=False))
    views: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, server_default="0"),
    )
    is_published: bool = Field(
        default=True,
        sa_column=Column(Boolean, nullable=False, server_default=true()),
    )
    owner_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        )
    )
    created_at: datetime = Field(
        sa_column=Column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )
    )
    updated_at: datetime = Field(
        sa_column=Column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )
    )
