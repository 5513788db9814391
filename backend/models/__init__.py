"""SQLModel models package."""

from .user import User
from .video import Video
from .watch_history import WatchHistoryEntry

__all__ = [
    "User",
    "Video",
    "WatchHistoryEntry",
]
