"""Database helpers."""

from .errors import conflicting_field, is_unique_violation
from .session import (
    check_database_connection,
    dispose_engine,
    get_engine,
    get_session,
    get_session_maker,
)

__all__ = [
    "check_database_connection",
    "conflicting_field",
    "dispose_engine",
    "get_engine",
    "get_session",
    "get_session_maker",
    "is_unique_violation",
]
