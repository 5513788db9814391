"""Database error helpers."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

UNIQUE_FIELDS = ("username", "email")


def is_unique_violation(error: IntegrityError) -> bool:
    """Return True when the IntegrityError indicates a unique-constraint conflict."""
    original = getattr(error, "orig", None)
    sqlstate = getattr(original, "sqlstate", None) or getattr(original, "pgcode", None)
    if sqlstate == "23505":
        return True
    message = str(original or error).lower()
    return "duplicate key" in message or "unique constraint" in message


def conflicting_field(error: IntegrityError, fields: tuple[str, ...] = UNIQUE_FIELDS) -> str | None:
    """Best-effort name of the column whose uniqueness was violated."""
    if not is_unique_violation(error):
        return None
    message = str(getattr(error, "orig", None) or error).lower()
    for field in fields:
        if f".{field}" in message or f"({field})" in message:
            return field
    return None


__all__ = ["conflicting_field", "is_unique_violation"]
