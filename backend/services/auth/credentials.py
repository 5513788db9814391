"""Credential write path: registration, password changes and login lookup."""

from __future__ import annotations

import asyncio
from typing import Any, cast

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from core import hash_password, needs_rehash, verify_password
from db.errors import conflicting_field, is_unique_violation
from models import User


class DuplicateIdentityError(ValueError):
    """Raised when a username or email is already taken."""

    def __init__(self, field: str | None = None) -> None:
        self.field = field
        label = field or "username or email"
        super().__init__(f"User with that {label} already exists")


class PasswordMismatchError(ValueError):
    """Raised when the current password supplied for a change is wrong."""


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def normalize_username(value: str) -> str:
    return value.strip().lower()


def normalize_email(value: str) -> str:
    return value.strip().lower()


async def find_identity_conflict(
    session: AsyncSession,
    *,
    username: str | None = None,
    email: str | None = None,
    exclude_user_id: str | None = None,
) -> str | None:
    """Return the first field already claimed by another user, if any."""
    conditions = []
    if username is not None:
        conditions.append(_eq(User.username, username))
    if email is not None:
        conditions.append(_eq(User.email, email))
    if not conditions:
        return None

    stmt = select(User).where(or_(*conditions))
    if exclude_user_id is not None:
        stmt = stmt.where(cast(ColumnElement[bool], User.id != exclude_user_id))
    result = await session.execute(stmt.limit(1))
    existing = result.scalar_one_or_none()
    if existing is None:
        return None
    if username is not None and existing.username == username:
        return "username"
    return "email"


async def _commit_identity(session: AsyncSession, user: User) -> None:
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            raise DuplicateIdentityError(conflicting_field(exc)) from exc
        raise
    await session.refresh(user)


async def register_user(
    session: AsyncSession,
    *,
    username: str,
    email: str,
    full_name: str,
    password: str,
    avatar_url: str,
    cover_image_url: str | None = None,
) -> User:
    """Create a user, hashing the raw password exactly once before insert."""
    normalized_username = normalize_username(username)
    normalized_email = normalize_email(email)
    conflict = await find_identity_conflict(
        session,
        username=normalized_username,
        email=normalized_email,
    )
    if conflict is not None:
        raise DuplicateIdentityError(conflict)

    password_hash = await asyncio.to_thread(hash_password, password)
    user = User(
        username=normalized_username,
        email=normalized_email,
        full_name=full_name.strip(),
        avatar_url=avatar_url,
        cover_image_url=cover_image_url,
        password_hash=password_hash,
    )
    session.add(user)
    await _commit_identity(session, user)
    return user


async def update_profile(
    session: AsyncSession,
    user: User,
    *,
    full_name: str | None = None,
    email: str | None = None,
) -> User:
    """Update profile fields; the password hash is left as stored."""
    if email is not None:
        normalized_email = normalize_email(email)
        if normalized_email != user.email:
            conflict = await find_identity_conflict(
                session, email=normalized_email, exclude_user_id=user.id
            )
            if conflict is not None:
                raise DuplicateIdentityError(conflict)
            user.email = normalized_email
    if full_name is not None:
        user.full_name = full_name.strip()

    session.add(user)
    await _commit_identity(session, user)
    return user


async def change_password(
    session: AsyncSession,
    user: User,
    *,
    current_password: str,
    new_password: str,
) -> User:
    """Replace the password and drop the stored refresh token."""
    matches = await asyncio.to_thread(verify_password, current_password, user.password_hash)
    if not matches:
        raise PasswordMismatchError("Current password is incorrect")

    user.password_hash = await asyncio.to_thread(hash_password, new_password)
    user.refresh_token_hash = None
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


async def authenticate(
    session: AsyncSession,
    *,
    password: str,
    username: str | None = None,
    email: str | None = None,
) -> User | None:
    """Return the user whose credentials match, or None."""
    if username:
        stmt = select(User).where(_eq(User.username, normalize_username(username)))
    elif email:
        stmt = select(User).where(_eq(User.email, normalize_email(email)))
    else:
        return None

    result = await session.execute(stmt.limit(1))
    user = result.scalar_one_or_none()
    if user is None:
        return None
    if not await asyncio.to_thread(verify_password, password, user.password_hash):
        return None

    if needs_rehash(user.password_hash):
        user.password_hash = await asyncio.to_thread(hash_password, password)
        session.add(user)
    return user
