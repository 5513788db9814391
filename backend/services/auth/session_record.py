"""Refresh-token persistence and rotation on the user record."""

from __future__ import annotations

import hashlib
import hmac
from typing import Any, cast

from fastapi import HTTPException, status
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from core import InvalidTokenError, Settings
from models import User

from .tokens import TokenPair, decode_refresh_token, issue_token_pair


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
    )


def hash_refresh_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def refresh_token_matches(user: User, token: str) -> bool:
    stored = user.refresh_token_hash
    if stored is None:
        return False
    return hmac.compare_digest(stored, hash_refresh_token(token))


def store_refresh_token(user: User, token: str) -> None:
    """Overwrite the stored refresh token; the caller commits."""
    user.refresh_token_hash = hash_refresh_token(token)


async def rotate_refresh_token(
    session: AsyncSession,
    user_id: str,
    *,
    presented: str,
    replacement: str,
) -> bool:
    """Swap ``presented`` for ``replacement`` only if it is still the stored token.

    Returns False when a concurrent renewal already replaced it.
    """
    result = await session.execute(
        update(User)
        .where(
            _eq(User.id, user_id),
            _eq(User.refresh_token_hash, hash_refresh_token(presented)),
        )
        .values(refresh_token_hash=hash_refresh_token(replacement))
        .execution_options(synchronize_session=False)
    )
    return cast(Any, result).rowcount == 1


async def clear_refresh_token(session: AsyncSession, user_id: str) -> None:
    await session.execute(
        update(User)
        .where(_eq(User.id, user_id))
        .values(refresh_token_hash=None)
        .execution_options(synchronize_session=False)
    )


async def validate_refresh_token(
    session: AsyncSession,
    token: str,
    config: Settings,
) -> User:
    """Return the token's owner when it is validly signed and currently stored."""
    try:
        payload = decode_refresh_token(token, config)
    except InvalidTokenError as exc:
        raise _unauthorized("Invalid refresh token") from exc

    user = await session.get(User, payload["sub"], populate_existing=True)
    if user is None:
        raise _unauthorized("Invalid refresh token")
    if not refresh_token_matches(user, token):
        raise _unauthorized("Refresh token is expired or used")
    return user


async def renew_session(
    session: AsyncSession,
    token: str,
    config: Settings,
) -> tuple[User, TokenPair]:
    """Validate ``token`` and rotate it for a freshly issued pair; the caller commits."""
    user = await validate_refresh_token(session, token, config)
    tokens = issue_token_pair(user, config)
    rotated = await rotate_refresh_token(
        session,
        user.id,
        presented=token,
        replacement=tokens.refresh_token,
    )
    if not rotated:
        await session.rollback()
        raise _unauthorized("Refresh token is expired or used")
    return user, tokens
