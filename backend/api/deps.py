"""FastAPI dependencies shared by the v1 routers."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from core import InvalidTokenError, Settings, get_settings
from db.session import get_session
from models import User
from services import MediaUploadGateway, get_media_gateway
from services.auth import ACCESS_COOKIE, decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    async for session in get_session():
        yield session


def get_config() -> Settings:
    return get_settings()


def get_gateway() -> MediaUploadGateway:
    return get_media_gateway()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db),
    config: Settings = Depends(get_config),
) -> User:
    """Resolve the caller from a bearer header or the access-token cookie."""
    token = credentials.credentials if credentials else request.cookies.get(ACCESS_COOKIE)
    if not token:
        raise _unauthorized("Not authenticated")

    try:
        payload = decode_access_token(token, config)
    except InvalidTokenError as exc:
        raise _unauthorized("Invalid access token") from exc

    user = await session.get(User, payload["sub"])
    if user is None:
        raise _unauthorized("User not found")
    return user
