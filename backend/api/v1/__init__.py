"""Version 1 HTTP API."""

from fastapi import APIRouter

from . import auth, users, videos

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(videos.router)

__all__ = ["api_router"]
