"""HTTP cookie helpers for auth token transport."""

from __future__ import annotations

from typing import Literal

from fastapi import Response

from core import Settings

ACCESS_COOKIE = "access_token"
REFRESH_COOKIE = "refresh_token"
COOKIE_PATH = "/"
COOKIE_SAMESITE: Literal["lax", "strict", "none"] = "lax"


def cookies_secure(config: Settings) -> bool:
    return (
        config.app_env.strip().lower() not in {"local", "test"}
        and not config.allow_insecure_http_cookies
    )


def set_token_cookies(
    response: Response,
    access_token: str,
    refresh_token: str,
    config: Settings,
) -> None:
    secure = cookies_secure(config)
    response.set_cookie(
        key=ACCESS_COOKIE,
        value=access_token,
        httponly=True,
        secure=secure,
        samesite=COOKIE_SAMESITE,
        max_age=int(config.access_token_expiry.total_seconds()),
        path=COOKIE_PATH,
    )
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=refresh_token,
        httponly=True,
        secure=secure,
        samesite=COOKIE_SAMESITE,
        max_age=int(config.refresh_token_expiry.total_seconds()),
        path=COOKIE_PATH,
    )


def clear_token_cookies(response: Response, config: Settings) -> None:
    secure = cookies_secure(config)
    for key in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            key=key,
            path=COOKIE_PATH,
            secure=secure,
            samesite=COOKIE_SAMESITE,
        )
