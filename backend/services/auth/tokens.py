"""Access and refresh token issuance for a user."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    Settings,
    decode_token,
    encode_token,
)
from models import User


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def access_claims(user: User) -> dict[str, Any]:
    return {
        "sub": user.id,
        "email": user.email,
        "username": user.username,
        "full_name": user.full_name,
    }


def issue_access_token(user: User, config: Settings) -> str:
    return encode_token(
        access_claims(user),
        secret=config.access_token_secret,
        expires_in=config.access_token_expiry,
        token_type=ACCESS_TOKEN_TYPE,
        algorithm=config.jwt_algorithm,
    )


def issue_refresh_token(user: User, config: Settings) -> str:
    return encode_token(
        {"sub": user.id},
        secret=config.refresh_token_secret,
        expires_in=config.refresh_token_expiry,
        token_type=REFRESH_TOKEN_TYPE,
        algorithm=config.jwt_algorithm,
    )


def issue_token_pair(user: User, config: Settings) -> TokenPair:
    return TokenPair(
        access_token=issue_access_token(user, config),
        refresh_token=issue_refresh_token(user, config),
    )


def decode_access_token(token: str, config: Settings) -> dict[str, Any]:
    return decode_token(
        token,
        secret=config.access_token_secret,
        algorithm=config.jwt_algorithm,
        expected_type=ACCESS_TOKEN_TYPE,
    )


def decode_refresh_token(token: str, config: Settings) -> dict[str, Any]:
    return decode_token(
        token,
        secret=config.refresh_token_secret,
        algorithm=config.jwt_algorithm,
        expected_type=REFRESH_TOKEN_TYPE,
    )
