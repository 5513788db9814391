"""Password hashing and JWT helpers."""

from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import ConfigurationError

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"
DEFAULT_ALGORITHM = "HS256"

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__default_rounds=10,
    bcrypt__min_rounds=10,
)


class InvalidTokenError(ValueError):
    """Raised when a token fails signature, expiry or type checks."""


def password_digest(password: str) -> str:
    """SHA-256 hex of the password; bcrypt only reads the first 72 bytes of its input."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def hash_password(password: str) -> str:
    return pwd_context.hash(password_digest(password))


def verify_password(password: str, password_hash: str) -> bool:
    """Return True when ``password`` matches ``password_hash``.

    Unknown or malformed hashes count as a mismatch instead of raising.
    """
    try:
        return pwd_context.verify(password_digest(password), password_hash)
    except (ValueError, TypeError):
        return False


def needs_rehash(password_hash: str) -> bool:
    try:
        return pwd_context.needs_update(password_hash)
    except (ValueError, TypeError):
        return False


def encode_token(
    claims: dict[str, Any],
    *,
    secret: str | None,
    expires_in: timedelta,
    token_type: str,
    algorithm: str = DEFAULT_ALGORITHM,
    now: datetime | None = None,
) -> str:
    """Sign ``claims`` into a JWT that expires after ``expires_in``."""
    if not secret:
        raise ConfigurationError(f"No signing secret configured for {token_type} tokens")
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        **claims,
        "type": token_type,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + expires_in).timestamp()),
        "jti": uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(
    token: str,
    *,
    secret: str | None,
    algorithm: str = DEFAULT_ALGORITHM,
    expected_type: str | None = None,
) -> dict[str, Any]:
    if not secret:
        raise ConfigurationError("No signing secret configured")
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc
    if expected_type is not None and payload.get("type") != expected_type:
        raise InvalidTokenError(f"Expected a {expected_type} token")
    if not isinstance(payload.get("sub"), str):
        raise InvalidTokenError("Token is missing a subject")
    return payload
