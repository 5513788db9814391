"""Core configuration and security primitives."""

from .config import ConfigurationError, Settings, get_settings, parse_duration, settings
from .security import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    InvalidTokenError,
    decode_token,
    encode_token,
    hash_password,
    needs_rehash,
    password_digest,
    verify_password,
)

__all__ = [
    "ACCESS_TOKEN_TYPE",
    "REFRESH_TOKEN_TYPE",
    "ConfigurationError",
    "InvalidTokenError",
    "Settings",
    "decode_token",
    "encode_token",
    "get_settings",
    "hash_password",
    "needs_rehash",
    "parse_duration",
    "password_digest",
    "settings",
    "verify_password",
]
