"""Authentication domain services."""

from .cookies import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    clear_token_cookies,
    set_token_cookies,
)
from .credentials import (
    DuplicateIdentityError,
    PasswordMismatchError,
    authenticate,
    change_password,
    find_identity_conflict,
    normalize_email,
    normalize_username,
    register_user,
    update_profile,
)
from .session_record import (
    clear_refresh_token,
    hash_refresh_token,
    renew_session,
    rotate_refresh_token,
    store_refresh_token,
    validate_refresh_token,
)
from .tokens import (
    TokenPair,
    decode_access_token,
    decode_refresh_token,
    issue_access_token,
    issue_refresh_token,
    issue_token_pair,
)

__all__ = [
    "ACCESS_COOKIE",
    "REFRESH_COOKIE",
    "clear_token_cookies",
    "set_token_cookies",
    "DuplicateIdentityError",
    "PasswordMismatchError",
    "authenticate",
    "change_password",
    "find_identity_conflict",
    "normalize_email",
    "normalize_username",
    "register_user",
    "update_profile",
    "clear_refresh_token",
    "hash_refresh_token",
    "renew_session",
    "rotate_refresh_token",
    "store_refresh_token",
    "validate_refresh_token",
    "TokenPair",
    "decode_access_token",
    "decode_refresh_token",
    "issue_access_token",
    "issue_refresh_token",
    "issue_token_pair",
]
