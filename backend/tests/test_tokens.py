"""Tests for issuing access and refresh tokens for a user."""

import pytest

from core import InvalidTokenError, decode_token
from models import User
from services.auth import (
    decode_access_token,
    decode_refresh_token,
    issue_access_token,
    issue_refresh_token,
    issue_token_pair,
)


def _user() -> User:
    return User(
        id="3f0e3d4c-0000-4000-8000-000000000001",
        username="alice",
        email="alice@x.com",
        full_name="Alice Example",
        avatar_url="https://media.test/videotube/avatars/a.png",
        password_hash="$2b$10$placeholder",
    )


def test_access_token_carries_identity_claims(test_settings):
    token = issue_access_token(_user(), test_settings)

    payload = decode_access_token(token, test_settings)

    assert payload["sub"] == "3f0e3d4c-0000-4000-8000-000000000001"
    assert payload["email"] == "alice@x.com"
    assert payload["username"] == "alice"
    assert payload["full_name"] == "Alice Example"
    assert payload["exp"] - payload["iat"] == int(test_settings.access_token_expiry.total_seconds())


def test_refresh_token_carries_only_the_id(test_settings):
    token = issue_refresh_token(_user(), test_settings)

    payload = decode_refresh_token(token, test_settings)

    assert payload["sub"] == "3f0e3d4c-0000-4000-8000-000000000001"
    assert {"email", "username", "full_name"}.isdisjoint(payload)
    assert payload["exp"] - payload["iat"] == int(test_settings.refresh_token_expiry.total_seconds())


def test_tokens_are_signed_with_distinct_secrets(test_settings):
    tokens = issue_token_pair(_user(), test_settings)

    with pytest.raises(InvalidTokenError):
        decode_token(tokens.access_token, secret=test_settings.refresh_token_secret)
    with pytest.raises(InvalidTokenError):
        decode_token(tokens.refresh_token, secret=test_settings.access_token_secret)
    with pytest.raises(InvalidTokenError):
        decode_token(tokens.access_token, secret="some-other-secret")


def test_access_token_is_not_accepted_as_refresh_token(test_settings):
    test_settings.refresh_token_secret = test_settings.access_token_secret
    token = issue_access_token(_user(), test_settings)

    with pytest.raises(InvalidTokenError):
        decode_refresh_token(token, test_settings)
