"""Tests for password hashing and token signing primitives."""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt
from passlib.context import CryptContext

from core import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    ConfigurationError,
    InvalidTokenError,
    decode_token,
    encode_token,
    hash_password,
    needs_rehash,
    password_digest,
    verify_password,
)


def test_hash_password_never_returns_plaintext_and_verifies():
    password_hash = hash_password("Secr3t!")

    assert password_hash != "Secr3t!"
    assert password_hash.startswith("$2b$10$")
    assert verify_password("Secr3t!", password_hash)


def test_hash_password_salts_every_call():
    first = hash_password("Secr3t!")
    second = hash_password("Secr3t!")

    assert first != second
    assert verify_password("Secr3t!", first)
    assert verify_password("Secr3t!", second)


@pytest.mark.parametrize("attempt", ["secr3t!", "Secr3t", "Secr3t!!", ""])
def test_verify_password_rejects_other_passwords(attempt):
    assert verify_password(attempt, hash_password("Secr3t!")) is False


def test_verify_password_distinguishes_passwords_past_72_bytes():
    shared_prefix = "a" * 72
    password_hash = hash_password(shared_prefix + "-first")

    assert verify_password(shared_prefix + "-first", password_hash)
    assert verify_password(shared_prefix + "-second", password_hash) is False
    assert verify_password(shared_prefix, password_hash) is False


def test_verify_password_handles_multibyte_passwords():
    password = "\u00e9" * 60
    password_hash = hash_password(password)

    assert verify_password(password, password_hash)
    assert verify_password("\u00e9" * 59 + "e", password_hash) is False


def test_verify_password_treats_malformed_hash_as_mismatch():
    assert verify_password("Secr3t!", "Secr3t!") is False
    assert verify_password("Secr3t!", "") is False


def test_needs_rehash_flags_weaker_cost():
    weak_hash = CryptContext(schemes=["bcrypt"], bcrypt__default_rounds=4).hash(
        password_digest("Secr3t!")
    )

    assert needs_rehash(weak_hash) is True
    assert needs_rehash(hash_password("Secr3t!")) is False
    assert needs_rehash("not-a-hash") is False


def test_encode_and_decode_round_trip_claims():
    token = encode_token(
        {"sub": "user-1", "username": "alice"},
        secret="secret-a",
        expires_in=timedelta(minutes=5),
        token_type=ACCESS_TOKEN_TYPE,
    )

    payload = decode_token(token, secret="secret-a", expected_type=ACCESS_TOKEN_TYPE)

    assert payload["sub"] == "user-1"
    assert payload["username"] == "alice"
    assert payload["type"] == ACCESS_TOKEN_TYPE
    assert payload["exp"] - payload["iat"] == 300
    assert payload["jti"]


def test_tokens_minted_in_the_same_second_differ():
    now = datetime.now(timezone.utc)
    kwargs = {
        "secret": "secret-a",
        "expires_in": timedelta(minutes=5),
        "token_type": REFRESH_TOKEN_TYPE,
        "now": now,
    }

    assert encode_token({"sub": "user-1"}, **kwargs) != encode_token({"sub": "user-1"}, **kwargs)


def test_decode_rejects_wrong_secret():
    token = encode_token(
        {"sub": "user-1"},
        secret="secret-a",
        expires_in=timedelta(minutes=5),
        token_type=ACCESS_TOKEN_TYPE,
    )

    with pytest.raises(InvalidTokenError):
        decode_token(token, secret="secret-b")


def test_decode_rejects_expired_token():
    token = encode_token(
        {"sub": "user-1"},
        secret="secret-a",
        expires_in=timedelta(minutes=5),
        token_type=ACCESS_TOKEN_TYPE,
        now=datetime.now(timezone.utc) - timedelta(hours=1),
    )

    with pytest.raises(InvalidTokenError):
        decode_token(token, secret="secret-a")


def test_decode_rejects_wrong_token_type():
    token = encode_token(
        {"sub": "user-1"},
        secret="secret-a",
        expires_in=timedelta(minutes=5),
        token_type=REFRESH_TOKEN_TYPE,
    )

    with pytest.raises(InvalidTokenError):
        decode_token(token, secret="secret-a", expected_type=ACCESS_TOKEN_TYPE)


def test_decode_rejects_token_without_subject():
    token = jwt.encode({"type": ACCESS_TOKEN_TYPE}, "secret-a", algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        decode_token(token, secret="secret-a")


def test_missing_secret_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        encode_token(
            {"sub": "user-1"},
            secret=None,
            expires_in=timedelta(minutes=5),
            token_type=ACCESS_TOKEN_TYPE,
        )
    with pytest.raises(ConfigurationError):
        decode_token("anything", secret="")
