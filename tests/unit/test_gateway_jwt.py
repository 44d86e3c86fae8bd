"""Unit tests for JWT handler."""

from datetime import timedelta

import pytest
from jose import jwt

from config.settings import settings
from src.bm_common.errors import InvalidCredentialsError
from src.bm_gateway.auth.jwt_handler import create_access_token, decode_token


def test_access_token_contains_correct_claims() -> None:
    token = create_access_token("teller")
    # Decode without verification to inspect claims
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "teller"
    assert payload["type"] == "access"


def test_decode_valid_token() -> None:
    payload = decode_token(create_access_token("owner"))
    assert payload["sub"] == "owner"


def test_expired_token_raises() -> None:
    token = create_access_token("owner", expires_in=timedelta(seconds=-1))
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_wrong_secret_raises() -> None:
    token = jwt.encode({"sub": "owner", "type": "access"}, "other-secret", algorithm="HS256")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_non_access_token_raises() -> None:
    token = jwt.encode({"sub": "owner", "type": "refresh"}, settings.JWT_SECRET, algorithm="HS256")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)
