from datetime import timedelta

import pytest
from fastapi import HTTPException
from jose import jwt

from spendwise.core.config import settings
from spendwise.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


def test_password_hash_roundtrip():
    hashed = get_password_hash("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong-password", hashed)


def test_same_password_gets_different_salts():
    assert get_password_hash("secret123") != get_password_hash("secret123")


def test_corrupt_hash_does_not_verify():
    assert verify_password("secret123", "not-a-hash") is False


def test_token_carries_subject():
    token = create_access_token({"sub": "user-1"})
    payload = decode_access_token(token)
    assert payload["sub"] == "user-1"
    assert payload["exp"] - payload["iat"] == settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60


def test_expired_token_is_rejected():
    token = create_access_token({"sub": "user-1"}, expires_delta=timedelta(seconds=-10))
    with pytest.raises(HTTPException) as exc_info:
        decode_access_token(token)
    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Token expired"


def test_token_signed_with_other_key_is_rejected():
    token = jwt.encode({"sub": "user-1"}, "some-other-secret", algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(HTTPException) as exc_info:
        decode_access_token(token)
    assert exc_info.value.detail == "Invalid token"
