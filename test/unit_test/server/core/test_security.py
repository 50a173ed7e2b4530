"""Unit tests for password hashing and access tokens."""

from datetime import datetime, timedelta, timezone

import jwt as pyjwt
import pytest

from truthshield.server.core.config import settings
from truthshield.server.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from truthshield.server.responses import ApiError


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("Secret123", rounds=4)

        assert hashed != "Secret123"
        assert hashed.startswith("$2b$04$")
        assert verify_password("Secret123", hashed) is True
        assert verify_password("secret123", hashed) is False

    def test_hashes_are_salted(self):
        assert hash_password("Secret123", rounds=4) != hash_password("Secret123", rounds=4)

    def test_malformed_hash_does_not_verify(self):
        assert verify_password("Secret123", "not-a-bcrypt-hash") is False


class TestTokens:
    def test_round_trip_claims(self):
        issued = datetime.now(timezone.utc).replace(microsecond=0)
        token = create_access_token("user-1", now=issued)

        claims = pyjwt.decode(
            token, settings.jwt.secret, algorithms=[settings.jwt.algorithm]
        )
        assert claims["sub"] == "user-1"
        assert claims["iat"] == int(issued.timestamp())
        assert claims["exp"] == int((issued + timedelta(days=settings.jwt.expires_days)).timestamp())

    def test_decode_valid_token(self):
        assert decode_access_token(create_access_token("user-2"))["sub"] == "user-2"

    def test_expired_token(self):
        token = create_access_token("user-3", now=datetime.now(timezone.utc) - timedelta(days=365))

        with pytest.raises(ApiError) as exc_info:
            decode_access_token(token)

        assert exc_info.value.status_code == 401
        assert exc_info.value.error_code == "TOKEN_EXPIRED"

    @pytest.mark.parametrize(
        "token",
        [
            "garbage",
            pyjwt.encode({"sub": "user-4"}, "a-different-secret-that-is-long-enough", algorithm="HS256"),
        ],
    )
    def test_invalid_token(self, token):
        with pytest.raises(ApiError) as exc_info:
            decode_access_token(token)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Not authorized, token failed"
        assert exc_info.value.error_code == "INVALID_TOKEN"
