"""
Password hashing and access tokens.

Passwords are hashed with bcrypt; access tokens are HS256 JWTs whose ``sub``
claim is the user id.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt as pyjwt
from fastapi import status

from truthshield.server.core.config import settings
from truthshield.server.responses import ApiError


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or settings.jwt.bcrypt_rounds)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        # Malformed stored hash
        return False


def create_access_token(user_id: Any, now: Optional[datetime] = None) -> str:
    """Sign a token for ``user_id`` valid for the configured number of days."""
    jwt_config = settings.jwt
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "iat": int(issued_at.timestamp()),
        "exp": issued_at + timedelta(days=jwt_config.expires_days),
    }
    return pyjwt.encode(payload, jwt_config.secret, algorithm=jwt_config.algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify a token and return its claims.

    Raises:
        ApiError: 401 when the token is expired or invalid
    """
    jwt_config = settings.jwt
    try:
        return pyjwt.decode(token, jwt_config.secret, algorithms=[jwt_config.algorithm])
    except pyjwt.ExpiredSignatureError:
        raise ApiError(status.HTTP_401_UNAUTHORIZED, "Token expired", "TOKEN_EXPIRED")
    except pyjwt.InvalidTokenError:
        raise ApiError(status.HTTP_401_UNAUTHORIZED, "Not authorized, token failed", "INVALID_TOKEN")
