"""
Shared API dependencies.

Provides the database session and the authenticated user to endpoints. Tokens
are read from ``Authorization: Bearer <token>`` or the ``X-TruthShield-Token``
header.
"""

from typing import Annotated, Callable, Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from truthshield.core.database import get_session
from truthshield.core.database.entities.users import User
from truthshield.core.database.repositories import UserRepository
from truthshield.core.logging_config import get_logger
from truthshield.core.models.domain import Persona
from truthshield.server.core import constant
from truthshield.server.core.security import decode_access_token
from truthshield.server.responses import ApiError

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def _token_from_request(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.headers.get(constant.TOKEN_HEADER) or None


async def get_current_user(
    request: Request,
    session: SessionDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """Resolve the authenticated user or fail with 401."""
    token = _token_from_request(request, credentials)
    if not token:
        raise ApiError(status.HTTP_401_UNAUTHORIZED, "Not authorized, no token", "NO_TOKEN")

    claims = decode_access_token(token)
    user = await UserRepository(session).get_by_id(claims.get("sub", ""))
    if user is None:
        raise ApiError(status.HTTP_401_UNAUTHORIZED, "User not found", "USER_NOT_FOUND")

    if user.password_changed_after(int(claims.get("iat", 0))):
        logger.info(f"Rejected token for user {user.id} issued before password change")
        raise ApiError(
            status.HTTP_401_UNAUTHORIZED, "User recently changed password. Please log in again.", "PASSWORD_CHANGED"
        )

    return user


async def get_optional_user(
    request: Request,
    session: SessionDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[User]:
    """Resolve the user when a valid token is present; never fails."""
    try:
        return await get_current_user(request, session, credentials)
    except ApiError:
        return None


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_optional_user)]


def require_persona(*personas: Persona) -> Callable:
    """Dependency factory restricting an endpoint to the given personas."""

    async def checker(user: CurrentUser) -> User:
        if Persona(user.persona) not in personas:
            raise ApiError(
                status.HTTP_403_FORBIDDEN,
                f"User persona {Persona(user.persona).value} is not authorized to access this route",
                "FORBIDDEN",
            )
        return user

    return checker
