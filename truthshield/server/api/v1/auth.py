"""
API endpoints for account management and authentication.

Provides registration, login, profile maintenance, password changes and
account deletion. Successful registration, login and password changes return
a bearer token together with the public user view.
"""

from __future__ import annotations

from fastapi import APIRouter, status
from starlette.concurrency import run_in_threadpool

from truthshield.core.database.base import utc_now
from truthshield.core.database.entities.users import User, age_group_for
from truthshield.core.database.repositories import UserRepository
from truthshield.core.logging_config import get_logger
from truthshield.core.models.domain import Persona
from truthshield.core.models.io import PasswordChange, ProfileUpdate, UserLogin, UserRead, UserRegister
from truthshield.server.api.deps import CurrentUser, SessionDep
from truthshield.server.core.security import create_access_token, hash_password, verify_password
from truthshield.server.responses import ApiError, success_response

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])


def _auth_payload(user: User) -> dict:
    return {"token": create_access_token(user.id), "user": UserRead.model_validate(user)}


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a new account and receive an access token.",
    response_description="Token and the created user.",
    responses={
        201: {"description": "Account created"},
        400: {"description": "Validation failed or email already registered"},
    },
)
async def register(payload: UserRegister, session: SessionDep):
    """
    Register a new user.

    - **email**: Unique login email (case-insensitive).
    - **password**: At least 8 characters with a lowercase, an uppercase letter and a digit.
    - **age**: 6 to 120; determines the age group.
    - **persona**: individual, parent, enterprise or child.
    - **company**: Required for enterprise accounts. The first account of a company becomes its admin.
    """
    users = UserRepository(session)
    if await users.get_by_email(payload.email):
        raise ApiError(status.HTTP_400_BAD_REQUEST, "User with this email already exists", "USER_EXISTS")

    user = User(
        email=payload.email,
        password_hash=await run_in_threadpool(hash_password, payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        age=payload.age,
        age_group=age_group_for(payload.age),
        persona=payload.persona,
        is_parent=payload.persona == Persona.PARENT,
        company=payload.company,
        department=payload.department,
        employee_id=payload.employee_id,
    )
    if payload.persona == Persona.ENTERPRISE and payload.company:
        user.is_enterprise_admin = await users.count_company(payload.company) == 0

    user = await users.create(user)
    logger.info(f"Registered user {user.id} ({user.persona.value})")
    return success_response("Authentication successful", _auth_payload(user))


@router.post(
    "/login",
    summary="Login",
    description="Exchange email and password for an access token.",
    response_description="Token and the authenticated user.",
    responses={401: {"description": "Incorrect email or password"}},
)
async def login(payload: UserLogin, session: SessionDep):
    users = UserRepository(session)
    user = await users.get_by_email(payload.email)
    if user is None or not await run_in_threadpool(verify_password, payload.password, user.password_hash):
        raise ApiError(status.HTTP_401_UNAUTHORIZED, "Incorrect email or password", "INVALID_CREDENTIALS")

    user = await users.touch(user)
    return success_response("Authentication successful", _auth_payload(user))


@router.get(
    "/me",
    summary="Current User",
    description="Retrieve the authenticated user's account.",
    responses={401: {"description": "Missing or invalid token"}},
)
async def me(user: CurrentUser):
    return success_response("User retrieved successfully", {"user": UserRead.model_validate(user)})


@router.put(
    "/profile",
    summary="Update Profile",
    description="Update names, age and settings. Settings are merged into the stored settings.",
)
async def update_profile(payload: ProfileUpdate, user: CurrentUser, session: SessionDep):
    if payload.first_name is not None:
        user.first_name = payload.first_name
    if payload.last_name is not None:
        user.last_name = payload.last_name
    if payload.age is not None:
        user.set_age(payload.age)
    if payload.settings is not None:
        user.settings = {**user.settings, **payload.settings.model_dump(exclude_none=True)}

    user = await UserRepository(session).update(user)
    return success_response("Profile updated successfully", {"user": UserRead.model_validate(user)})


@router.put(
    "/change-password",
    summary="Change Password",
    description="Change the password. Tokens issued before the change stop working; a fresh token is returned.",
    responses={401: {"description": "Current password is incorrect"}},
)
async def change_password(payload: PasswordChange, user: CurrentUser, session: SessionDep):
    if not await run_in_threadpool(verify_password, payload.current_password, user.password_hash):
        raise ApiError(status.HTTP_401_UNAUTHORIZED, "Current password is incorrect", "INVALID_CREDENTIALS")

    user.password_hash = await run_in_threadpool(hash_password, payload.new_password)
    user.password_changed_at = utc_now()
    user = await UserRepository(session).update(user)
    logger.info(f"User {user.id} changed password")
    return success_response("Authentication successful", _auth_payload(user))


@router.post("/logout", summary="Logout", description="Record activity; the client discards its token.")
async def logout(user: CurrentUser, session: SessionDep):
    await UserRepository(session).touch(user)
    return success_response("Logged out successfully")


@router.delete(
    "/account",
    summary="Delete Account",
    description="Delete the account together with its game sessions, threats and family data.",
)
async def delete_account(user: CurrentUser, session: SessionDep):
    await UserRepository(session).delete(user.id)
    logger.info(f"Deleted account {user.id}")
    return success_response("Account deleted successfully")
