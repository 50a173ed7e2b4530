"""
API endpoints for family groups.

A parent creates one family, adds and removes children, manages the family's
protection settings and reads a 30-day protection report. Children can view
their family's dashboard and report.
"""

from __future__ import annotations

import uuid
from datetime import timedelta
from typing import Any, Dict, List

from fastapi import APIRouter, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from truthshield.core.database.base import utc_now
from truthshield.core.database.entities.families import Family, FamilyMember, default_permissions, merge_settings
from truthshield.core.database.entities.users import User
from truthshield.core.database.repositories import (
    FamilyRepository,
    GameSessionRepository,
    ThreatRepository,
    UserRepository,
)
from truthshield.core.database.repositories.base import as_uuid
from truthshield.core.logging_config import get_logger
from truthshield.core.models.domain import Persona
from truthshield.core.models.io import (
    ChildAdd,
    FamilyCreate,
    FamilyMemberRead,
    FamilyRead,
    FamilySettingsRequest,
    UserSummary,
)
from truthshield.server.api.deps import CurrentUser, SessionDep
from truthshield.server.responses import ApiError, success_response
from truthshield.services.reports import family_recommendations, summarize_member_threats

logger = get_logger(__name__)

router = APIRouter(tags=["family"])

REPORT_DAYS = 30


async def _refresh_family_stats(session: AsyncSession, family: Family, member_ids: List[uuid.UUID]) -> Family:
    """Recompute the family's blocked threats, gaming minutes and average security score."""
    users = await UserRepository(session).get_many(member_ids)
    total_seconds = await GameSessionRepository(session).total_play_time(member_ids)
    family.family_stats = {
        "total_threats_blocked": await ThreatRepository(session).count_blocked(member_ids),
        "total_gaming_time": round(total_seconds / 60),
        "average_security_score": round(sum(u.security_score for u in users) / len(users)) if users else 0,
        "last_activity": utc_now().isoformat(),
    }
    return await FamilyRepository(session).update(family)


async def _check_child_available(session: AsyncSession, child_id: uuid.UUID) -> User:
    child = await UserRepository(session).get_by_id(child_id)
    if child is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, f"Child user with ID {child_id} not found", "NOT_FOUND")
    if await FamilyRepository(session).get_for_member(child.id):
        raise ApiError(status.HTTP_400_BAD_REQUEST, f"User {child.first_name} is already in a family", "ALREADY_IN_FAMILY")
    return child


def _new_membership(family: Family, child: User, payload: ChildAdd) -> FamilyMember:
    """Build the membership row and move the child under the family's parent."""
    permissions = default_permissions()
    if payload.permissions is not None:
        permissions.update(payload.permissions.model_dump(exclude_none=True))
    child.parent_id = family.parent_id
    child.persona = Persona.CHILD
    return FamilyMember(family_id=family.id, child_id=child.id, relationship=payload.relationship, permissions=permissions)


async def _family_view(session: AsyncSession, family: Family) -> Dict[str, Any]:
    members = await FamilyRepository(session).get_members(family.id)
    users = {u.id: u for u in await UserRepository(session).get_many([family.parent_id, *(m.child_id for m in members)])}
    parent = users.get(family.parent_id)

    children = []
    for member in members:
        child = users.get(member.child_id)
        if child is None:
            continue
        children.append(
            {
                **FamilyMemberRead.model_validate(member).model_dump(),
                "child": UserSummary.model_validate(child),
                "game_progress": child.game_progress,
            }
        )

    return {
        **FamilyRead.model_validate(family).model_dump(),
        "parent": UserSummary.model_validate(parent) if parent else None,
        "children": children,
    }


async def _owned_family(session: AsyncSession, user: User, message: str) -> Family:
    family = await FamilyRepository(session).get_by_parent(user.id)
    if family is None:
        raise ApiError(status.HTTP_403_FORBIDDEN, message, "FORBIDDEN")
    return family


@router.post(
    "/create",
    status_code=status.HTTP_201_CREATED,
    summary="Create Family",
    description="Create the caller's family group, optionally with children. The caller becomes a parent.",
    responses={
        201: {"description": "Family created"},
        400: {"description": "Caller already has a family or a child is already in one"},
        404: {"description": "Child user not found"},
    },
)
async def create_family(payload: FamilyCreate, user: CurrentUser, session: SessionDep):
    families = FamilyRepository(session)
    if await families.get_by_parent(user.id):
        raise ApiError(status.HTTP_400_BAD_REQUEST, "You already have a family group", "FAMILY_EXISTS")

    children = []
    for child_payload in payload.children:
        if child_payload.child_id == user.id:
            raise ApiError(status.HTTP_400_BAD_REQUEST, "You cannot add yourself as a child", "INVALID_CHILD")
        children.append((await _check_child_available(session, child_payload.child_id), child_payload))

    family = Family(family_name=payload.family_name, parent_id=user.id)
    members = [_new_membership(family, child, child_payload) for child, child_payload in children]
    user.persona = Persona.PARENT
    user.is_parent = True
    user_id = user.id

    try:
        family = await families.create_with_members(family, members, [user, *(child for child, _ in children)])
    except IntegrityError:
        logger.warning(f"Family creation by user {user_id} conflicted with an existing family")
        raise ApiError(
            status.HTTP_400_BAD_REQUEST, "You or one of the children already belong to a family", "ALREADY_IN_FAMILY"
        )
    logger.info(f"User {user_id} created family {family.id} with {len(members)} children")

    return success_response("Family created successfully", {"family": await _family_view(session, family)})


@router.get(
    "/dashboard",
    summary="Family Dashboard",
    description="The caller's family with members and freshly computed statistics.",
    responses={404: {"description": "Family not found"}},
)
async def get_dashboard(user: CurrentUser, session: SessionDep):
    family = await FamilyRepository(session).get_for_member(user.id)
    if family is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Family not found", "NOT_FOUND")

    members = await FamilyRepository(session).get_members(family.id)
    family = await _refresh_family_stats(session, family, [family.parent_id, *(m.child_id for m in members)])
    return success_response("Family dashboard retrieved", {"family": await _family_view(session, family)})


@router.post(
    "/children",
    summary="Add Child",
    description="Add an existing user to the caller's family as a child.",
    responses={
        400: {"description": "User is already in a family"},
        403: {"description": "Caller is not a family parent"},
        404: {"description": "Child user not found"},
    },
)
async def add_child(payload: ChildAdd, user: CurrentUser, session: SessionDep):
    family = await _owned_family(session, user, "Only family parents can add children")
    if payload.child_id == user.id:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "You cannot add yourself as a child", "INVALID_CHILD")

    child = await _check_child_available(session, payload.child_id)
    child_name, family_id = child.first_name, family.id
    try:
        await FamilyRepository(session).add_member(_new_membership(family, child, payload), child)
    except IntegrityError:
        raise ApiError(status.HTTP_400_BAD_REQUEST, f"User {child_name} is already in a family", "ALREADY_IN_FAMILY")
    logger.info(f"Added child {payload.child_id} to family {family_id}")
    return success_response("Child added to family", {"family": await _family_view(session, family)})


@router.delete(
    "/children/{child_id}",
    summary="Remove Child",
    responses={403: {"description": "Caller is not a family parent"}, 404: {"description": "Child not in family"}},
)
async def remove_child(child_id: str, user: CurrentUser, session: SessionDep):
    family = await _owned_family(session, user, "Only family parents can remove children")
    child_uuid = as_uuid(child_id)
    if child_uuid is None or not await FamilyRepository(session).remove_member(family.id, child_uuid):
        raise ApiError(status.HTTP_404_NOT_FOUND, "Child not found in family", "NOT_FOUND")

    users = UserRepository(session)
    child = await users.get_by_id(child_uuid)
    if child is not None:
        child.parent_id = None
        child.persona = Persona.INDIVIDUAL
        await users.update(child)
    logger.info(f"Removed child {child_uuid} from family {family.id}")
    return success_response("Child removed from family")


@router.put(
    "/settings",
    summary="Update Family Settings",
    description="Merge new protection settings into the family's settings. Parent only.",
    responses={403: {"description": "Caller is not the family parent"}, 404: {"description": "Family not found"}},
)
async def update_settings(payload: FamilySettingsRequest, user: CurrentUser, session: SessionDep):
    families = FamilyRepository(session)
    family = await families.get_for_member(user.id)
    if family is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Family not found", "NOT_FOUND")
    if family.parent_id != user.id:
        raise ApiError(status.HTTP_403_FORBIDDEN, "Only family parent can update settings", "FORBIDDEN")

    changes = payload.family_settings.model_dump(mode="json", exclude_none=True)
    family.family_settings = merge_settings(family.family_settings, changes)
    family = await families.update(family)
    return success_response("Family settings updated", {"family_settings": family.family_settings})


@router.get(
    "/report",
    summary="Family Protection Report",
    description="Per-member threat and gaming statistics for the last 30 days, with recommendations.",
    responses={404: {"description": "Family not found"}},
)
async def get_report(user: CurrentUser, session: SessionDep):
    families = FamilyRepository(session)
    family = await families.get_for_member(user.id)
    if family is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Family not found", "NOT_FOUND")

    members = await families.get_members(family.id)
    member_ids = [family.parent_id, *(m.child_id for m in members)]
    now = utc_now()
    since = now - timedelta(days=REPORT_DAYS)

    threat_stats = summarize_member_threats(await ThreatRepository(session).get_recent(since, member_ids), now)
    gaming_stats = await GameSessionRepository(session).get_gaming_stats_by_user(member_ids, since)
    users = {u.id: u for u in await UserRepository(session).get_many(member_ids)}
    children = [users[m.child_id] for m in members if m.child_id in users]

    member_stats = []
    for member in members:
        child = users.get(member.child_id)
        if child is None:
            continue
        threats = threat_stats.get(child.id, {})
        gaming = gaming_stats.get(child.id, {})
        member_stats.append(
            {
                "child_id": child.id,
                "name": child.full_name,
                "age": child.age,
                "security_score": child.security_score,
                "level": child.level,
                "threats": {key: threats.get(key, 0) for key in ("total", "blocked", "critical", "recent")},
                "gaming": {
                    "total_games": gaming.get("total_games", 0),
                    "total_play_time": gaming.get("total_play_time", 0),
                    "average_score": gaming.get("average_score", 0),
                    "last_activity": gaming.get("last_activity"),
                },
                "permissions": member.permissions,
            }
        )

    report = {
        "family_overview": {
            "name": family.family_name,
            "total_members": len(members) + 1,
            "average_security_score": family.family_stats.get("average_security_score", 0),
            "total_threats_blocked": family.family_stats.get("total_threats_blocked", 0),
            "total_gaming_time": family.family_stats.get("total_gaming_time", 0),
        },
        "member_stats": member_stats,
        "recommendations": family_recommendations(children, threat_stats, gaming_stats),
    }
    return success_response("Family protection report generated", {"report": report, "generated_at": now})
