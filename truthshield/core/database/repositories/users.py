"""
User repository interface and implementation.

This module provides data access operations for user accounts, including
lookups by email, company membership and leaderboard ranking.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete as sa_delete
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.families import Family, FamilyMember
from ..entities.game_sessions import GameSession
from ..entities.threats import Threat
from ..entities.users import User
from .base import AsyncBaseRepository, QueryBuilder, as_uuid


class UserRepository(AsyncBaseRepository[User]):
    """Repository for user data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def create(self, user: User) -> User:
        """Persist a new user.

        Args:
            user: User SQLModel instance

        Returns:
            Persisted User with generated fields
        """
        user.email = user.email.lower()
        return await self._save(user)

    async def get_by_id(self, user_id: str | uuid.UUID) -> Optional[User]:
        user_uuid = as_uuid(user_id)
        if user_uuid is None:
            return None
        return await self.session.get(User, user_uuid)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email address, case-insensitively."""
        stmt = select(User).where(User.email == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalars().one_or_none()

    async def update(self, user: User) -> User:
        user.updated_at = utc_now()
        return await self._save(user)

    async def touch(self, user: User) -> User:
        """Record user activity by stamping ``last_active``."""
        user.last_active = utc_now()
        return await self.update(user)

    async def delete(self, user_id: str | uuid.UUID) -> bool:
        """Delete a user together with everything they own.

        Game sessions, threats, the family they lead and their own family
        membership are removed before the user row.

        Args:
            user_id: User ID to delete

        Returns:
            True if deleted, False if not found
        """
        user = await self.get_by_id(user_id)
        if user is None:
            return False

        owned_family_ids = select(Family.id).where(Family.parent_id == user.id)
        await self.session.execute(sa_delete(FamilyMember).where(FamilyMember.family_id.in_(owned_family_ids)))
        await self.session.execute(sa_delete(Family).where(Family.parent_id == user.id))
        await self.session.execute(sa_delete(FamilyMember).where(FamilyMember.child_id == user.id))
        await self.session.execute(sa_delete(GameSession).where(GameSession.user_id == user.id))
        await self.session.execute(sa_delete(Threat).where(Threat.user_id == user.id))
        await self.session.delete(user)
        await self.session.commit()
        return True

    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[User]:
        """List users with optional pagination and filtering.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: Field filters (persona, age_group, company, parent_id)

        Returns:
            List of User instances, newest first
        """
        stmt = select(User).order_by(User.created_at.desc())  # type: ignore

        if filters:
            stmt = QueryBuilder.apply_filters(stmt, User, filters)

        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_many(self, user_ids: Sequence[uuid.UUID]) -> List[User]:
        if not user_ids:
            return []
        stmt = select(User).where(User.id.in_(list(user_ids)))  # type: ignore
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_company(self, company: str) -> int:
        stmt = select(func.count()).select_from(User).where(User.company == company)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def get_company_users(self, company: str) -> List[User]:
        stmt = select(User).where(User.company == company).order_by(User.last_name, User.first_name)  # type: ignore
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_company_employee(self, employee_id: str | uuid.UUID, company: Optional[str]) -> Optional[User]:
        """Get a user by id, but only when they belong to ``company``."""
        user = await self.get_by_id(employee_id)
        if user is None or company is None or user.company != company:
            return None
        return user

    async def get_leaderboard(self, limit: int = 10) -> List[User]:
        """Top users ordered by security score, then level."""
        stmt = (
            select(User)
            .order_by(User.security_score.desc(), User.level.desc(), User.created_at.asc())  # type: ignore
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
