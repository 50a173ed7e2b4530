"""
Family repository interface and implementation.

This module provides data access operations for families and their child
memberships.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import delete as sa_delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from ..base import utc_now
from ..entities.families import Family, FamilyMember
from .base import AsyncBaseRepository, QueryBuilder, as_uuid


class FamilyRepository(AsyncBaseRepository[Family]):
    """Repository for family data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Family)

    async def create(self, family: Family) -> Family:
        return await self._save(family)

    async def get_by_id(self, family_id: str | uuid.UUID) -> Optional[Family]:
        family_uuid = as_uuid(family_id)
        if family_uuid is None:
            return None
        return await self.session.get(Family, family_uuid)

    async def update(self, family: Family) -> Family:
        family.updated_at = utc_now()
        return await self._save(family)

    async def delete(self, family_id: str | uuid.UUID) -> bool:
        """Delete a family and all of its memberships."""
        family = await self.get_by_id(family_id)
        if family is None:
            return False
        await self.session.execute(sa_delete(FamilyMember).where(FamilyMember.family_id == family.id))
        await self.session.delete(family)
        await self.session.commit()
        return True

    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[Family]:
        stmt = select(Family).order_by(Family.created_at.desc())  # type: ignore

        if filters:
            stmt = QueryBuilder.apply_filters(stmt, Family, filters)

        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_parent(self, parent_id: uuid.UUID) -> Optional[Family]:
        stmt = select(Family).where(Family.parent_id == parent_id)
        return (await self.session.execute(stmt)).scalars().one_or_none()

    async def get_by_child(self, child_id: uuid.UUID) -> Optional[Family]:
        """Get the family a child belongs to."""
        stmt = (
            select(Family)
            .join(FamilyMember, FamilyMember.family_id == Family.id)
            .where(FamilyMember.child_id == child_id)
        )
        return (await self.session.execute(stmt)).scalars().one_or_none()

    async def get_for_member(self, user_id: uuid.UUID) -> Optional[Family]:
        """Get the family a user leads or belongs to."""
        return await self.get_by_parent(user_id) or await self.get_by_child(user_id)

    async def get_membership(self, child_id: uuid.UUID) -> Optional[FamilyMember]:
        stmt = select(FamilyMember).where(FamilyMember.child_id == child_id)
        return (await self.session.execute(stmt)).scalars().one_or_none()

    async def get_members(self, family_id: uuid.UUID) -> List[FamilyMember]:
        stmt = (
            select(FamilyMember)
            .where(FamilyMember.family_id == family_id)
            .order_by(FamilyMember.created_at.asc())  # type: ignore
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def create_with_members(
        self, family: Family, members: Sequence[FamilyMember], changed: Sequence[SQLModel] = ()
    ) -> Family:
        """Store a family, its memberships and other changed rows in one transaction.

        Raises:
            IntegrityError: The parent already leads a family or a child already
                belongs to one. Nothing is stored.
        """
        self.session.add(family)
        try:
            # the family row has to exist before its memberships reference it
            await self.session.flush()
            self.session.add_all([*members, *changed])
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise
        await self.session.refresh(family)
        return family

    async def add_member(self, member: FamilyMember, *changed: SQLModel) -> FamilyMember:
        """Store a membership together with other changed rows, such as the child's user record."""
        self.session.add_all(changed)
        try:
            return await self._save(member)
        except IntegrityError:
            await self.session.rollback()
            raise

    async def remove_member(self, family_id: uuid.UUID, child_id: uuid.UUID) -> bool:
        """Remove a child from a family. Returns False when they were not a member."""
        stmt = select(FamilyMember).where(FamilyMember.family_id == family_id, FamilyMember.child_id == child_id)
        member = (await self.session.execute(stmt)).scalars().one_or_none()
        if member is None:
            return False
        await self.session.delete(member)
        await self.session.commit()
        return True
