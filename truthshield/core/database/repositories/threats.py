"""
Threat repository interface and implementation.

This module provides data access operations for threat records: paginated
history, per-user statistics, alerts and the global threat intelligence
aggregates.
"""

from __future__ import annotations

import uuid
from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from truthshield.core.models.domain import SEVERITY_RANK, ActionTaken, Severity, ThreatType

from ..base import utc_now
from ..entities.threats import Threat
from ..entities.users import User
from .base import AsyncBaseRepository, QueryBuilder, as_uuid


class ThreatRepository(AsyncBaseRepository[Threat]):
    """Repository for threat data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Threat)

    async def create(self, threat: Threat) -> Threat:
        return await self._save(threat)

    async def get_by_id(self, threat_id: str | uuid.UUID) -> Optional[Threat]:
        threat_uuid = as_uuid(threat_id)
        if threat_uuid is None:
            return None
        return await self.session.get(Threat, threat_uuid)

    async def get_for_user(self, threat_id: str | uuid.UUID, user_id: uuid.UUID) -> Optional[Threat]:
        threat = await self.get_by_id(threat_id)
        if threat is None or threat.user_id != user_id:
            return None
        return threat

    async def update(self, threat: Threat) -> Threat:
        threat.updated_at = utc_now()
        return await self._save(threat)

    async def delete(self, threat_id: str | uuid.UUID) -> bool:
        threat = await self.get_by_id(threat_id)
        if threat:
            await self.session.delete(threat)
            await self.session.commit()
            return True
        return False

    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[Threat]:
        """List threats with optional pagination and filtering.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: Field filters (user_id, type, severity, resolved, ...)

        Returns:
            List of Threat instances, newest first
        """
        stmt = select(Threat).order_by(Threat.created_at.desc())  # type: ignore

        if filters:
            stmt = QueryBuilder.apply_filters(stmt, Threat, filters)

        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_history(
        self, user_id: uuid.UUID, page: int, limit: int, filters: Optional[Dict[str, Any]] = None
    ) -> Tuple[List[Threat], int]:
        """One page of a user's threats plus the total matching count."""
        conditions = {"user_id": user_id, **(filters or {})}
        threats = await self.list(limit=limit, offset=(page - 1) * limit, filters=conditions)

        count_stmt = QueryBuilder.apply_filters(select(func.count()).select_from(Threat), Threat, conditions)
        total = int((await self.session.execute(count_stmt)).scalar_one())
        return threats, total

    async def count(
        self,
        user_id: uuid.UUID,
        action_taken: Optional[ActionTaken] = None,
        severity: Optional[Severity] = None,
    ) -> int:
        """Count a user's genuine threats (false positives excluded)."""
        stmt = QueryBuilder.apply_filters(
            select(func.count()).select_from(Threat),
            Threat,
            {"user_id": user_id, "is_false_positive": False, "action_taken": action_taken, "severity": severity},
        )
        return int((await self.session.execute(stmt)).scalar_one())

    async def count_blocked(self, user_ids: Sequence[uuid.UUID]) -> int:
        if not user_ids:
            return 0
        stmt = (
            select(func.count())
            .select_from(Threat)
            .where(
                Threat.user_id.in_(list(user_ids)),  # type: ignore
                Threat.action_taken == ActionTaken.BLOCKED,
                Threat.is_false_positive == False,  # noqa: E712
            )
        )
        return int((await self.session.execute(stmt)).scalar_one())

    async def get_threat_stats(self, user_id: uuid.UUID, days: int = 30) -> List[Dict[str, Any]]:
        """Per-type counts, mean confidence and severities of a user's recent threats."""
        since = utc_now() - timedelta(days=days)
        stmt = select(Threat.type, Threat.confidence, Threat.severity).where(
            Threat.user_id == user_id,
            Threat.created_at >= since,
            Threat.is_false_positive == False,  # noqa: E712
        )
        grouped: Dict[str, Dict[str, Any]] = defaultdict(lambda: {"count": 0, "confidence": 0.0, "severities": []})
        for row in (await self.session.execute(stmt)).all():
            bucket = grouped[ThreatType(row.type).value]
            bucket["count"] += 1
            bucket["confidence"] += float(row.confidence or 0)
            bucket["severities"].append(Severity(row.severity).value)

        return [
            {
                "type": threat_type,
                "count": bucket["count"],
                "average_confidence": round(bucket["confidence"] / bucket["count"], 2),
                "severity_breakdown": bucket["severities"],
            }
            for threat_type, bucket in grouped.items()
        ]

    async def get_common_indicators(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Most frequent indicators across all threats, with their mean severity rank."""
        stmt = select(Threat.indicators, Threat.severity)
        counts: Counter = Counter()
        severity_totals: Dict[str, int] = defaultdict(int)
        for row in (await self.session.execute(stmt)).all():
            rank = SEVERITY_RANK[Severity(row.severity)]
            for indicator in row.indicators or []:
                counts[indicator] += 1
                severity_totals[indicator] += rank

        return [
            {
                "indicator": indicator,
                "count": count,
                "average_severity": round(severity_totals[indicator] / count, 2),
            }
            for indicator, count in counts.most_common(limit)
        ]

    async def get_alerts(self, user_id: uuid.UUID, since: datetime, limit: int = 50) -> List[Threat]:
        """A user's high and critical threats created since ``since``."""
        stmt = (
            select(Threat)
            .where(
                Threat.user_id == user_id,
                Threat.created_at >= since,
                Threat.severity.in_([Severity.HIGH, Severity.CRITICAL]),  # type: ignore
                Threat.is_false_positive == False,  # noqa: E712
            )
            .order_by(Threat.created_at.desc())  # type: ignore
            .limit(limit)
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_recent(self, since: datetime, user_ids: Optional[Sequence[uuid.UUID]] = None) -> List[Threat]:
        """Genuine threats created since ``since``, optionally limited to some users."""
        stmt = (
            select(Threat)
            .where(Threat.created_at >= since, Threat.is_false_positive == False)  # noqa: E712
            .order_by(Threat.created_at.asc())  # type: ignore
        )
        if user_ids is not None:
            if not user_ids:
                return []
            stmt = stmt.where(Threat.user_id.in_(list(user_ids)))  # type: ignore
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_company_threats(self, company: str, since: datetime) -> List[Threat]:
        """All threats of a company's users created since ``since``."""
        stmt = (
            select(Threat)
            .join(User, User.id == Threat.user_id)
            .where(User.company == company, Threat.created_at >= since)
            .order_by(Threat.created_at.desc())  # type: ignore
        )
        return list((await self.session.execute(stmt)).scalars().all())
