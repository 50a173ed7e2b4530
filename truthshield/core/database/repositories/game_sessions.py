"""
Game session repository interface and implementation.

This module provides data access operations for game sessions, including
per-game progress aggregates, leaderboards and the training statistics
used by the family and enterprise dashboards.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import case, distinct, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from truthshield.core.models.domain import GameType

from ..base import utc_now
from ..entities.game_sessions import GameSession
from ..entities.users import User
from .base import AsyncBaseRepository, QueryBuilder, as_uuid


def _round(value: Any, digits: int = 2) -> float:
    return round(float(value or 0), digits)


class GameSessionRepository(AsyncBaseRepository[GameSession]):
    """Repository for game session data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, GameSession)

    async def create(self, game_session: GameSession) -> GameSession:
        return await self._save(game_session)

    async def get_by_id(self, session_id: str | uuid.UUID) -> Optional[GameSession]:
        session_uuid = as_uuid(session_id)
        if session_uuid is None:
            return None
        return await self.session.get(GameSession, session_uuid)

    async def get_for_user(self, session_id: str | uuid.UUID, user_id: uuid.UUID) -> Optional[GameSession]:
        """Get a session only when it belongs to ``user_id``."""
        game_session = await self.get_by_id(session_id)
        if game_session is None or game_session.user_id != user_id:
            return None
        return game_session

    async def update(self, game_session: GameSession) -> GameSession:
        game_session.updated_at = utc_now()
        return await self._save(game_session)

    async def delete(self, session_id: str | uuid.UUID) -> bool:
        game_session = await self.get_by_id(session_id)
        if game_session:
            await self.session.delete(game_session)
            await self.session.commit()
            return True
        return False

    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[GameSession]:
        """List game sessions with optional pagination and filtering.

        Args:
            limit: Maximum records to return
            offset: Records to skip
            filters: Field filters (user_id, game_type, difficulty, completed)

        Returns:
            List of GameSession instances, newest first
        """
        stmt = select(GameSession).order_by(GameSession.created_at.desc())  # type: ignore

        if filters:
            stmt = QueryBuilder.apply_filters(stmt, GameSession, filters)

        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_user_progress(self, user_id: uuid.UUID, game_type: Optional[GameType] = None) -> List[Dict[str, Any]]:
        """Aggregate a user's sessions per game type.

        Returns:
            One dict per game played with session counts, average and best
            score, total time, average accuracy and summed levels
        """
        stmt = (
            select(
                GameSession.game_type,
                func.count().label("total_sessions"),
                func.sum(case((GameSession.completed == True, 1), else_=0)).label("completed_sessions"),  # noqa: E712
                func.avg(GameSession.score).label("average_score"),
                func.max(GameSession.score).label("best_score"),
                func.sum(GameSession.time_spent).label("total_time_spent"),
                func.avg(GameSession.accuracy).label("average_accuracy"),
                func.sum(GameSession.level).label("levels_completed"),
                func.max(GameSession.created_at).label("last_played"),
            )
            .where(GameSession.user_id == user_id)
            .group_by(GameSession.game_type)
        )
        if game_type is not None:
            stmt = stmt.where(GameSession.game_type == game_type)

        result = await self.session.execute(stmt)
        return [
            {
                "game_type": GameType(row.game_type).value,
                "total_sessions": int(row.total_sessions),
                "completed_sessions": int(row.completed_sessions or 0),
                "average_score": _round(row.average_score),
                "best_score": _round(row.best_score),
                "total_time_spent": int(row.total_time_spent or 0),
                "average_accuracy": _round(row.average_accuracy),
                "levels_completed": int(row.levels_completed or 0),
                "last_played": row.last_played,
            }
            for row in result.all()
        ]

    async def get_game_leaderboard(self, game_type: GameType, limit: int = 10) -> List[Dict[str, Any]]:
        """Best completed score per user for one game, highest first."""
        stmt = (
            select(
                GameSession.user_id,
                func.max(GameSession.score).label("best_score"),
                func.count().label("total_sessions"),
                func.max(GameSession.created_at).label("last_played"),
            )
            .where(GameSession.game_type == game_type, GameSession.completed == True)  # noqa: E712
            .group_by(GameSession.user_id)
            .order_by(func.max(GameSession.score).desc())
            .limit(limit)
        )
        rows = (await self.session.execute(stmt)).all()
        if not rows:
            return []

        users_stmt = select(User).where(User.id.in_([row.user_id for row in rows]))  # type: ignore
        users = {user.id: user for user in (await self.session.execute(users_stmt)).scalars().all()}
        leaderboard = []
        for row in rows:
            user = users.get(row.user_id)
            if user is None:
                continue
            leaderboard.append(
                {
                    "user_id": row.user_id,
                    "first_name": user.first_name,
                    "last_name": user.last_name,
                    "age_group": user.age_group,
                    "level": user.level,
                    "best_score": _round(row.best_score),
                    "total_sessions": int(row.total_sessions),
                    "last_played": row.last_played,
                }
            )
        return leaderboard

    async def count_for_user(self, user_id: uuid.UUID, completed: Optional[bool] = None) -> int:
        stmt = select(func.count()).select_from(GameSession).where(GameSession.user_id == user_id)
        if completed is not None:
            stmt = stmt.where(GameSession.completed == completed)
        return int((await self.session.execute(stmt)).scalar_one())

    async def total_play_time(self, user_ids: Sequence[uuid.UUID]) -> int:
        """Seconds spent in completed sessions by any of ``user_ids``."""
        if not user_ids:
            return 0
        stmt = select(func.coalesce(func.sum(GameSession.time_spent), 0)).where(
            GameSession.user_id.in_(list(user_ids)), GameSession.completed == True  # type: ignore # noqa: E712
        )
        return int((await self.session.execute(stmt)).scalar_one() or 0)

    async def average_accuracy(self, user_id: uuid.UUID) -> Optional[float]:
        """Mean accuracy over the user's completed sessions, or None if there are none."""
        stmt = select(func.avg(GameSession.accuracy)).where(
            GameSession.user_id == user_id, GameSession.completed == True  # noqa: E712
        )
        value = (await self.session.execute(stmt)).scalar_one_or_none()
        return None if value is None else float(value)

    async def get_gaming_stats_by_user(self, user_ids: Sequence[uuid.UUID], since: datetime) -> Dict[uuid.UUID, Dict[str, Any]]:
        """Completed-session totals per user since ``since``."""
        if not user_ids:
            return {}
        stmt = (
            select(
                GameSession.user_id,
                func.count().label("total_games"),
                func.sum(GameSession.time_spent).label("total_play_time"),
                func.avg(GameSession.score).label("average_score"),
                func.max(GameSession.created_at).label("last_activity"),
            )
            .where(
                GameSession.user_id.in_(list(user_ids)),  # type: ignore
                GameSession.completed == True,  # noqa: E712
                GameSession.created_at >= since,
            )
            .group_by(GameSession.user_id)
        )
        result = await self.session.execute(stmt)
        return {
            row.user_id: {
                "total_games": int(row.total_games),
                "total_play_time": int(row.total_play_time or 0),
                "average_score": _round(row.average_score),
                "last_activity": row.last_activity,
            }
            for row in result.all()
        }

    async def get_company_training_stats(self, company: str) -> Dict[str, Any]:
        """Completed training sessions of a company's users, grouped by game."""
        stmt = (
            select(
                GameSession.game_type,
                func.count().label("total_sessions"),
                func.avg(GameSession.score).label("average_score"),
                func.count(distinct(GameSession.user_id)).label("unique_users"),
            )
            .join(User, User.id == GameSession.user_id)
            .where(User.company == company, GameSession.completed == True)  # noqa: E712
            .group_by(GameSession.game_type)
        )
        by_game = [
            {
                "game_type": GameType(row.game_type).value,
                "total_sessions": int(row.total_sessions),
                "average_score": _round(row.average_score),
                "unique_users": int(row.unique_users),
            }
            for row in (await self.session.execute(stmt)).all()
        ]

        trained_stmt = (
            select(func.count(distinct(GameSession.user_id)))
            .join(User, User.id == GameSession.user_id)
            .where(User.company == company, GameSession.completed == True)  # noqa: E712
        )
        unique_trained = int((await self.session.execute(trained_stmt)).scalar_one() or 0)

        return {
            "by_game": by_game,
            "total_sessions": sum(game["total_sessions"] for game in by_game),
            "unique_trained_users": unique_trained,
        }
