"""
Database repositories.

Each repository wraps one entity (plus its closely related tables) and owns
all queries against it. Repositories commit their own writes.

Modules:
- base: Abstract repository interface and query helpers
- users: User accounts, company membership, leaderboard
- game_sessions: Game sessions and training aggregates
- threats: Threat records, statistics and intelligence
- families: Families and child memberships
"""

from .base import AsyncBaseRepository, QueryBuilder
from .families import FamilyRepository
from .game_sessions import GameSessionRepository
from .threats import ThreatRepository
from .users import UserRepository

__all__ = [
    "AsyncBaseRepository",
    "FamilyRepository",
    "GameSessionRepository",
    "QueryBuilder",
    "ThreatRepository",
    "UserRepository",
]
