"""
Database entity models.

Each module represents a single table (or a small group of tightly related
tables) and its model-level behaviour.

Modules:
- users: User accounts with gamification, family and enterprise fields
- game_sessions: Training game play-throughs and their scoring
- threats: Reported and auto-detected threats
- families: Families and their child memberships
"""

from . import families, game_sessions, threats, users
from .families import Family, FamilyMember
from .game_sessions import GameSession
from .threats import Threat
from .users import User

__all__ = [
    "Family",
    "FamilyMember",
    "GameSession",
    "Threat",
    "User",
    "families",
    "game_sessions",
    "threats",
    "users",
]
