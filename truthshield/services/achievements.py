"""
Achievement rules evaluated when a game session is completed.
"""

from __future__ import annotations

from typing import Callable, Dict, List, NamedTuple

from truthshield.core.database.entities.game_sessions import GameSession
from truthshield.core.database.entities.users import User
from truthshield.core.logging_config import get_logger

logger = get_logger(__name__)

SPEED_RUN_SECONDS = 60


class Achievement(NamedTuple):
    achievement_id: str
    name: str
    description: str
    icon: str
    earned: Callable[[GameSession], bool]

    def as_dict(self) -> Dict[str, str]:
        return {
            "achievement_id": self.achievement_id,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
        }


ACHIEVEMENTS: List[Achievement] = [
    Achievement("first_game", "First Steps", "Complete your first security game", "🎮", lambda s: True),
    Achievement("perfect_score", "Flawless Victory", "Get a perfect score in any game", "⭐", lambda s: s.accuracy == 100),
    Achievement(
        "speed_runner",
        "Speed Runner",
        "Complete a game in under 1 minute",
        "⚡",
        lambda s: s.time_spent < SPEED_RUN_SECONDS,
    ),
]


def check_achievements(user: User, game_session: GameSession) -> tuple[List[Dict[str, str]], bool]:
    """Grant every achievement the session earns that the user does not hold yet.

    Returns:
        The newly granted achievements and whether their XP caused a level-up
    """
    granted: List[Dict[str, str]] = []
    leveled_up = False
    for achievement in ACHIEVEMENTS:
        if user.has_achievement(achievement.achievement_id) or not achievement.earned(game_session):
            continue
        leveled_up = user.add_achievement(
            achievement.achievement_id, achievement.name, achievement.description, achievement.icon
        ) or leveled_up
        granted.append(achievement.as_dict())
        logger.info(f"User {user.id} earned achievement {achievement.achievement_id}")
    return granted, leveled_up
