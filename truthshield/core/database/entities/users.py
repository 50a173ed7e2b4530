"""
User entity model.

Users carry their own gamification state (security score, level, experience,
achievements and per-game progress) together with family and enterprise
membership details. Nested, document-style data lives in JSON columns.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, DateTime, Field

from truthshield.core.models.domain import AgeGroup, GameType, Persona

from ..base import Base, new_id, utc_now

MAX_SECURITY_SCORE = 1000
MAX_LEVEL = 100
ACHIEVEMENT_XP = 100


def default_game_progress() -> Dict[str, Dict[str, Any]]:
    return {
        game.value: {"completed": False, "score": 0, "level": 1, "completed_at": None}
        for game in GameType
    }


def default_settings() -> Dict[str, Any]:
    return {
        "notifications": True,
        "real_time_protection": True,
        "data_collection": False,
        "theme": "light",
    }


def age_group_for(age: int) -> AgeGroup:
    """Map an age onto its audience bracket."""
    if 6 <= age <= 12:
        return AgeGroup.CHILD
    if 13 <= age <= 17:
        return AgeGroup.TEEN
    if 18 <= age <= 64:
        return AgeGroup.ADULT
    return AgeGroup.SENIOR


class User(Base, table=True):
    """Registered platform user.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: uuid.UUID = Field(default_factory=new_id, primary_key=True)

    # Identity
    email: str = Field(index=True, unique=True, max_length=254)
    password_hash: str = Field(description="bcrypt hash, never serialised")
    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    age: int = Field(ge=6, le=120)
    age_group: AgeGroup = Field(index=True)
    persona: Persona

    # Gamification
    security_score: int = Field(default=0, ge=0, le=MAX_SECURITY_SCORE, index=True)
    level: int = Field(default=1, ge=1, le=MAX_LEVEL)
    experience: int = Field(default=0, ge=0)
    achievements: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    game_progress: Dict[str, Dict[str, Any]] = Field(
        default_factory=default_game_progress, sa_type=JSON
    )

    # Family membership
    is_parent: bool = Field(default=False)
    parent_id: Optional[uuid.UUID] = Field(default=None, index=True)

    # Enterprise membership
    is_enterprise_admin: bool = Field(default=False)
    company: Optional[str] = Field(default=None, index=True, max_length=200)
    department: Optional[str] = Field(default=None, max_length=200)
    employee_id: Optional[str] = Field(default=None, max_length=100)

    settings: Dict[str, Any] = Field(default_factory=default_settings, sa_type=JSON)

    # Account state
    last_active: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    is_verified: bool = Field(default=False)
    password_changed_at: Optional[datetime] = Field(default=None, sa_type=DateTime)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime, sa_column_kwargs={"onupdate": utc_now})

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def set_age(self, age: int) -> None:
        """Update the age and keep the derived age group in step."""
        self.age = age
        self.age_group = age_group_for(age)

    def update_security_score(self) -> int:
        """Recompute the security score as the mean of all non-zero game scores."""
        scores = [game.get("score", 0) for game in self.game_progress.values() if game.get("score", 0) > 0]
        self.security_score = min(MAX_SECURITY_SCORE, round(sum(scores) / len(scores))) if scores else 0
        return self.security_score

    def check_level_up(self) -> bool:
        """Spend experience on level-ups; each level costs ``level * 100`` XP."""
        leveled_up = False
        while self.level < MAX_LEVEL and self.experience >= self.level * 100:
            self.experience -= self.level * 100
            self.level += 1
            leveled_up = True
        return leveled_up

    def add_achievement(self, achievement_id: str, name: str, description: str, icon: str = "") -> bool:
        """Grant an achievement and its experience bonus. Returns whether the user leveled up."""
        self.achievements = [
            *self.achievements,
            {
                "achievement_id": achievement_id,
                "name": name,
                "description": description,
                "icon": icon,
                "earned_at": utc_now().isoformat(),
            },
        ]
        self.experience += ACHIEVEMENT_XP
        return self.check_level_up()

    def has_achievement(self, achievement_id: str) -> bool:
        return any(a.get("achievement_id") == achievement_id for a in self.achievements)

    def record_game_result(self, game_type: str, score: float, level: int, perfect: bool) -> Dict[str, Any]:
        """Fold a finished session into the per-game progress entry."""
        progress = {**default_game_progress(), **self.game_progress}
        entry = dict(progress.get(game_type) or {"completed": False, "score": 0, "level": 1, "completed_at": None})
        if score > entry.get("score", 0):
            entry["score"] = round(score, 2)
            entry["level"] = max(entry.get("level", 1), level)
        if perfect:
            entry["completed"] = True
            entry["completed_at"] = utc_now().isoformat()
        progress[game_type] = entry
        self.game_progress = progress
        return entry

    def completed_games(self) -> int:
        return sum(1 for game in self.game_progress.values() if game.get("completed"))

    def password_changed_after(self, issued_at: int) -> bool:
        """Whether the password changed after a token issued at ``issued_at`` (epoch seconds)."""
        if self.password_changed_at is None:
            return False
        return int(self.password_changed_at.replace(tzinfo=timezone.utc).timestamp()) > issued_at

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, persona={self.persona})"
