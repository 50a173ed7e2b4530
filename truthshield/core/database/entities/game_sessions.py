"""
Game session entity model.

A game session is one play-through of a security training game. Answers are
appended as the user plays; the session is scored after every answer and once
more when it is completed.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, DateTime, Field

from truthshield.core.models.domain import AgeGroup, Difficulty, GameType

from ..base import Base, new_id, utc_now

MAX_GAME_SCORE = 1000
TIME_PENALTY_AFTER_SECONDS = 300

DIFFICULTY_MULTIPLIER: Dict[str, float] = {
    Difficulty.EASY.value: 1,
    Difficulty.MEDIUM.value: 1.5,
    Difficulty.HARD.value: 2,
    Difficulty.EXPERT.value: 3,
}


class GameSession(Base, table=True):
    """Persistent record of one game play-through.

    Table: game_sessions
    """

    __tablename__ = "game_sessions"
    __table_args__ = ({"extend_existing": True},)

    id: uuid.UUID = Field(default_factory=new_id, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)

    game_type: GameType = Field(index=True)
    age_group: AgeGroup
    difficulty: Difficulty

    score: float = Field(default=0, ge=0, le=MAX_GAME_SCORE, index=True)
    time_spent: int = Field(default=0, description="Seconds between start and completion")
    correct_answers: int = Field(default=0)
    total_questions: int = Field(default=0)
    accuracy: int = Field(default=0, ge=0, le=100)
    level: int = Field(default=1, ge=1, le=10)
    completed: bool = Field(default=False, index=True)

    start_time: datetime = Field(default_factory=utc_now, sa_type=DateTime)
    end_time: Optional[datetime] = Field(default=None, sa_type=DateTime)

    # Questions served at start; answers recorded as they arrive
    questions: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    answers: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    threats_encountered: List[Dict[str, Any]] = Field(default_factory=list, sa_type=JSON)
    feedback: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime, index=True)
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime, sa_column_kwargs={"onupdate": utc_now})

    def find_question(self, question_id: str) -> Optional[Dict[str, Any]]:
        return next((q for q in self.questions if q.get("question_id") == question_id), None)

    def is_answered(self, question_id: str) -> bool:
        return any(a.get("question_id") == question_id for a in self.answers)

    def calculate_accuracy(self) -> int:
        if self.total_questions > 0:
            self.accuracy = round(self.correct_answers / self.total_questions * 100)
        return self.accuracy

    def calculate_score(self) -> float:
        """Score the session from correct answers, accuracy, difficulty and time spent."""
        base_score = self.correct_answers * 10
        accuracy_bonus = self.accuracy * 2
        multiplier = DIFFICULTY_MULTIPLIER[Difficulty(self.difficulty).value]
        time_penalty = max(0, (self.time_spent - TIME_PENALTY_AFTER_SECONDS) / 10)
        self.score = min(MAX_GAME_SCORE, max(0, (base_score + accuracy_bonus) * multiplier - time_penalty))
        return self.score

    def add_question_result(self, result: Dict[str, Any]) -> None:
        """Record an answer and rescore the session."""
        self.answers = [*self.answers, result]
        self.total_questions += 1
        if result.get("is_correct"):
            self.correct_answers += 1
        self.calculate_accuracy()
        self.calculate_score()

    def complete(self) -> None:
        self.completed = True
        self.end_time = utc_now()
        self.time_spent = round((self.end_time - self.start_time).total_seconds())
        self.calculate_accuracy()
        self.calculate_score()

    def __repr__(self) -> str:
        return f"GameSession(id={self.id}, game_type={self.game_type}, score={self.score}, completed={self.completed})"
