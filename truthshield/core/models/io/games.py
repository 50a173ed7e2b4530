"""
Game I/O models for API requests and responses.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from truthshield.core.models.domain import Difficulty, GameType


class GameStart(BaseModel):
    game_type: GameType
    difficulty: Difficulty


class AnswerSubmit(BaseModel):
    question_id: str = Field(min_length=1)
    user_answer: str
    time_taken: Optional[float] = Field(default=None, ge=0, description="Seconds spent on the question")


class GameFeedback(BaseModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    comments: Optional[str] = Field(default=None, max_length=1000)
    difficulty_feedback: Optional[str] = Field(default=None, max_length=200)


class GameComplete(BaseModel):
    feedback: Optional[GameFeedback] = None
