"""
Gamification scoring rules: experience points, difficulty recommendation and
aggregate security scores.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from truthshield.core.database.entities.game_sessions import DIFFICULTY_MULTIPLIER
from truthshield.core.models.domain import AgeGroup, Difficulty

DIFFICULTY_ORDER = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD, Difficulty.EXPERT]

BASE_DIFFICULTY = {
    AgeGroup.CHILD.value: Difficulty.EASY,
    AgeGroup.TEEN.value: Difficulty.MEDIUM,
    AgeGroup.ADULT.value: Difficulty.HARD,
    AgeGroup.SENIOR.value: Difficulty.MEDIUM,
}

FAST_COMPLETION_SECONDS = 300


def calculate_xp(score: float, difficulty: Difficulty | str, time_spent: int) -> int:
    """Experience earned for a finished game.

    A tenth of the score scaled by difficulty, plus a bonus of one point per
    ten seconds under five minutes.
    """
    multiplier = DIFFICULTY_MULTIPLIER.get(Difficulty(difficulty).value, 1)
    time_bonus = max(0, (FAST_COMPLETION_SECONDS - time_spent) / 10)
    return round(score / 10 * multiplier + time_bonus)


def recommend_difficulty(age_group: AgeGroup | str, average_accuracy: Optional[float]) -> Difficulty:
    """Pick a difficulty from the age group, stepping it by recent accuracy.

    Accuracy above 80 steps up one level and below 40 steps down one level.
    Without any history the age-group default is returned.
    """
    base = BASE_DIFFICULTY.get(AgeGroup(age_group).value, Difficulty.MEDIUM)
    index = DIFFICULTY_ORDER.index(base)
    if average_accuracy is None:
        return base
    if average_accuracy > 80:
        return DIFFICULTY_ORDER[min(index + 1, len(DIFFICULTY_ORDER) - 1)]
    if average_accuracy < 40:
        return DIFFICULTY_ORDER[max(index - 1, 0)]
    return base


def average_positive_score(scores: Iterable[float]) -> int:
    """Rounded mean of the scores greater than zero, or 0 when there are none."""
    positive = [score for score in scores if score and score > 0]
    return round(sum(positive) / len(positive)) if positive else 0


def overall_progress(progress: Iterable[Mapping[str, Any]]) -> dict:
    """Totals across the per-game progress aggregates."""
    progress = list(progress)
    return {
        "total_games": sum(game["total_sessions"] for game in progress),
        "completed_games": sum(game["completed_sessions"] for game in progress),
        "average_score": average_positive_score(game["average_score"] for game in progress),
    }
