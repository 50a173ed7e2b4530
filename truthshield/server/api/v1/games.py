"""
API endpoints for the security training games.

A game is played as a session: ``/start`` serves shuffled questions without
their answers, ``/{session_id}/answer`` grades one answer at a time and
``/{session_id}/complete`` closes the session, folding its result into the
player's progress, experience, level, security score and achievements.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from truthshield.core.database.entities.game_sessions import GameSession
from truthshield.core.database.repositories import GameSessionRepository, UserRepository
from truthshield.core.logging_config import get_logger
from truthshield.core.models.domain import AgeGroup, GameType
from truthshield.core.models.io import AnswerSubmit, GameComplete, GameStart, UserSummary
from truthshield.core.monitoring import log_game_completed
from truthshield.server.api.deps import CurrentUser, SessionDep
from truthshield.server.responses import ApiError, success_response
from truthshield.services.achievements import check_achievements
from truthshield.services.questions import select_questions
from truthshield.services.scoring import calculate_xp, overall_progress, recommend_difficulty

logger = get_logger(__name__)

router = APIRouter(tags=["games"])


async def _open_session(repo: GameSessionRepository, session_id: str, user_id) -> GameSession:
    game_session = await repo.get_for_user(session_id, user_id)
    if game_session is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Game session not found", "NOT_FOUND")
    if game_session.completed:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Game session already completed", "SESSION_COMPLETED")
    return game_session


@router.post(
    "/start",
    status_code=status.HTTP_201_CREATED,
    summary="Start Game",
    description="Open a game session and receive up to five shuffled questions.",
    response_description="Session id and the questions, without their answers.",
    responses={201: {"description": "Game session started"}, 400: {"description": "Unknown game type or difficulty"}},
)
async def start_game(payload: GameStart, user: CurrentUser, session: SessionDep):
    questions = select_questions(payload.game_type, payload.difficulty)
    game_session = GameSession(
        user_id=user.id,
        game_type=payload.game_type,
        age_group=user.age_group,
        difficulty=payload.difficulty,
        questions=[question.as_record() for question in questions],
    )
    game_session = await GameSessionRepository(session).create(game_session)
    logger.debug(f"User {user.id} started {payload.game_type.value} session {game_session.id}")

    return success_response(
        "Game session started",
        {
            "session_id": game_session.id,
            "questions": [question.public() for question in questions],
            "difficulty": payload.difficulty,
            "game_type": payload.game_type,
        },
    )


@router.post(
    "/{session_id}/answer",
    summary="Submit Answer",
    description="Grade one answer of an open session and rescore it.",
    responses={
        400: {"description": "Session already completed or question already answered"},
        404: {"description": "Session or question not found"},
    },
)
async def submit_answer(session_id: str, payload: AnswerSubmit, user: CurrentUser, session: SessionDep):
    """
    Submit an answer for a question served by this session.

    The response reveals the correct answer and its explanation together with
    the running score and accuracy.
    """
    repo = GameSessionRepository(session)
    game_session = await _open_session(repo, session_id, user.id)

    question = game_session.find_question(payload.question_id)
    if question is None:
        raise ApiError(status.HTTP_404_NOT_FOUND, "Question not found", "NOT_FOUND")
    if game_session.is_answered(payload.question_id):
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Question already answered", "ALREADY_ANSWERED")

    is_correct = payload.user_answer == question["correct_answer"]
    game_session.add_question_result(
        {
            "question_id": payload.question_id,
            "question": question["question"],
            "user_answer": payload.user_answer,
            "correct_answer": question["correct_answer"],
            "is_correct": is_correct,
            "time_taken": payload.time_taken,
            "difficulty": game_session.difficulty.value,
            "category": question.get("category"),
        }
    )
    game_session = await repo.update(game_session)

    return success_response(
        "Answer submitted",
        {
            "is_correct": is_correct,
            "correct_answer": question["correct_answer"],
            "explanation": question.get("explanation"),
            "current_score": game_session.score,
            "accuracy": game_session.accuracy,
        },
    )


@router.post(
    "/{session_id}/complete",
    summary="Complete Game",
    description="Close a session and apply its result to the player's progress.",
    responses={
        400: {"description": "Session already completed"},
        404: {"description": "Session not found"},
    },
)
async def complete_game(session_id: str, user: CurrentUser, session: SessionDep, payload: GameComplete | None = None):
    """
    Complete a game session.

    Updates the per-game progress entry, grants experience (with level-ups),
    recomputes the security score and awards first_game, perfect_score and
    speed_runner achievements.
    """
    repo = GameSessionRepository(session)
    game_session = await _open_session(repo, session_id, user.id)

    game_session.complete()
    if payload is not None and payload.feedback is not None:
        game_session.feedback = payload.feedback.model_dump(exclude_none=True)
    game_session = await repo.update(game_session)

    perfect = game_session.total_questions > 0 and game_session.correct_answers == game_session.total_questions
    user.record_game_result(game_session.game_type.value, game_session.score, game_session.level, perfect)

    xp_gained = calculate_xp(game_session.score, game_session.difficulty, game_session.time_spent)
    user.experience += xp_gained
    leveled_up = user.check_level_up()
    user.update_security_score()
    achievements, achievement_level_up = check_achievements(user, game_session)
    user = await UserRepository(session).update(user)

    log_game_completed(
        game_type=game_session.game_type.value,
        difficulty=game_session.difficulty.value,
        score=game_session.score,
        xp_gained=xp_gained,
    )

    return success_response(
        "Game completed successfully",
        {
            "final_score": game_session.score,
            "accuracy": game_session.accuracy,
            "time_spent": game_session.time_spent,
            "xp_gained": xp_gained,
            "new_level": user.level,
            "leveled_up": leveled_up or achievement_level_up,
            "achievements": achievements,
            "security_score": user.security_score,
        },
    )


@router.get("/progress", summary="Game Progress", description="Per-game aggregates and overall totals.")
async def get_progress(user: CurrentUser, session: SessionDep, game_type: GameType | None = None):
    progress = await GameSessionRepository(session).get_user_progress(user.id, game_type)
    return success_response(
        "Progress retrieved successfully",
        {"progress": progress, "overall_stats": overall_progress(progress)},
    )


@router.get("/leaderboard", summary="Overall Leaderboard", description="Users ranked by security score.")
async def get_leaderboard(user: CurrentUser, session: SessionDep, limit: int = Query(10, ge=1, le=100)):
    users = await UserRepository(session).get_leaderboard(limit)
    leaderboard = [
        {"rank": rank, **UserSummary.model_validate(entry).model_dump()} for rank, entry in enumerate(users, start=1)
    ]
    return success_response("Leaderboard retrieved successfully", {"leaderboard": leaderboard})


@router.get(
    "/leaderboard/{game_type}",
    summary="Game Leaderboard",
    description="Best completed score per user for one game.",
)
async def get_game_leaderboard(
    game_type: GameType, user: CurrentUser, session: SessionDep, limit: int = Query(10, ge=1, le=100)
):
    leaderboard = await GameSessionRepository(session).get_game_leaderboard(game_type, limit)
    return success_response("Leaderboard retrieved successfully", {"game_type": game_type, "leaderboard": leaderboard})


@router.get("/stats", summary="Game Statistics")
async def get_stats(user: CurrentUser, session: SessionDep):
    repo = GameSessionRepository(session)
    stats = {
        "total_games_played": await repo.count_for_user(user.id),
        "completed_games": await repo.count_for_user(user.id, completed=True),
        "total_play_time": await repo.total_play_time([user.id]),
        "security_score": user.security_score,
        "level": user.level,
        "experience": user.experience,
        "achievements_count": len(user.achievements),
    }
    return success_response("Game statistics retrieved", {"stats": stats})


@router.get(
    "/recommendation",
    summary="Recommended Difficulty",
    description="Difficulty suggested from the age group, stepped up above 80% and down below 40% average accuracy.",
)
async def get_recommendation(user: CurrentUser, session: SessionDep):
    average_accuracy = await GameSessionRepository(session).average_accuracy(user.id)
    return success_response(
        "Recommendation retrieved",
        {
            "recommended_difficulty": recommend_difficulty(user.age_group, average_accuracy),
            "age_group": AgeGroup(user.age_group),
            "average_accuracy": None if average_accuracy is None else round(average_accuracy, 2),
        },
    )
