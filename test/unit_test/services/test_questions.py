import random

import pytest

from truthshield.core.models.domain import Difficulty, GameType
from truthshield.services.questions import GAME_QUESTIONS, QUESTIONS_PER_SESSION, get_question, select_questions


@pytest.mark.parametrize("game_type", list(GameType))
def test_every_game_has_questions_for_every_difficulty(game_type):
    for difficulty in Difficulty:
        assert GAME_QUESTIONS[game_type.value][difficulty.value], (game_type, difficulty)


def test_question_ids_are_unique():
    ids = [q.question_id for by_difficulty in GAME_QUESTIONS.values() for qs in by_difficulty.values() for q in qs]
    assert len(ids) == len(set(ids))


def test_correct_answer_is_one_of_the_options():
    for by_difficulty in GAME_QUESTIONS.values():
        for questions in by_difficulty.values():
            for question in questions:
                assert question.correct_answer in question.options, question.question_id


def test_select_questions_is_limited_and_shuffled():
    questions = select_questions(GameType.SCAM_SPOTTER, Difficulty.EASY, rng=random.Random(1))
    assert 0 < len(questions) <= QUESTIONS_PER_SESSION
    assert {q.question_id for q in questions} <= {"ss_easy_1", "ss_easy_2"}
    assert len(select_questions("scam_spotter", "easy", count=1)) == 1


def test_public_view_hides_the_answer():
    question = get_question("ss_easy_1")
    assert question is not None
    public = question.public()
    assert "correct_answer" not in public
    assert "explanation" not in public
    assert public["options"] == list(question.options)

    record = question.as_record()
    assert record["correct_answer"] == "Ignore and delete the email"


def test_unknown_question():
    assert get_question("nope") is None
