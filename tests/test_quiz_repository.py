from datetime import datetime, timezone

import pytest

from quizo.core.models import Difficulty, Question
from quizo.core.services.quiz_repository import QuizNotFoundError, QuizRepository
from quizo.core.storage import JsonFileStore

from conftest import draft_questions


@pytest.fixture
def repository():
    return QuizRepository(JsonFileStore())


def _create(repository, author="alice", difficulty=Difficulty.MEDIUM, count=3):
    return repository.create_quiz(author, "  Colours  ", " Name that colour ", difficulty, draft_questions(count))


def test_create_quiz_stores_a_draft(repository):
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    quiz = repository.create_quiz("alice", "Colours", "", Difficulty.SPEED, draft_questions(2), now)

    assert quiz.is_published is False
    assert quiz.created_by == "alice"
    assert quiz.created_at == now
    assert quiz.time_limit_seconds == 30
    assert all(question.id for question in quiz.questions)
    assert len({question.id for question in quiz.questions}) == 2
    assert repository.get_quiz(quiz.id) == quiz


def test_create_quiz_trims_title_and_description(repository):
    quiz = _create(repository)

    assert quiz.title == "Colours"
    assert quiz.description == "Name that colour"


@pytest.mark.parametrize(
    ("difficulty", "limit"),
    [(Difficulty.EASY, None), (Difficulty.MEDIUM, 60), (Difficulty.SPEED, 30), (Difficulty.HARD, 45)],
)
def test_time_limit_follows_difficulty(repository, difficulty, limit):
    assert _create(repository, difficulty=difficulty, count=1).time_limit_seconds == limit


def test_question_cap_depends_on_difficulty(repository):
    _create(repository, difficulty=Difficulty.SPEED, count=5)

    with pytest.raises(ValueError):
        _create(repository, difficulty=Difficulty.SPEED, count=6)


def test_empty_quiz_is_rejected(repository):
    with pytest.raises(ValueError):
        _create(repository, count=0)


def test_blank_title_is_rejected(repository):
    with pytest.raises(ValueError):
        repository.create_quiz("alice", "   ", "", Difficulty.EASY, draft_questions(1))


@pytest.mark.parametrize(
    "question",
    [
        Question("", "   ", ["a", "b", "c", "d"], 0),
        Question("", "Text", ["a", "b", "c"], 0),
        Question("", "Text", ["a", "", "c", "d"], 0),
        Question("", "Text", ["a", "b", "c", "d"], 4),
    ],
)
def test_invalid_questions_are_rejected(repository, question):
    with pytest.raises(ValueError):
        repository.create_quiz("alice", "Quiz", "", Difficulty.EASY, [question])


def test_blank_category_defaults_to_general(repository):
    question = Question("", "Text", ["a", "b", "c", "d"], 0, category="  ")

    quiz = repository.create_quiz("alice", "Quiz", "", Difficulty.EASY, [question])

    assert quiz.questions[0].category == "General"


def test_draft_quiz_is_not_available_to_participants(repository):
    quiz = _create(repository)

    with pytest.raises(QuizNotFoundError):
        repository.get_published_quiz(quiz.id)
    with pytest.raises(QuizNotFoundError):
        repository.get_published_quiz("missing")


def test_publish_and_unpublish(repository):
    quiz = _create(repository)

    repository.set_published("alice", quiz.id, True)
    assert repository.get_published_quiz(quiz.id).is_published
    assert [q.id for q in repository.published_quizzes()] == [quiz.id]

    repository.set_published("alice", quiz.id, False)
    assert repository.published_quizzes() == []


def test_only_author_may_change_a_quiz(repository):
    quiz = _create(repository)

    with pytest.raises(PermissionError):
        repository.set_published("mallory", quiz.id, True)
    with pytest.raises(PermissionError):
        repository.update_quiz("mallory", quiz.id, title="Mine")
    with pytest.raises(PermissionError):
        repository.delete_quiz("mallory", quiz.id)


def test_questions_are_locked_while_published(repository):
    quiz = _create(repository)
    repository.set_published("alice", quiz.id, True)

    with pytest.raises(RuntimeError):
        repository.update_quiz("alice", quiz.id, questions=draft_questions(1))

    renamed = repository.update_quiz("alice", quiz.id, title="Renamed")
    assert renamed.title == "Renamed"
    assert renamed.question_count == 3


def test_update_replaces_questions_of_a_draft(repository):
    quiz = _create(repository)

    updated = repository.update_quiz("alice", quiz.id, questions=draft_questions(1, correct=3))

    assert updated.question_count == 1
    assert repository.get_quiz(quiz.id).questions[0].correct_option_index == 3


def test_quizzes_by_creator_and_delete(repository):
    mine = _create(repository, author="alice")
    _create(repository, author="bob")

    assert [q.id for q in repository.quizzes_by_creator("alice")] == [mine.id]

    repository.delete_quiz("alice", mine.id)
    assert repository.quizzes_by_creator("alice") == []
    with pytest.raises(QuizNotFoundError):
        repository.get_quiz(mine.id)
