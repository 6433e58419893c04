from __future__ import annotations

from datetime import datetime, timezone

import pytest

from quizo.core.models import Difficulty, Question, Quiz
from quizo.core.quiz_manager import QuizManager
from quizo.core.storage import JsonFileStore


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeWallClock:
    def __init__(self, now: datetime | None = None) -> None:
        self.now = now or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


def make_question(index: int, correct: int = 0, category: str = "General") -> Question:
    return Question(
        id=f"q{index}",
        question_text=f"Question {index}?",
        options=[f"Option {index}{letter}" for letter in "ABCD"],
        correct_option_index=correct,
        category=category,
    )


def make_quiz(
    question_count: int = 3,
    *,
    time_limit_seconds: int | None = None,
    correct: int = 0,
    quiz_id: str = "quiz-1",
    published: bool = True,
) -> Quiz:
    return Quiz(
        id=quiz_id,
        title="Sample quiz",
        description="A quiz for tests",
        difficulty=Difficulty.EASY if time_limit_seconds is None else Difficulty.MEDIUM,
        questions=[make_question(i, correct) for i in range(question_count)],
        created_by="alice",
        created_at=datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc),
        time_limit_seconds=time_limit_seconds,
        is_published=published,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def wall_clock() -> FakeWallClock:
    return FakeWallClock()


@pytest.fixture
def store() -> JsonFileStore:
    return JsonFileStore()


@pytest.fixture
def manager(store, clock, wall_clock) -> QuizManager:
    return QuizManager(store, clock=clock, wall_clock=wall_clock)


def draft_questions(count: int, correct: int = 1) -> list[Question]:
    return [
        Question(
            id="",
            question_text=f"Draft question {i}",
            options=["Red", "Green", "Blue", "Yellow"],
            correct_option_index=correct,
            category="Science",
        )
        for i in range(count)
    ]
