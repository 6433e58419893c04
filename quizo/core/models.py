"""Domain models for the quiz application."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from quizo.constants.quiz_constants import DIFFICULTY_RULES, FALLBACK_CATEGORY_LABEL, DifficultyRules
from quizo.utils.rounding import as_percentage


class Difficulty(str, Enum):
    """Difficulty tag chosen when a quiz is created."""

    EASY = "easy"
    MEDIUM = "medium"
    SPEED = "speed"
    HARD = "hard"

    @property
    def rules(self) -> DifficultyRules:
        return DIFFICULTY_RULES[self.value]


class SubscriptionType(str, Enum):
    FREE = "free"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(slots=True)
class Question:
    """Multiple-choice question with exactly four options."""

    id: str
    question_text: str
    options: list[str]
    correct_option_index: int
    category: str = "General"


@dataclass(slots=True)
class Quiz:
    """A quiz owned by its creator; questions are locked while published."""

    id: str
    title: str
    description: str
    difficulty: Difficulty
    questions: list[Question]
    created_by: str
    created_at: datetime
    time_limit_seconds: int | None = None
    is_published: bool = False

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def categories(self) -> list[str]:
        seen: list[str] = []
        for question in self.questions:
            if question.category and question.category not in seen:
                seen.append(question.category)
        return seen or [FALLBACK_CATEGORY_LABEL]


@dataclass(frozen=True, slots=True)
class AnswerRecord:
    """Outcome of one question within an attempt.

    ``selected_option_index`` is ``None`` when the question timed out without a
    selection.
    """

    question_id: str
    selected_option_index: int | None
    is_correct: bool
    time_spent_ms: int


@dataclass(frozen=True, slots=True)
class QuizResult:
    """Scored outcome of a finished attempt."""

    id: str
    quiz_id: str
    participant_name: str
    score: int
    total_questions: int
    time_spent_seconds: int
    answers: tuple[AnswerRecord, ...]
    completed_at: datetime

    @property
    def ratio(self) -> float:
        if not self.total_questions:
            return 0.0
        return self.score / self.total_questions

    @property
    def percentage(self) -> int:
        return as_percentage(self.score, self.total_questions)


@dataclass(slots=True)
class UserAccount:
    """Per-username account record holding the creation quota."""

    username: str
    email: str
    quizzes_today: int = 0
    last_quiz_date: date | None = None
    subscription_type: SubscriptionType = SubscriptionType.FREE
    subscription_end: datetime | None = None
