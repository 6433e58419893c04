"""Scores a completed set of answers into a quiz result."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence
from uuid import uuid4

from quizo.core.models import AnswerRecord, Quiz, QuizResult
from quizo.utils.rounding import round_half_up


def aggregate_result(
    quiz: Quiz,
    participant_name: str,
    answers: Sequence[AnswerRecord],
    *,
    result_id: str | None = None,
    completed_at: datetime | None = None,
) -> QuizResult:
    """Produce the final result for one attempt at ``quiz``."""
    if len(answers) != len(quiz.questions):
        raise ValueError(
            f"Expected {len(quiz.questions)} answers for quiz {quiz.id}, got {len(answers)}."
        )
    total_ms = sum(answer.time_spent_ms for answer in answers)
    return QuizResult(
        id=result_id or uuid4().hex,
        quiz_id=quiz.id,
        participant_name=participant_name,
        score=sum(1 for answer in answers if answer.is_correct),
        total_questions=len(quiz.questions),
        time_spent_seconds=round_half_up(total_ms / 1000),
        answers=tuple(answers),
        completed_at=completed_at or datetime.now(timezone.utc),
    )


def format_share_text(quiz_title: str, result: QuizResult, share_link: str) -> str:
    """Message a participant can paste to invite others to the same quiz."""
    return (
        f'I just completed "{quiz_title}" and scored {result.score}/{result.total_questions}! '
        f"Try it yourself: {share_link}"
    )
