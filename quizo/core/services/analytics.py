"""Per-quiz statistics shown to quiz creators."""

from __future__ import annotations

from dataclasses import dataclass

from quizo.constants.quiz_constants import RECENT_RESULTS_LIMIT
from quizo.core.models import Quiz, QuizResult
from quizo.utils.rounding import round_half_up


def average_score_percentage(results: list[QuizResult]) -> int:
    """Mean of each result's score ratio, as a rounded percentage."""
    if not results:
        return 0
    return round_half_up(sum(result.ratio for result in results) / len(results) * 100)


def most_recent(results: list[QuizResult], limit: int) -> list[QuizResult]:
    return sorted(results, key=lambda r: r.completed_at, reverse=True)[:limit]


@dataclass(frozen=True, slots=True)
class QuizAnalytics:
    quiz: Quiz
    attempts: int
    average_score_percentage: int
    average_time_seconds: int
    best_score: int
    recent_results: list[QuizResult]


@dataclass(frozen=True, slots=True)
class QuizSummary:
    """One row of a quiz list: the quiz plus its headline numbers."""

    quiz: Quiz
    attempts: int
    average_score_percentage: int


def summarize_quiz(quiz: Quiz, results: list[QuizResult]) -> QuizSummary:
    return QuizSummary(quiz=quiz, attempts=len(results), average_score_percentage=average_score_percentage(results))


def build_quiz_analytics(quiz: Quiz, results: list[QuizResult], recent_limit: int = RECENT_RESULTS_LIMIT) -> QuizAnalytics:
    if not results:
        return QuizAnalytics(quiz, 0, 0, 0, 0, [])
    return QuizAnalytics(
        quiz=quiz,
        attempts=len(results),
        average_score_percentage=average_score_percentage(results),
        average_time_seconds=round_half_up(sum(r.time_spent_seconds for r in results) / len(results)),
        best_score=max(r.score for r in results),
        recent_results=most_recent(results, recent_limit),
    )
