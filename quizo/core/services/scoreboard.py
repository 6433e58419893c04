"""Service ranking participants across all recorded results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from quizo.core.models import QuizResult
from quizo.utils.rounding import as_percentage


@dataclass(slots=True)
class ScoreEntry:
    """Mutable scoreboard entry used internally."""

    participant_name: str
    total_score: int = 0
    total_questions: int = 0
    attempts: int = 0
    last_completed_at: datetime = field(default_factory=lambda: datetime.min.replace(tzinfo=timezone.utc))


@dataclass(slots=True)
class ScoreboardRow:
    """Immutable snapshot returned to consumers."""

    participant_name: str
    total_score: int
    total_questions: int
    attempts: int

    @property
    def percentage(self) -> int:
        return as_percentage(self.total_score, self.total_questions)


class Scoreboard:
    """Aggregates results per participant name."""

    def __init__(self) -> None:
        self._scores: dict[str, ScoreEntry] = {}

    @classmethod
    def from_results(cls, results: list[QuizResult]) -> "Scoreboard":
        board = cls()
        for result in results:
            board.record_result(result)
        return board

    def record_result(self, result: QuizResult) -> None:
        entry = self._scores.get(result.participant_name)
        if entry is None:
            entry = ScoreEntry(participant_name=result.participant_name)
            self._scores[result.participant_name] = entry

        entry.attempts += 1
        entry.total_score += result.score
        entry.total_questions += result.total_questions
        entry.last_completed_at = max(entry.last_completed_at, result.completed_at)

    def get_top_participants(self, limit: int = 10) -> list[ScoreboardRow]:
        """Return the top N participants by overall ratio of correct answers."""
        sorted_entries = sorted(
            self._scores.values(),
            key=lambda e: (-(e.total_score / e.total_questions) if e.total_questions else 0.0, -e.total_score),
        )

        return [
            ScoreboardRow(
                participant_name=entry.participant_name,
                total_score=entry.total_score,
                total_questions=entry.total_questions,
                attempts=entry.attempts,
            )
            for entry in sorted_entries[:limit]
        ]

    def participant_count(self) -> int:
        return len(self._scores)

    def clear(self) -> None:
        """Reset all scores."""
        self._scores.clear()
