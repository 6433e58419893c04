"""Site-wide statistics and maintenance actions behind the admin password."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import hmac
import logging

from quizo.constants.admin_constants import ADMIN_PASSWORD
from quizo.constants.quiz_constants import LEADERBOARD_LIMIT, RECENT_ACTIVITY_LIMIT
from quizo.constants.storage_constants import QUIZZES_KEY, RESULTS_KEY
from quizo.core.models import QuizResult
from quizo.core.services.account_service import AccountService
from quizo.core.services.analytics import QuizSummary, average_score_percentage, most_recent, summarize_quiz
from quizo.core.services.quiz_repository import QuizRepository
from quizo.core.services.result_repository import ResultRepository
from quizo.core.services.scoreboard import Scoreboard, ScoreboardRow
from quizo.core.storage import JsonFileStore
from quizo.utils.rounding import round_half_up

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AdminOverview:
    total_participants: int
    total_creators: int
    total_quizzes: int
    published_quizzes: int
    total_attempts: int
    average_score_percentage: int
    quizzes_today: int
    attempts_today: int

    @property
    def attempts_per_participant(self) -> int:
        if not self.total_participants:
            return 0
        return round_half_up(self.total_attempts / self.total_participants)


@dataclass(frozen=True, slots=True)
class ActivityEntry:
    result: QuizResult
    quiz_title: str


@dataclass(frozen=True, slots=True)
class StorageUsage:
    quizzes_kb: float
    results_kb: float


class AdminService:
    def __init__(
        self,
        store: JsonFileStore,
        quizzes: QuizRepository,
        results: ResultRepository,
        accounts: AccountService,
        password: str = ADMIN_PASSWORD,
    ) -> None:
        self._store = store
        self._quizzes = quizzes
        self._results = results
        self._accounts = accounts
        self._password = password

    def authenticate(self, password: str) -> bool:
        return hmac.compare_digest(password.encode("utf-8"), self._password.encode("utf-8"))

    def overview(self, now: datetime | None = None) -> AdminOverview:
        today = (now or datetime.now(timezone.utc)).date()
        quizzes = self._quizzes.list_quizzes()
        results = self._results_for_known_quizzes()
        return AdminOverview(
            total_participants=len({r.participant_name for r in results}),
            total_creators=len({q.created_by for q in quizzes}),
            total_quizzes=len(quizzes),
            published_quizzes=sum(1 for q in quizzes if q.is_published),
            total_attempts=len(results),
            average_score_percentage=average_score_percentage(results),
            quizzes_today=sum(1 for q in quizzes if q.created_at.date() == today),
            attempts_today=sum(1 for r in results if r.completed_at.date() == today),
        )

    def recent_activity(self, limit: int = RECENT_ACTIVITY_LIMIT) -> list[ActivityEntry]:
        titles = {quiz.id: quiz.title for quiz in self._quizzes.list_quizzes()}
        return [
            ActivityEntry(result=result, quiz_title=titles.get(result.quiz_id, "Unknown Quiz"))
            for result in most_recent(self._results.all_results(), limit)
        ]

    def quiz_summaries(self) -> list[QuizSummary]:
        results = self._results.all_results()
        return [
            summarize_quiz(quiz, [r for r in results if r.quiz_id == quiz.id])
            for quiz in self._quizzes.list_quizzes()
        ]

    def leaderboard(self, limit: int = LEADERBOARD_LIMIT) -> list[ScoreboardRow]:
        return Scoreboard.from_results(self._results_for_known_quizzes()).get_top_participants(limit)

    def delete_quiz(self, quiz_id: str) -> int:
        """Remove a quiz and all of its results; returns the number of results removed."""
        self._quizzes.get_quiz(quiz_id)
        self._quizzes.remove_quiz(quiz_id)
        removed = self._results.delete_for_quiz(quiz_id)
        logger.info("Admin removed quiz %s and %d results", quiz_id, removed)
        return removed

    def clear_all_data(self) -> None:
        self._quizzes.clear()
        self._results.clear()
        self._accounts.clear_all()
        logger.warning("Admin cleared all quizzes, results and user data")

    def storage_usage(self) -> StorageUsage:
        return StorageUsage(
            quizzes_kb=round(self._store.size_in_bytes(QUIZZES_KEY) / 1024, 2),
            results_kb=round(self._store.size_in_bytes(RESULTS_KEY) / 1024, 2),
        )

    def _results_for_known_quizzes(self) -> list[QuizResult]:
        known = {quiz.id for quiz in self._quizzes.list_quizzes()}
        return [r for r in self._results.all_results() if r.quiz_id in known]
