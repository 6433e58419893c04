"""Business logic for managing quiz state shared between UI and API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from threading import Lock
import time
from typing import Callable
from uuid import uuid4

from quizo.constants.network_constants import SHARE_PATH_TEMPLATE
from quizo.constants.quiz_constants import ATTEMPT_IDLE_TTL_SECONDS, FINISHED_ATTEMPT_RETENTION_SECONDS
from quizo.core.models import Difficulty, Question, Quiz, QuizResult, SubscriptionType, UserAccount
from quizo.core.services.account_service import AccountService, QuotaDecision
from quizo.core.services.admin_service import (
    ActivityEntry,
    AdminOverview,
    AdminService,
    StorageUsage,
)
from quizo.core.services.analytics import QuizAnalytics, QuizSummary, build_quiz_analytics, summarize_quiz
from quizo.core.services.attempt_runner import AttemptPhase, AttemptRunner
from quizo.core.services.quiz_repository import QuizNotFoundError, QuizRepository
from quizo.core.services.result_repository import ResultRepository
from quizo.core.services.scoreboard import ScoreboardRow
from quizo.core.storage import JsonFileStore

logger = logging.getLogger(__name__)


class AttemptNotFoundError(LookupError):
    """Raised when an attempt id is unknown or was abandoned."""


@dataclass(slots=True)
class _LiveAttempt:
    runner: AttemptRunner
    last_seen: float


class QuizManager:
    """Facade for quiz services: Quizzes, Results, Accounts, Admin, and running Attempts.

    The current username is always passed in by the caller; the manager keeps
    no notion of who is logged in.
    """

    def __init__(
        self,
        store: JsonFileStore | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._lock = Lock()
        self._clock = clock
        self._wall_clock = wall_clock or (lambda: datetime.now(timezone.utc))

        # Services
        self._store = store or JsonFileStore()
        self._quizzes = QuizRepository(self._store)
        self._results = ResultRepository(self._store)
        self._accounts = AccountService(self._store)
        self._admin = AdminService(self._store, self._quizzes, self._results, self._accounts)

        self._attempts: dict[str, _LiveAttempt] = {}

    # --- Accounts ---

    def login(self, username: str) -> UserAccount:
        with self._lock:
            return self._accounts.login(username)

    def get_account(self, username: str) -> UserAccount | None:
        with self._lock:
            return self._accounts.get_account(username)

    def check_quota(self, username: str) -> QuotaDecision:
        with self._lock:
            return self._accounts.check_quota(username, self._wall_clock())

    def apply_subscription(self, username: str, plan: SubscriptionType) -> UserAccount:
        with self._lock:
            return self._accounts.apply_subscription(username, plan, self._wall_clock())

    # --- Quiz authoring ---

    def create_quiz(
        self,
        username: str,
        title: str,
        description: str,
        difficulty: Difficulty,
        questions: list[Question],
    ) -> Quiz:
        with self._lock:
            now = self._wall_clock()
            decision = self._accounts.check_quota(username, now)
            if not decision.allowed:
                raise PermissionError(decision.reason or "Quiz creation is not allowed.")
            quiz = self._quizzes.create_quiz(username, title, description, difficulty, questions, now)
            self._accounts.record_quiz_created(username, now)
            return quiz

    def update_quiz(
        self,
        username: str,
        quiz_id: str,
        *,
        title: str | None = None,
        description: str | None = None,
        questions: list[Question] | None = None,
    ) -> Quiz:
        with self._lock:
            return self._quizzes.update_quiz(
                username, quiz_id, title=title, description=description, questions=questions
            )

    def set_quiz_published(self, username: str, quiz_id: str, published: bool) -> Quiz:
        with self._lock:
            return self._quizzes.set_published(username, quiz_id, published)

    def delete_quiz(self, username: str, quiz_id: str) -> None:
        with self._lock:
            self._quizzes.delete_quiz(username, quiz_id)
            self._drop_attempts_for_quiz(quiz_id)

    def get_quiz(self, quiz_id: str) -> Quiz:
        with self._lock:
            return self._quizzes.get_quiz(quiz_id)

    def get_published_quiz(self, quiz_id: str) -> Quiz:
        with self._lock:
            return self._quizzes.get_published_quiz(quiz_id)

    def get_published_quizzes(self) -> list[Quiz]:
        with self._lock:
            return self._quizzes.published_quizzes()

    def get_quizzes_for_creator(self, username: str) -> list[QuizSummary]:
        with self._lock:
            return [
                summarize_quiz(quiz, self._results.results_for_quiz(quiz.id))
                for quiz in self._quizzes.quizzes_by_creator(username)
            ]

    def build_share_link(self, quiz_id: str, base_url: str) -> str:
        with self._lock:
            quiz = self._quizzes.get_quiz(quiz_id)
        if not quiz.is_published:
            raise RuntimeError("Publish the quiz before sharing it.")
        return base_url.rstrip("/") + SHARE_PATH_TEMPLATE.format(quiz_id=quiz.id)

    # --- Creator analytics ---

    def get_quiz_analytics(self, username: str, quiz_id: str) -> QuizAnalytics:
        with self._lock:
            quiz = self._quizzes.get_quiz(quiz_id)
            if quiz.created_by != username:
                raise PermissionError("Only the quiz creator can view its analytics.")
            return build_quiz_analytics(quiz, self._results.results_for_quiz(quiz_id))

    # --- Attempts ---

    def begin_attempt(self, quiz_id: str) -> tuple[str, AttemptRunner]:
        """Create a fresh attempt at a published quiz. Nothing is stored until it finishes."""
        with self._lock:
            self._prune_attempts()
            quiz = self._quizzes.get_published_quiz(quiz_id)
            runner = AttemptRunner(
                quiz,
                on_finished=self._store_result,
                clock=self._clock,
                wall_clock=self._wall_clock,
            )
            attempt_id = uuid4().hex
            self._attempts[attempt_id] = _LiveAttempt(runner, last_seen=self._clock())
            return attempt_id, runner

    def _store_result(self, result: QuizResult) -> bool:
        with self._lock:
            try:
                self._quizzes.get_quiz(result.quiz_id)
            except QuizNotFoundError:
                logger.warning("Dropping result %s: quiz %s no longer exists", result.id, result.quiz_id)
                return False
            return self._results.append(result)

    def get_attempt(self, attempt_id: str) -> AttemptRunner:
        with self._lock:
            self._prune_attempts()
            live = self._attempts.get(attempt_id)
            if live is not None:
                live.last_seen = self._clock()
        if live is None:
            raise AttemptNotFoundError(f"Attempt {attempt_id} does not exist.")
        return live.runner

    def discard_attempt(self, attempt_id: str) -> None:
        with self._lock:
            self._attempts.pop(attempt_id, None)

    def prune_attempts(self) -> int:
        """Forget idle and long-finished attempts; returns how many were dropped."""
        with self._lock:
            return self._prune_attempts()

    def live_attempt_count(self) -> int:
        with self._lock:
            return len(self._attempts)

    def _prune_attempts(self) -> int:
        # Runner phases are read without pumping: pumping may finish an
        # attempt, and storing its result needs this manager's lock.
        now = self._clock()
        stale = [
            attempt_id
            for attempt_id, live in self._attempts.items()
            if self._is_stale(live, now)
        ]
        for attempt_id in stale:
            del self._attempts[attempt_id]
        if stale:
            logger.info("Pruned %d stale attempts", len(stale))
        return len(stale)

    @staticmethod
    def _is_stale(live: _LiveAttempt, now: float) -> bool:
        runner = live.runner
        if runner.phase is AttemptPhase.FINISHED and runner.finished_at is not None:
            return now - runner.finished_at >= FINISHED_ATTEMPT_RETENTION_SECONDS
        return now - live.last_seen >= ATTEMPT_IDLE_TTL_SECONDS

    def _drop_attempts_for_quiz(self, quiz_id: str) -> None:
        for attempt_id in [key for key, live in self._attempts.items() if live.runner.quiz.id == quiz_id]:
            del self._attempts[attempt_id]

    def get_results_for_quiz(self, quiz_id: str) -> list[QuizResult]:
        with self._lock:
            return self._results.results_for_quiz(quiz_id)

    # --- Admin Delegation ---

    def authenticate_admin(self, password: str) -> bool:
        return self._admin.authenticate(password)

    def get_admin_overview(self) -> AdminOverview:
        with self._lock:
            return self._admin.overview(self._wall_clock())

    def get_recent_activity(self) -> list[ActivityEntry]:
        with self._lock:
            return self._admin.recent_activity()

    def get_all_quiz_summaries(self) -> list[QuizSummary]:
        with self._lock:
            return self._admin.quiz_summaries()

    def get_leaderboard(self) -> list[ScoreboardRow]:
        with self._lock:
            return self._admin.leaderboard()

    def admin_delete_quiz(self, quiz_id: str) -> int:
        with self._lock:
            removed = self._admin.delete_quiz(quiz_id)
            self._drop_attempts_for_quiz(quiz_id)
            return removed

    def clear_all_data(self) -> None:
        with self._lock:
            self._admin.clear_all_data()
            self._attempts.clear()

    def get_storage_usage(self) -> StorageUsage:
        with self._lock:
            return self._admin.storage_usage()
