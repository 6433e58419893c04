"""State machine driving one participant through a published quiz.

Every operation, including timer expiries, is turned into an event and
applied through a single queue under a lock. A timer expiry carries the
generation it was armed for; once the attempt has moved past that question
the event is a no-op, so a late tick can never record a second answer.
An expiry is recorded at its deadline and the next question is timed from
there, so a runner pumped late catches up on every deadline it missed.

Navigation model: the *frontier* is the first question without an answer
record and the one the timer is armed for. ``go_back`` only moves the view
below the frontier. Answers already recorded are final; ``submit`` on an
earlier question just moves the view forward again.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, auto
import logging
from threading import Lock
import time
from typing import Callable

from quizo.core.models import AnswerRecord, Question, Quiz, QuizResult
from quizo.core.services.answer_recorder import record_answer
from quizo.core.services.result_aggregator import aggregate_result
from quizo.core.services.timer_controller import TimerController

logger = logging.getLogger(__name__)


class AttemptValidationError(ValueError):
    """Raised when participant input is rejected (empty name, missing or invalid selection)."""


class AttemptStateError(RuntimeError):
    """Raised when an operation is not allowed in the attempt's current phase."""


class AttemptPhase(Enum):
    NOT_STARTED = auto()
    IN_PROGRESS = auto()
    FINISHED = auto()


@dataclass(frozen=True, slots=True)
class AttemptState:
    """Snapshot handed to the presentation layer."""

    phase: AttemptPhase
    question_count: int
    participant_name: str | None = None
    question_index: int | None = None
    question: Question | None = None
    time_remaining_seconds: int | None = None
    staged_selection: int | None = None
    answered_count: int = 0
    recorded_answer: AnswerRecord | None = None
    result: QuizResult | None = None

    @property
    def is_reviewing(self) -> bool:
        return self.recorded_answer is not None

    @property
    def is_last_question(self) -> bool:
        return self.question_index is not None and self.question_index == self.question_count - 1


@dataclass(frozen=True, slots=True)
class _Start:
    participant_name: str


@dataclass(frozen=True, slots=True)
class _Select:
    option_index: int


@dataclass(frozen=True, slots=True)
class _Submit:
    pass


@dataclass(frozen=True, slots=True)
class _GoBack:
    pass


@dataclass(frozen=True, slots=True)
class _TimerExpired:
    generation: int
    deadline: float | None = None


_Event = _Start | _Select | _Submit | _GoBack | _TimerExpired


class AttemptRunner:
    """Runs a single attempt from ``NOT_STARTED`` to ``FINISHED``."""

    def __init__(
        self,
        quiz: Quiz,
        *,
        on_finished: Callable[[QuizResult], object] | None = None,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not quiz.questions:
            raise ValueError("Quiz must contain at least one question.")
        self._quiz = quiz
        self._on_finished = on_finished
        self._clock = clock
        self._wall_clock = wall_clock or (lambda: datetime.now(timezone.utc))
        self._timer = TimerController(quiz.time_limit_seconds, clock=clock)
        self._lock = Lock()
        self._events: deque[_Event] = deque()

        self._phase = AttemptPhase.NOT_STARTED
        self._participant_name: str | None = None
        self._view_index: int = 0
        self._staged_selection: int | None = None
        self._answers: list[AnswerRecord] = []
        self._question_started_at: float | None = None
        self._result: QuizResult | None = None
        self._finished_at: float | None = None

    @property
    def quiz(self) -> Quiz:
        return self._quiz

    @property
    def phase(self) -> AttemptPhase:
        """Current phase without applying due expiries."""
        return self._phase

    @property
    def finished_at(self) -> float | None:
        return self._finished_at

    # --- Public operations ---

    def start(self, participant_name: str) -> AttemptState:
        return self._dispatch(_Start(participant_name))

    def select(self, option_index: int) -> AttemptState:
        return self._dispatch(_Select(option_index))

    def submit(self) -> AttemptState:
        return self._dispatch(_Submit())

    def go_back(self) -> AttemptState:
        return self._dispatch(_GoBack())

    def pump(self) -> AttemptState:
        """Apply every timer expiry that is due and return the current state."""
        with self._lock:
            self._apply_due_expiries()
            return self._snapshot()

    @property
    def state(self) -> AttemptState:
        return self.pump()

    # --- Event queue ---

    def _dispatch(self, event: _Event) -> AttemptState:
        with self._lock:
            # Deadlines that already passed are applied before the caller's event.
            self._apply_due_expiries()
            self._events.append(event)
            self._drain()
            return self._snapshot()

    def _apply_due_expiries(self) -> None:
        # Each expiry arms the next question at its deadline, which may be due as well.
        while self._phase is AttemptPhase.IN_PROGRESS:
            deadline = self._timer.deadline()
            generation = self._timer.poll()
            if generation is None:
                return
            self._events.append(_TimerExpired(generation, deadline))
            self._drain()

    def _drain(self) -> None:
        while self._events:
            event = self._events.popleft()
            try:
                self._apply(event)
            except (AttemptValidationError, AttemptStateError):
                self._events.clear()
                raise

    def _apply(self, event: _Event) -> None:
        if isinstance(event, _Start):
            self._handle_start(event.participant_name)
        elif isinstance(event, _Select):
            self._handle_select(event.option_index)
        elif isinstance(event, _Submit):
            self._handle_submit()
        elif isinstance(event, _GoBack):
            self._handle_go_back()
        elif isinstance(event, _TimerExpired):
            self._handle_timer_expired(event.generation, event.deadline)

    # --- Transitions ---

    def _handle_start(self, participant_name: str) -> None:
        if self._phase is not AttemptPhase.NOT_STARTED:
            raise AttemptStateError("Attempt has already been started.")
        cleaned = (participant_name or "").strip()
        if not cleaned:
            raise AttemptValidationError("Please enter your name to start the quiz.")
        self._participant_name = cleaned
        self._phase = AttemptPhase.IN_PROGRESS
        self._view_index = 0
        self._begin_question()

    def _handle_select(self, option_index: int) -> None:
        self._require_in_progress()
        if self._is_reviewing():
            raise AttemptStateError("This question has already been answered.")
        question = self._quiz.questions[self._view_index]
        if isinstance(option_index, bool) or not isinstance(option_index, int):
            raise AttemptValidationError("Option index must be an integer.")
        if not 0 <= option_index < len(question.options):
            raise AttemptValidationError(
                f"Option index must be between 0 and {len(question.options) - 1}."
            )
        self._staged_selection = option_index

    def _handle_submit(self) -> None:
        self._require_in_progress()
        if self._is_reviewing():
            self._view_index += 1
            self._staged_selection = None
            return
        if self._staged_selection is None:
            raise AttemptValidationError("Choose an option before proceeding.")
        self._record_frontier(self._staged_selection)

    def _handle_go_back(self) -> None:
        self._require_in_progress()
        if self._view_index == 0:
            raise AttemptStateError("Already at the first question.")
        self._view_index -= 1
        self._staged_selection = None

    def _handle_timer_expired(self, generation: int, deadline: float | None) -> None:
        if self._phase is not AttemptPhase.IN_PROGRESS or generation != self._timer.generation:
            logger.debug("Ignoring stale timer expiry for generation %s", generation)
            return
        selection = None if self._is_reviewing() else self._staged_selection
        self._record_frontier(selection, at=deadline)

    # --- Helpers ---

    def _require_in_progress(self) -> None:
        if self._phase is AttemptPhase.NOT_STARTED:
            raise AttemptStateError("Attempt has not been started.")
        if self._phase is AttemptPhase.FINISHED:
            raise AttemptStateError("Attempt is already finished.")

    def _frontier(self) -> int:
        return len(self._answers)

    def _is_reviewing(self) -> bool:
        return self._view_index < self._frontier()

    def _begin_question(self, at: float | None = None) -> None:
        self._staged_selection = None
        self._question_started_at = self._clock() if at is None else at
        self._timer.arm(self._question_started_at)

    def _record_frontier(self, selection: int | None, at: float | None = None) -> None:
        """Record the frontier question as answered at ``at`` (default: now)."""
        recorded_at = self._clock() if at is None else at
        question = self._quiz.questions[self._frontier()]
        started_at = self._question_started_at if self._question_started_at is not None else recorded_at
        elapsed_ms = round((recorded_at - started_at) * 1000)
        self._answers.append(record_answer(question, selection, elapsed_ms))

        if self._frontier() == len(self._quiz.questions):
            self._finish()
            return
        self._view_index = self._frontier()
        self._begin_question(at)

    def _finish(self) -> None:
        self._timer.cancel()
        self._finished_at = self._clock()
        self._staged_selection = None
        self._result = aggregate_result(
            self._quiz,
            self._participant_name or "",
            self._answers,
            completed_at=self._wall_clock(),
        )
        self._phase = AttemptPhase.FINISHED
        logger.info(
            "Attempt finished for quiz %s by %s: %s/%s",
            self._quiz.id,
            self._participant_name,
            self._result.score,
            self._result.total_questions,
        )
        if self._on_finished is not None:
            self._on_finished(self._result)

    def _snapshot(self) -> AttemptState:
        count = len(self._quiz.questions)
        if self._phase is AttemptPhase.NOT_STARTED:
            return AttemptState(phase=self._phase, question_count=count)
        if self._phase is AttemptPhase.FINISHED:
            return AttemptState(
                phase=self._phase,
                question_count=count,
                participant_name=self._participant_name,
                answered_count=len(self._answers),
                result=self._result,
            )
        recorded = self._answers[self._view_index] if self._is_reviewing() else None
        return AttemptState(
            phase=self._phase,
            question_count=count,
            participant_name=self._participant_name,
            question_index=self._view_index,
            question=self._quiz.questions[self._view_index],
            time_remaining_seconds=self._timer.remaining_seconds(),
            staged_selection=self._staged_selection,
            answered_count=len(self._answers),
            recorded_answer=recorded,
        )
