"""Per-question countdown used while an attempt is in progress."""

from __future__ import annotations

import time
from typing import Callable


class TimerController:
    """Counts down whole one-second ticks from the moment it is armed.

    Every ``arm`` or ``cancel`` starts a new generation. ``poll`` reports the
    generation whose countdown reached zero, once; consumers compare it with
    the current generation so an expiry that outlived its question is ignored.
    A controller without a limit never arms and never fires.
    """

    def __init__(self, limit_seconds: int | None, clock: Callable[[], float] = time.monotonic) -> None:
        if limit_seconds is not None and limit_seconds <= 0:
            raise ValueError("Time limit must be a positive integer.")
        self._limit_seconds = limit_seconds
        self._clock = clock
        self._armed_at: float | None = None
        self._generation: int = 0
        self._fired: bool = False

    @property
    def is_enabled(self) -> bool:
        return self._limit_seconds is not None

    @property
    def limit_seconds(self) -> int | None:
        return self._limit_seconds

    @property
    def generation(self) -> int:
        return self._generation

    def is_armed(self) -> bool:
        return self._armed_at is not None

    def arm(self, at: float | None = None) -> int:
        """Reset the countdown to the full limit and return the new generation.

        ``at`` backdates the start, so a question that follows an expired one
        begins at that deadline rather than whenever the expiry was noticed.
        """
        self._generation += 1
        self._fired = False
        if not self.is_enabled:
            self._armed_at = None
        else:
            self._armed_at = self._clock() if at is None else at
        return self._generation

    def cancel(self) -> None:
        self._generation += 1
        self._armed_at = None
        self._fired = False

    def deadline(self) -> float | None:
        """Clock reading at which the current countdown reaches zero."""
        if self._limit_seconds is None or self._armed_at is None:
            return None
        return self._armed_at + self._limit_seconds

    def remaining_seconds(self) -> int | None:
        if self._limit_seconds is None or self._armed_at is None:
            return None
        elapsed_ticks = int(self._clock() - self._armed_at)
        return max(0, self._limit_seconds - elapsed_ticks)

    def poll(self) -> int | None:
        """Return the armed generation the first time its countdown hits zero."""
        if self._fired or self.remaining_seconds() != 0:
            return None
        self._fired = True
        return self._generation
