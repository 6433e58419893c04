"""Quiz rules shared across UI and core layers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DifficultyRules:
    """Question cap and per-question time limit for one difficulty level."""

    max_questions: int
    time_limit_seconds: int | None
    label: str
    blurb: str


DIFFICULTY_RULES: dict[str, DifficultyRules] = {
    "easy": DifficultyRules(10, None, "Easy", "Perfect for beginners"),
    "medium": DifficultyRules(15, 60, "Medium", "Balanced challenge"),
    "speed": DifficultyRules(5, 30, "Speed", "Quick fire rounds"),
    "hard": DifficultyRules(20, 45, "Hard", "For quiz masters"),
}

CATEGORIES: tuple[str, ...] = (
    "Science",
    "History",
    "Geography",
    "Sports",
    "Movies",
    "Music",
    "Literature",
    "Technology",
    "Food",
    "Art",
    "Politics",
    "Nature",
)
DEFAULT_CATEGORY: str = "General"
FALLBACK_CATEGORY_LABEL: str = "Random"

OPTION_COUNT: int = 4
OPTION_LETTERS: tuple[str, ...] = ("A", "B", "C", "D")

FREE_DAILY_QUIZ_LIMIT: int = 3
DAILY_LIMIT_REASON: str = "Daily limit reached. Upgrade to create more quizzes!"
SUBSCRIPTION_DAYS: dict[str, int] = {"weekly": 7, "monthly": 30}

RECENT_RESULTS_LIMIT: int = 10
RECENT_ACTIVITY_LIMIT: int = 5
LEADERBOARD_LIMIT: int = 10

TIMER_POLL_INTERVAL_MS: int = 250
TIME_LIMIT_WARNING_WINDOW_SECONDS: int = 5

# Live attempts held by the quiz manager
ATTEMPT_IDLE_TTL_SECONDS: int = 30 * 60
FINISHED_ATTEMPT_RETENTION_SECONDS: int = 5 * 60
