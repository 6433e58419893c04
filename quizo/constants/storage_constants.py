"""Keys and locations used by the local key-value store."""

from pathlib import Path

DEFAULT_STORAGE_PATH: Path = Path.home() / ".quizo" / "storage.json"

QUIZZES_KEY: str = "quizo_quizzes"
RESULTS_KEY: str = "quizo_quiz_results"
USER_KEY_PREFIX: str = "quizo_user_"
