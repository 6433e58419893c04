"""Append-only collection of finished quiz results."""

from __future__ import annotations

import logging

from quizo.constants.storage_constants import RESULTS_KEY
from quizo.core.models import QuizResult
from quizo.core.serialization import result_from_dict, result_to_dict
from quizo.core.storage import JsonFileStore

logger = logging.getLogger(__name__)


class ResultRepository:
    """Stores results as one flat list; lookups scan it by quiz id."""

    def __init__(self, store: JsonFileStore) -> None:
        self._store = store

    def append(self, result: QuizResult) -> bool:
        """Persist ``result``. Returns False when the store could not write it."""
        documents = self._store.get(RESULTS_KEY, [])
        documents.append(result_to_dict(result))
        saved = self._store.set(RESULTS_KEY, documents)
        if saved:
            logger.info("Saved result %s for quiz %s", result.id, result.quiz_id)
        else:
            logger.error("Error saving quiz result %s for quiz %s", result.id, result.quiz_id)
        return saved

    def all_results(self) -> list[QuizResult]:
        return [result_from_dict(item) for item in self._store.get(RESULTS_KEY, [])]

    def results_for_quiz(self, quiz_id: str) -> list[QuizResult]:
        return [result for result in self.all_results() if result.quiz_id == quiz_id]

    def delete_for_quiz(self, quiz_id: str) -> int:
        documents = self._store.get(RESULTS_KEY, [])
        remaining = [item for item in documents if item.get("quiz_id") != quiz_id]
        self._store.set(RESULTS_KEY, remaining)
        return len(documents) - len(remaining)

    def clear(self) -> None:
        self._store.remove(RESULTS_KEY)
