"""Local key-value store holding every persisted document as JSON.

The store mirrors the contract of browser local storage: values are JSON
blobs addressed by string keys, reads fall back to a default and writes never
raise. A failed write is logged and reported through the return value so the
caller can keep working with its in-memory state.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from threading import Lock
from typing import Any

logger = logging.getLogger(__name__)


class JsonFileStore:
    """Key-value store persisted as a single JSON document on disk.

    With ``path=None`` the store lives in memory only.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path.resolve() if path is not None else None
        self._lock = Lock()
        self._data: dict[str, Any] = self._load()

    @property
    def path(self) -> Path | None:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            if key not in self._data:
                return default
            # Hand out a copy so callers cannot mutate stored state in place.
            return json.loads(json.dumps(self._data[key]))

    def set(self, key: str, value: Any) -> bool:
        """Store ``value`` under ``key``. Returns False if it could not be persisted."""
        try:
            encoded = json.loads(json.dumps(value))
        except (TypeError, ValueError):
            logger.error("Error setting storage key %r: value is not JSON serializable", key)
            return False
        with self._lock:
            self._data[key] = encoded
            return self._flush()

    def remove(self, key: str) -> bool:
        with self._lock:
            if self._data.pop(key, None) is None:
                return True
            return self._flush()

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)

    def size_in_bytes(self, key: str) -> int:
        with self._lock:
            if key not in self._data:
                return 0
            return len(json.dumps(self._data[key]).encode("utf-8"))

    def _load(self) -> dict[str, Any]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.exception("Error reading storage file %s; starting empty", self._path)
            return {}
        if not isinstance(document, dict):
            logger.error("Storage file %s does not hold a JSON object; starting empty", self._path)
            return {}
        return document

    def _flush(self) -> bool:
        if self._path is None:
            return True
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            temp_path.write_text(json.dumps(self._data, indent=2), encoding="utf-8")
            temp_path.replace(self._path)
        except OSError:
            logger.exception("Error writing storage file %s", self._path)
            return False
        return True
