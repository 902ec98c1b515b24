"""Key-value persistence backends.

The engine only needs ``get(key)`` and ``set(key, blob)``; blobs are
JSON-compatible Python values (lists and dicts).
"""

import copy
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from .paths import atomic_json_write, ensure_data_dir

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Port for loading and saving named blobs of structured data."""

    @abstractmethod
    def get(self, key: str):
        """Return the blob stored under ``key``, or None if absent or unreadable."""

    @abstractmethod
    def set(self, key: str, blob) -> None:
        """Persist ``blob`` under ``key``, replacing any previous value."""


class JsonFileStore(KeyValueStore):
    """Stores each key as ``<data_dir>/<key>.json``."""

    def __init__(self, data_dir: Path | None = None):
        self.data_dir = ensure_data_dir(data_dir)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def get(self, key: str):
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning("Could not read %s: %s", path, e)
            return None

    def set(self, key: str, blob) -> None:
        atomic_json_write(self.path_for(key), blob)


class MemoryStore(KeyValueStore):
    """In-memory store for tests and throwaway sessions.

    Blobs are deep-copied in both directions so callers never share
    structure with what is "persisted".
    """

    def __init__(self, initial: dict | None = None):
        self._data = copy.deepcopy(initial) if initial else {}
        self.writes = 0

    def get(self, key: str):
        if key not in self._data:
            return None
        return copy.deepcopy(self._data[key])

    def set(self, key: str, blob) -> None:
        self._data[key] = copy.deepcopy(blob)
        self.writes += 1

    def __contains__(self, key: str) -> bool:
        return key in self._data
