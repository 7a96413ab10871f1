"""InMemoryStorage — dict-backed storage for development and testing."""

from __future__ import annotations

import copy
from typing import Any

from flag_cache.storage.base import Storage


class InMemoryStorage(Storage):
    """In-memory storage.  Data is lost on process exit.

    Blobs are deep-copied on the way in and out so callers never share
    state with what is "on disk".
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str) -> Any | None:
        return copy.deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._data
