"""Storage protocol — single-slot key-value persistence for cache blobs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Storage(ABC):
    """Abstract base for all durable storage backends.

    A backend persists JSON-compatible blobs (nested dicts, lists, strings,
    numbers, booleans, ``None``) keyed by a string.  The value cache uses a
    single fixed key for its whole snapshot.  Backends raise
    :class:`~flag_cache.exceptions.StorageError` when the underlying medium
    fails.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the stored blob, or ``None`` if not found."""
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Create or overwrite a blob."""
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a blob.  No-op if the key does not exist."""
        ...
