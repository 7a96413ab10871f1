"""ValueStore — bounded, persisted, per-user cache of value snapshots."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from flag_cache.config import (
    DEFAULT_MAX_USER_CACHE_COUNT,
    DEFAULT_STORAGE_KEY,
    CacheSettings,
    create_storage,
)
from flag_cache.exceptions import StorageError
from flag_cache.storage.memory import InMemoryStorage
from flag_cache.values import ValueSet

if TYPE_CHECKING:
    from flag_cache._internal.clock import Clock
    from flag_cache.result import ConfigResult, GateResult, LayerResult
    from flag_cache.storage.base import Storage
    from flag_cache.user import User

logger = structlog.get_logger(__name__)


class Fetcher(Protocol):
    """Produces the latest server payload for a user.  Lives outside the cache."""

    def __call__(self, user: User) -> Mapping[str, Any]: ...


class ValueStore:
    """Maps users to their most recent :class:`ValueSet`.

    At most ``max_user_cache_count`` users are retained.  When a ``set``
    pushes the cache over that bound, the snapshots with the oldest
    ``creation_time`` are evicted.  Every ``set`` rewrites the whole cache
    to storage as ``{user_key: raw_payload}`` and every load rebuilds the
    lookup tables from those payloads.

    The store is not thread-safe.  Callers sharing one instance across
    threads must serialize access with a single lock.

    Parameters:
        storage:              Durable backend.  Defaults to
                              :class:`InMemoryStorage` when omitted.
        max_user_cache_count: Number of users to retain.
        storage_key:          Key the whole cache is persisted under.
        clock:                Injectable clock, passed to snapshots built
                              on load and by :meth:`refresh`.
    """

    def __init__(
        self,
        storage: Storage | None = None,
        *,
        max_user_cache_count: int = DEFAULT_MAX_USER_CACHE_COUNT,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Clock | None = None,
    ) -> None:
        if max_user_cache_count < 1:
            raise ValueError("max_user_cache_count must be at least 1")
        self._storage: Storage = storage or InMemoryStorage()
        self._max_user_cache_count = max_user_cache_count
        self._storage_key = storage_key
        self._clock = clock
        self._cache: dict[str, ValueSet] = {}
        self.load()

    @classmethod
    def from_settings(cls, settings: CacheSettings, *, clock: Clock | None = None) -> ValueStore:
        return cls(
            create_storage(settings.storage),
            max_user_cache_count=settings.max_user_cache_count,
            storage_key=settings.storage_key,
            clock=clock,
        )

    # ── persistence ──────────────────────────────────────────

    def load(self) -> None:
        """Replace the in-memory cache with what storage holds.

        Entries that are not payload mappings are skipped; the rest still
        load.  A storage failure leaves the cache empty.
        """
        try:
            blob = self._storage.get(self._storage_key)
        except StorageError as exc:
            logger.error("value_store.load_failed", key=self._storage_key, error=str(exc))
            self._cache = {}
            return

        cache: dict[str, ValueSet] = {}
        if blob is not None and not isinstance(blob, Mapping):
            logger.warning(
                "value_store.blob_skipped",
                key=self._storage_key,
                blob_type=type(blob).__name__,
            )
        elif blob is not None:
            for user_key, raw_data in blob.items():
                if not isinstance(user_key, str) or not isinstance(raw_data, Mapping):
                    logger.warning(
                        "value_store.entry_skipped",
                        user_key=user_key,
                        entry_type=type(raw_data).__name__,
                    )
                    continue
                cache[user_key] = ValueSet(raw_data, clock=self._clock)

        self._cache = cache
        self._evict_overflow()
        logger.debug("value_store.loaded", key=self._storage_key, users=len(self._cache))

    def save(self) -> None:
        """Write the full cache to storage.  Failures are logged, not raised."""
        blob = {user_key: values.to_dict() for user_key, values in self._cache.items()}
        try:
            self._storage.set(self._storage_key, blob)
        except StorageError as exc:
            logger.error("value_store.save_failed", key=self._storage_key, error=str(exc))

    def clear(self) -> None:
        """Forget every cached user, both in memory and in storage."""
        self._cache.clear()
        self.delete_persisted(self._storage, self._storage_key)

    @staticmethod
    def delete_persisted(storage: Storage, storage_key: str = DEFAULT_STORAGE_KEY) -> None:
        """Remove the persisted cache without touching live stores.

        Stores already built over *storage* keep serving their in-memory
        snapshots until they are reloaded or cleared.
        """
        try:
            storage.remove(storage_key)
        except StorageError as exc:
            logger.error("value_store.clear_failed", key=storage_key, error=str(exc))
            return
        logger.info("value_store.cleared", key=storage_key)

    # ── lookups ──────────────────────────────────────────────

    def get(self, user: User) -> ValueSet | None:
        return self._cache.get(user.cache_key)

    def check_gate(self, user: User, gate_name: str) -> GateResult | None:
        values = self.get(user)
        return values.check_gate(gate_name) if values is not None else None

    def get_config(self, user: User, config_name: str) -> ConfigResult | None:
        values = self.get(user)
        return values.get_config(config_name) if values is not None else None

    def get_layer(self, user: User, layer_name: str) -> LayerResult | None:
        values = self.get(user)
        return values.get_layer(layer_name) if values is not None else None

    # ── updates ──────────────────────────────────────────────

    def set(self, user: User, values: ValueSet) -> None:
        """Replace *user*'s snapshot, evict the oldest over capacity, then save."""
        self._cache[user.cache_key] = values
        self._evict_overflow()
        self.save()

    def refresh(self, user: User, fetcher: Fetcher) -> ValueSet:
        """Fetch a fresh payload for *user* and cache it.

        Errors raised by *fetcher* propagate and leave the cache untouched.
        """
        values = ValueSet(fetcher(user), clock=self._clock)
        self.set(user, values)
        return values

    def _evict_overflow(self) -> None:
        while len(self._cache) > self._max_user_cache_count:
            # min() keeps the first of equally old entries
            oldest = min(self._cache, key=lambda key: self._cache[key].creation_time)
            evicted = self._cache.pop(oldest)
            logger.info(
                "value_store.evicted",
                user_key=oldest,
                creation_time=evicted.creation_time,
            )

    # ── introspection ────────────────────────────────────────

    @property
    def storage(self) -> Storage:
        return self._storage

    @property
    def max_user_cache_count(self) -> int:
        return self._max_user_cache_count

    def user_keys(self) -> list[str]:
        """Return the cached user keys in insertion order."""
        return list(self._cache)

    def __len__(self) -> int:
        return len(self._cache)
