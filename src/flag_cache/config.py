"""Settings for building a value store.

Settings are plain pydantic models so they can be loaded from JSON, a
YAML file or a runner request without any custom parsing.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError

from flag_cache.exceptions import ConfigError
from flag_cache.storage import InMemoryStorage, SQLiteStorage, Storage

DEFAULT_STORAGE_KEY = "flag_cache.value_store"
DEFAULT_MAX_USER_CACHE_COUNT = 5


class StorageSettings(BaseModel):
    """Durable storage selection.

    Attributes:
        type: Storage type ("memory" or "sqlite")
        path: Path to SQLite database file (for sqlite type)
    """

    type: Literal["memory", "sqlite"] = "memory"
    path: str = ""


class CacheSettings(BaseModel):
    """Value store configuration.

    Attributes:
        storage: Backend that holds the persisted snapshot
        max_user_cache_count: Number of users whose snapshots are retained
        storage_key: Key the whole snapshot is persisted under
    """

    storage: StorageSettings = Field(default_factory=StorageSettings)
    max_user_cache_count: int = Field(default=DEFAULT_MAX_USER_CACHE_COUNT, ge=1)
    storage_key: str = Field(default=DEFAULT_STORAGE_KEY, min_length=1)


def load_settings(data: Mapping[str, Any]) -> CacheSettings:
    """Validate *data* into :class:`CacheSettings`.

    Raises:
        ConfigError: If *data* does not describe valid settings.
    """
    try:
        return CacheSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid cache settings: {exc}") from exc


def create_storage(settings: StorageSettings) -> Storage:
    """Create the storage backend described by *settings*."""
    if settings.type == "sqlite":
        if not settings.path:
            raise ConfigError("SQLite storage requires 'path' configuration")
        return SQLiteStorage(settings.path)
    return InMemoryStorage()
