"""Durable storage backends for the persisted value cache."""

from flag_cache.storage.base import Storage
from flag_cache.storage.memory import InMemoryStorage
from flag_cache.storage.sqlite import SQLiteStorage

__all__ = ["InMemoryStorage", "SQLiteStorage", "Storage"]
