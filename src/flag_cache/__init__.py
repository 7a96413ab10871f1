"""flag_cache — a bounded, persisted, per-user cache of flag evaluations.

Snapshots of gate, config and layer results are kept for a handful of
users, looked up by hashed or plain name, and written through to a
durable key-value store on every update.
"""

from flag_cache.config import CacheSettings, StorageSettings, load_settings
from flag_cache.exceptions import ConfigError, FlagCacheError, StorageError
from flag_cache.result import ConfigResult, ExposureCallback, GateResult, LayerResult
from flag_cache.store import Fetcher, ValueStore
from flag_cache.user import LOGGED_OUT_USER_KEY, User
from flag_cache.values import ValueSet

__all__ = [
    "LOGGED_OUT_USER_KEY",
    "CacheSettings",
    "ConfigError",
    "ConfigResult",
    "ExposureCallback",
    "Fetcher",
    "FlagCacheError",
    "GateResult",
    "LayerResult",
    "StorageError",
    "StorageSettings",
    "User",
    "ValueSet",
    "ValueStore",
    "load_settings",
]
