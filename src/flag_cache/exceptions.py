"""Custom exceptions for the flag_cache package."""

from __future__ import annotations


class FlagCacheError(Exception):
    """Base exception for all flag_cache errors."""


class StorageError(FlagCacheError):
    """Raised when a durable storage operation fails."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        msg = f"Storage error during '{operation}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class ConfigError(FlagCacheError):
    """Raised when cache settings are invalid."""
