"""User — the identity a cached snapshot belongs to."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

LOGGED_OUT_USER_KEY = "flag_cache.logged_out_user"


@dataclass(frozen=True)
class User:
    """The subject gates and configs were evaluated for.

    Attributes:
        user_id: Stable identifier, or ``None`` for a logged-out user.
                 An empty string is a real identifier and gets its own
                 cache slot.
        email:   Optional email address forwarded to the fetcher.
        custom:  Arbitrary extra attributes forwarded to the fetcher.
    """

    user_id: str | None = None
    email: str | None = None
    custom: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def cache_key(self) -> str:
        """Key this user's snapshot is cached under."""
        if self.user_id is None:
            return LOGGED_OUT_USER_KEY
        return self.user_id
