"""Clock abstraction so snapshot timestamps can be controlled in tests."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    """Protocol for getting the current time.  Inject a fake in tests."""

    def now(self) -> datetime: ...


class SystemClock:
    """Default clock backed by the real system time."""

    def now(self) -> datetime:
        return datetime.now(UTC)


def epoch_seconds(clock: Clock) -> float:
    """Return *clock*'s current time as seconds since the Unix epoch."""
    return clock.now().timestamp()
