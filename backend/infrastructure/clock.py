"""
Clock abstraction.
Lets tests control TTL expiry of the fake key/value store.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):

    @abstractmethod
    def now(self) -> datetime:
        """Current UTC datetime."""
        pass

    def now_unix(self) -> int:
        return int(self.now().timestamp())


class SystemClock(Clock):

    def now(self) -> datetime:
        return datetime.now(tz=timezone.utc)


class FakeClock(Clock):
    """Manually driven clock for tests."""

    def __init__(self, initial: datetime = None):
        self._current = initial or datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._current

    def advance_seconds(self, seconds: int) -> None:
        self._current += timedelta(seconds=seconds)
