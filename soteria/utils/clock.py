"""
Clock abstraction for cache expiry.

All cache timestamps come from a Clock so TTL behaviour can be tested
without waiting in real time.
"""
from abc import ABC, abstractmethod
from typing import Optional
import threading
import time


class Clock(ABC):
    """Source of the current time in epoch milliseconds."""

    @abstractmethod
    def now_ms(self) -> int:
        """Get current Unix time in milliseconds."""


class SystemClock(Clock):
    """Production clock using actual system time."""

    def now_ms(self) -> int:
        return int(time.time() * 1000)


class MockClock(Clock):
    """
    Mock clock for testing.

    Time only moves when `advance` or `set_time` is called.
    """

    def __init__(self, initial_ms: Optional[int] = None):
        self._ms = initial_ms if initial_ms is not None else 1_700_000_000_000
        self._lock = threading.Lock()

    def now_ms(self) -> int:
        with self._lock:
            return self._ms

    def set_time(self, epoch_ms: int) -> None:
        """Set the current time."""
        with self._lock:
            self._ms = epoch_ms

    def advance(self, seconds: float = 0, milliseconds: int = 0, hours: float = 0) -> None:
        """
        Advance time by the specified amount.

        Args:
            seconds: Number of seconds to advance
            milliseconds: Number of milliseconds to advance
            hours: Number of hours to advance
        """
        with self._lock:
            self._ms += int(seconds * 1000) + milliseconds + int(hours * 3600 * 1000)


# Global instance
system_clock = SystemClock()
