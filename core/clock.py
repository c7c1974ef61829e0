"""Clocks for the motion engine.

A clock is any zero-argument callable returning the current wall-clock
time as integer milliseconds since the epoch. Production code uses
SystemClock; tests use ManualClock so warmup, debounce and cooldown can
be driven deterministically.
"""

import threading
import time
from typing import Callable

Clock = Callable[[], int]


class SystemClock:
    """Wall-clock time in milliseconds."""

    def __call__(self) -> int:
        return int(time.time() * 1000)


class ManualClock:
    """A clock that only moves when told to."""

    def __init__(self, now_ms: int = 0):
        self._now = int(now_ms)
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            return self._now

    def set(self, now_ms: int) -> None:
        with self._lock:
            self._now = int(now_ms)

    def advance(self, delta_ms: int) -> int:
        """Move the clock forward and return the new time."""
        with self._lock:
            self._now += int(delta_ms)
            return self._now

    def __repr__(self) -> str:
        return f"<ManualClock now={self._now}>"
