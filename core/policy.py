"""Gating policy for the motion engine.

The policy is the immutable set of timing rules the engine applies to
every rising edge:

  - warmup    (ms after start during which all motion is ignored)
  - debounce  (ms required between two accepted motions)
  - cooldown  (ms required between two successful alerts)
  - an optional active window of "HH:MM" times, inclusive at both ends

Windows that wrap past midnight (e.g. 22:00-06:00) are rejected. The
schedule check compares "HH:MM" strings lexicographically, which only
orders correctly inside a single day.
"""

import re
from datetime import datetime
from typing import Optional

from core.errors import ConfigError

# Zero-padded 24h time, "00:00" through "23:59"
TIME_OF_DAY_RE = re.compile(r'^(?:[01]\d|2[0-3]):[0-5]\d$')


def local_time_of_day(timestamp_ms: int) -> str:
    """Return the local wall-clock "HH:MM" for an epoch timestamp."""
    return datetime.fromtimestamp(timestamp_ms / 1000.0).strftime("%H:%M")


class ActiveWindow:
    """Inclusive, non-wrapping time-of-day range."""

    __slots__ = ("start", "end")

    def __init__(self, start: str, end: str):
        for label, value in (("start", start), ("end", end)):
            if not isinstance(value, str) or not TIME_OF_DAY_RE.match(value):
                raise ConfigError(
                    f"Active window {label} must be HH:MM, got {value!r}"
                )
        if start > end:
            raise ConfigError(
                f"Active window {start}-{end} wraps past midnight; "
                "only same-day windows are supported"
            )
        self.start = start
        self.end = end

    def contains(self, time_of_day: str) -> bool:
        return self.start <= time_of_day <= self.end

    def __eq__(self, other) -> bool:
        if not isinstance(other, ActiveWindow):
            return NotImplemented
        return (self.start, self.end) == (other.start, other.end)

    def __repr__(self) -> str:
        return f"<ActiveWindow {self.start}-{self.end}>"


class GatingPolicy:
    """Warmup/debounce/cooldown durations plus an optional schedule."""

    __slots__ = ("warmup_ms", "debounce_ms", "cooldown_ms", "active_window")

    def __init__(
        self,
        warmup_ms: int = 60000,
        debounce_ms: int = 300,
        cooldown_ms: int = 60000,
        active_window: Optional[ActiveWindow] = None,
    ):
        for name, value in (
            ("warmup_ms", warmup_ms),
            ("debounce_ms", debounce_ms),
            ("cooldown_ms", cooldown_ms),
        ):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise ConfigError(f"{name} must be non-negative, got {value}")
            object.__setattr__(self, name, value)
        object.__setattr__(self, "active_window", active_window)

    def __setattr__(self, name, value):
        raise AttributeError("GatingPolicy is immutable")

    def in_active_hours(self, timestamp_ms: int) -> bool:
        """True if no window is configured or the local time falls inside it."""
        if self.active_window is None:
            return True
        return self.active_window.contains(local_time_of_day(timestamp_ms))

    def __repr__(self) -> str:
        return (
            f"<GatingPolicy warmup={self.warmup_ms}ms debounce={self.debounce_ms}ms "
            f"cooldown={self.cooldown_ms}ms window={self.active_window}>"
        )
