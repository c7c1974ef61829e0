"""Core of Arrival Alert: the motion decision engine and its plumbing.

Architecture:
    LevelSource  -- sensors/, delivers 0/1 level changes on its own thread
    MotionEngine -- gates rising edges (warmup, debounce, schedule, cooldown)
    Notifier     -- notify/, sends the arrival SMS off the gating path
    Clock        -- injectable millisecond clock, ManualClock for tests
"""

from core.clock import Clock, ManualClock, SystemClock
from core.engine import EngineState, MotionEngine, MotionEvent
from core.errors import (
    ArrivalAlertError,
    ConfigError,
    EngineError,
    NotificationError,
)
from core.policy import ActiveWindow, GatingPolicy
from core.registry import SOURCE_REGISTRY, get_source_class, register_source

__all__ = [
    "Clock",
    "ManualClock",
    "SystemClock",
    "EngineState",
    "MotionEngine",
    "MotionEvent",
    "ArrivalAlertError",
    "ConfigError",
    "EngineError",
    "NotificationError",
    "ActiveWindow",
    "GatingPolicy",
    "SOURCE_REGISTRY",
    "get_source_class",
    "register_source",
]
