"""Motion level sources for Arrival Alert.

Each source inherits from LevelSource and delivers 0/1 level changes to
its subscribers:
    subscribe(cb)  -- register a callback; the first one starts the source
    release()      -- stop callbacks and free the hardware

Importing this package registers the built-in source types:
    "gpio"       -- PIRSource, gpiod edge events on a BCM pin
    "simulated"  -- SimulatedSource, random toggles for development

The gpio source depends on gpiod, which is only available on the Pi.
"""

import logging

from sensors.base import LevelSource, WatcherSource
from sensors.manual import ManualSource
from sensors.simulated import SimulatedSource

logger = logging.getLogger(__name__)

__all__ = ["LevelSource", "WatcherSource", "ManualSource", "SimulatedSource"]

try:
    from sensors.pir import PIRSource
    __all__.append("PIRSource")
except ImportError as exc:
    logger.warning("PIRSource unavailable: %s", exc)
