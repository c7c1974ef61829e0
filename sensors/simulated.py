"""Simulated PIR sensor for development without hardware.

Every INTERVAL seconds the simulated line flips its level with
probability SIM_PROB, so a running system sees a steady trickle of
rising and falling edges to exercise warmup, debounce and cooldown.
"""

import random
from typing import Any, Dict, Optional

from core.registry import register_source
from sensors.base import WatcherSource


@register_source("simulated")
class SimulatedSource(WatcherSource):
    INTERVAL: float = 0.1
    SIM_PROB: float = 0.1

    def __init__(self, pin: int = -1, cfg: Optional[Dict[str, Any]] = None):
        super().__init__(pin, cfg)
        self.interval = float(self._cfg.get("interval", self.INTERVAL))
        self.probability = float(self._cfg.get("probability", self.SIM_PROB))
        self._random = random.Random(self._cfg.get("seed"))
        self._level = 0

    def _watch(self) -> None:
        # Event.wait doubles as the sleep so release() interrupts it
        while not self._stop.wait(self.interval):
            if self._random.random() < self.probability:
                self._level = 1 - self._level
                self._emit(self._level)
