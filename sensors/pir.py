"""PIR (Passive Infrared) motion sensor (HC-SR501).

How it works:
  The sensor has two IR-sensitive slots. When a warm body (person, animal)
  moves across its field of view, one slot sees more IR than the other,
  creating a voltage difference that triggers the digital output HIGH.

Module features:
  - Two potentiometers: sensitivity (range) and hold-time (how long HIGH stays)
  - Jumper for single-trigger vs repeatable-trigger mode
  - Needs ~60s after power-up before its output settles (see WARMUP_MS)

Hardware: Digital output pin goes HIGH on motion. Each LOW->HIGH edge is
delivered as level 1, each HIGH->LOW edge as level 0.
"""

import logging
from typing import Any, Dict, Optional

from gpiod.line import Bias

from core.registry import register_source
from sensors.base import WatcherSource
from sensors.gpio_utils import edge_level, request_edge_line

logger = logging.getLogger(__name__)


@register_source("gpio")
class PIRSource(WatcherSource):
    """Delivers PIR level changes from a gpiod edge-event line."""

    BIAS: Bias = Bias.PULL_DOWN
    WAIT_TIMEOUT: float = 0.5  # seconds per wait so release() is responsive

    def __init__(self, pin: int, cfg: Optional[Dict[str, Any]] = None):
        super().__init__(pin, cfg)
        self._request = None
        if pin < 0:
            return

        self._request = request_edge_line(
            pin, bias=self.BIAS, debounce_ms=self._cfg.get("line_debounce_ms", 0)
        )
        if self._request:
            logger.info("PIRSource: ready on GPIO %d", pin)
        else:
            logger.warning("PIRSource: GPIO %d unavailable, no motion will be reported", pin)

    @property
    def available(self) -> bool:
        return self._request is not None

    def _watch(self) -> None:
        request = self._request
        if request is None:
            return

        while not self._stop.is_set():
            try:
                if not request.wait_edge_events(self.WAIT_TIMEOUT):
                    continue
                events = request.read_edge_events()
            except Exception as exc:
                logger.error("PIRSource: GPIO %d read failed - %s", self.pin, exc)
                return

            for event in events:
                self._emit(edge_level(event))

    def _deactivate(self) -> None:
        super()._deactivate()
        if self._request:
            self._request.release()
            self._request = None
