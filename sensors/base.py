"""Base classes for motion level sources.

A level source delivers 0/1 readings from a digital sensor to its
subscribers, asynchronously, in emission order. It is started by the
first subscribe() and can not be restarted once released.

    LevelSource    -- subscriber bookkeeping and fan-out
    WatcherSource  -- adds a daemon thread that runs _watch() until release
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

LevelCallback = Callable[[int], None]


class LevelSource(ABC):
    """Abstract base class for all level sources.

    Subclasses may override:
        _activate()    -- called once, on the first subscribe()
        _deactivate()  -- called once, from release()

    The base class provides:
        subscribe(cb)  -- register a callback taking the new level (0 or 1)
        release()      -- stop callbacks and free resources (idempotent)
        _emit(level)   -- fan a level out to every subscriber
    """

    def __init__(self, pin: int = -1, cfg: Optional[Dict[str, Any]] = None):
        self.pin = pin
        self._cfg = cfg or {}
        self._callbacks: List[LevelCallback] = []
        self._lock = threading.Lock()
        self._active = False
        self._released = False

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def subscribe(self, callback: LevelCallback) -> None:
        """Register a level-change callback. Ignored after release()."""
        with self._lock:
            if self._released:
                logger.warning(
                    "%s: subscribe after release ignored", self.__class__.__name__
                )
                return
            self._callbacks.append(callback)
            first = not self._active
            self._active = True

        if first:
            self._activate()

    def release(self) -> None:
        """Stop delivering levels and free the sensor."""
        with self._lock:
            if self._released:
                return
            self._released = True
            self._callbacks = []
            was_active = self._active

        self._deactivate()
        logger.info(
            "%s: released pin %s%s",
            self.__class__.__name__, self.pin, "" if was_active else " (never started)",
        )

    @property
    def released(self) -> bool:
        with self._lock:
            return self._released

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._callbacks)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def _activate(self) -> None:
        pass

    def _deactivate(self) -> None:
        pass

    def _emit(self, level: int) -> None:
        with self._lock:
            if self._released:
                return
            callbacks = list(self._callbacks)

        for cb in callbacks:
            try:
                cb(level)
            except Exception as exc:
                logger.error(
                    "%s: subscriber error on level %s - %s",
                    self.__class__.__name__, level, exc,
                )

    def __repr__(self) -> str:
        status = "released" if self._released else ("live" if self._active else "idle")
        return f"<{self.__class__.__name__} pin={self.pin} {status}>"


class WatcherSource(LevelSource):
    """Level source backed by a background watcher thread.

    Subclasses implement _watch(), which must return promptly once
    self._stop is set.
    """

    JOIN_TIMEOUT: float = 2.0  # seconds to wait for the watcher on release

    def __init__(self, pin: int = -1, cfg: Optional[Dict[str, Any]] = None):
        super().__init__(pin, cfg)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @abstractmethod
    def _watch(self) -> None:
        """Produce levels via self._emit() until self._stop is set."""
        ...

    def _activate(self) -> None:
        self._thread = threading.Thread(
            target=self._run, daemon=True,
            name=f"{self.__class__.__name__.lower()}-{self.pin}",
        )
        self._thread.start()
        logger.info("%s: watching pin %s", self.__class__.__name__, self.pin)

    def _run(self) -> None:
        try:
            self._watch()
        except Exception as exc:
            logger.error(
                "%s: watcher on pin %s stopped - %s",
                self.__class__.__name__, self.pin, exc,
            )

    def _deactivate(self) -> None:
        self._stop.set()
        thread = self._thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(self.JOIN_TIMEOUT)
