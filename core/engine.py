"""Motion decision engine.

Turns raw PIR level changes into at most one arrival notification per
qualifying motion. Every rising edge runs through the gates in order:

    warmup -> debounce -> (record motion) -> schedule -> cooldown -> pending

and, if it survives, a notification is dispatched on a worker thread so
the sensor's delivery thread is never blocked by the SMS round-trip.

Threading:
  - Sensor callbacks may arrive on any thread. The whole gate sequence
    and every state mutation run under one lock, so two near-simultaneous
    edges can never both pass debounce or cooldown.
  - last_alert_at is written only from the dispatch future's completion
    callback, and only when the send succeeded. While a send is in
    flight further qualifying edges are dropped as "alert pending".
  - stop() never waits for an in-flight send.
"""

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import datetime
from functools import partial
from typing import NamedTuple, Optional

from core.clock import Clock, SystemClock
from core.errors import EngineError
from core.policy import GatingPolicy

logger = logging.getLogger(__name__)

ARRIVAL_MESSAGE = "\U0001f3e0 Someone just arrived home! ({time})"


class MotionEvent(NamedTuple):
    """A single level change, stamped when the engine received it."""

    rising_edge: bool
    observed_at: int


class EngineState:
    """Mutable timing state owned by one MotionEngine."""

    __slots__ = ("started_at", "last_motion_at", "last_alert_at", "running")

    def __init__(self):
        self.started_at: Optional[int] = None
        self.last_motion_at: Optional[int] = None
        self.last_alert_at: Optional[int] = None
        self.running = False

    def copy(self) -> "EngineState":
        clone = EngineState()
        clone.started_at = self.started_at
        clone.last_motion_at = self.last_motion_at
        clone.last_alert_at = self.last_alert_at
        clone.running = self.running
        return clone

    def __repr__(self) -> str:
        return (
            f"<EngineState started_at={self.started_at} "
            f"last_motion_at={self.last_motion_at} "
            f"last_alert_at={self.last_alert_at} running={self.running}>"
        )


class MotionEngine:
    """Gates PIR rising edges and dispatches arrival notifications.

    Args:
        source:   LevelSource delivering 0/1 level changes
        notifier: Notifier with send_arrival(message)
        policy:   GatingPolicy (warmup, debounce, cooldown, schedule)
        clock:    callable returning epoch milliseconds
        executor: where sends run; a private single-worker pool if omitted
    """

    def __init__(
        self,
        source,
        notifier,
        policy: GatingPolicy,
        clock: Optional[Clock] = None,
        executor: Optional[Executor] = None,
    ):
        self._source = source
        self._notifier = notifier
        self._policy = policy
        self._clock = clock or SystemClock()
        self._executor = executor
        self._owns_executor = executor is None

        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._state = EngineState()
        self._pending: Optional[Future] = None
        self._stopped = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Subscribe to the sensor. No-op if already running."""
        with self._lock:
            if self._state.running:
                return
            if self._stopped:
                raise EngineError("Motion engine cannot be restarted after stop()")
            self._state.started_at = self._clock()
            self._state.running = True
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="arrival-notify"
                )

        self._source.subscribe(self._on_level)
        logger.info(
            "Motion service started",
            extra={
                "warmup_ms": self._policy.warmup_ms,
                "debounce_ms": self._policy.debounce_ms,
                "cooldown_ms": self._policy.cooldown_ms,
            },
        )

    def stop(self) -> None:
        """Release the sensor. Safe to call repeatedly and from any thread."""
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            self._state.running = False
            executor = self._executor if self._owns_executor else None

        self._source.release()
        if executor is not None:
            executor.shutdown(wait=False)
        logger.info("Motion service stopped")

    @property
    def running(self) -> bool:
        with self._lock:
            return self._state.running

    @property
    def policy(self) -> GatingPolicy:
        return self._policy

    @property
    def source(self):
        return self._source

    @property
    def notifier(self):
        return self._notifier

    @property
    def state(self) -> EngineState:
        """Snapshot of the current timing state."""
        with self._lock:
            return self._state.copy()

    def wait_for_dispatch(self, timeout: Optional[float] = None) -> bool:
        """Block until no notification is in flight.

        Returns False if the timeout expired first.
        """
        with self._idle:
            return self._idle.wait_for(lambda: self._pending is None, timeout)

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    def _on_level(self, level: int) -> None:
        self.handle(MotionEvent(rising_edge=level == 1, observed_at=self._clock()))

    def handle(self, event: MotionEvent) -> None:
        """Run one event through the gates. Falling edges are ignored."""
        if not event.rising_edge:
            return

        with self._lock:
            if not self._state.running:
                logger.debug("Motion ignored, engine stopped")
                return
            if not self._passes_gates(event.observed_at):
                return
            future = self._executor.submit(
                self._notifier.send_arrival, self._format_message(event.observed_at)
            )
            self._pending = future

        # Outside the lock: an already-finished future runs the callback inline
        future.add_done_callback(partial(self._on_dispatch_done, event.observed_at))

    def _passes_gates(self, now: int) -> bool:
        """Evaluate the gates for a rising edge at ``now``. Caller holds the lock."""
        state = self._state
        policy = self._policy

        if now - state.started_at < policy.warmup_ms:
            logger.debug("Motion ignored during warmup", extra={"observed_at": now})
            return False

        if (
            state.last_motion_at is not None
            and now - state.last_motion_at < policy.debounce_ms
        ):
            logger.debug("Motion debounced", extra={"observed_at": now})
            return False

        state.last_motion_at = now

        if not policy.in_active_hours(now):
            logger.info(
                "Motion detected outside active hours", extra={"observed_at": now}
            )
            return False

        if (
            state.last_alert_at is not None
            and now - state.last_alert_at < policy.cooldown_ms
        ):
            logger.info("Motion detected during cooldown", extra={"observed_at": now})
            return False

        if self._pending is not None:
            logger.info(
                "Motion detected while alert pending", extra={"observed_at": now}
            )
            return False

        return True

    def _on_dispatch_done(self, observed_at: int, future: Future) -> None:
        if future.cancelled():
            error: Optional[BaseException] = EngineError("notification cancelled")
        else:
            error = future.exception()

        with self._idle:
            if self._pending is future:
                self._pending = None
            if error is None:
                last = self._state.last_alert_at
                if last is None or observed_at > last:
                    self._state.last_alert_at = observed_at
            self._idle.notify_all()

        if error is None:
            logger.info("Arrival alert sent", extra={"observed_at": observed_at})
        else:
            logger.error(
                "Failed to send arrival alert: %s",
                error,
                extra={"observed_at": observed_at, "error": str(error)},
            )

    @staticmethod
    def _format_message(timestamp_ms: int) -> str:
        local = datetime.fromtimestamp(timestamp_ms / 1000.0)
        return ARRIVAL_MESSAGE.format(time=local.strftime("%H:%M:%S"))
