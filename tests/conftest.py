"""Shared fixtures: a hand-driven sensor, a manual clock and fake notifiers.

The repo root is put on sys.path so tests import core.*, sensors.*,
notify.* and the top-level modules the same way main.py does.
"""

import sys
import threading
from concurrent.futures import Executor, Future
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from core.clock import ManualClock  # noqa: E402
from core.engine import MotionEngine  # noqa: E402
from core.errors import NotificationError  # noqa: E402
from core.policy import GatingPolicy  # noqa: E402
from notify.base import Notifier  # noqa: E402
from sensors.manual import ManualSource  # noqa: E402


class InlineExecutor(Executor):
    """Runs submitted work immediately on the calling thread."""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future


class RecordingNotifier(Notifier):
    """Remembers every message; fails while ``fail`` is set."""

    def __init__(self):
        self.sent = []
        self.attempts = 0
        self.fail = False

    def send_arrival(self, message):
        self.attempts += 1
        if self.fail:
            raise NotificationError("provider unavailable")
        self.sent.append(message)


class BlockingNotifier(RecordingNotifier):
    """Holds every send until release() is called."""

    def __init__(self):
        super().__init__()
        self.started = threading.Event()
        self._gate = threading.Event()

    def release(self):
        self._gate.set()

    def send_arrival(self, message):
        self.started.set()
        self._gate.wait(5)
        super().send_arrival(message)


@pytest.fixture
def clock():
    return ManualClock(0)


@pytest.fixture
def source():
    return ManualSource(pin=17)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def policy():
    return GatingPolicy(warmup_ms=60000, debounce_ms=300, cooldown_ms=60000)


@pytest.fixture
def engine(source, notifier, policy, clock):
    eng = MotionEngine(source, notifier, policy, clock=clock, executor=InlineExecutor())
    yield eng
    eng.stop()
