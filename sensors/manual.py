"""Hand-driven level source for tests and scripted scenarios.

Levels are delivered synchronously on the caller's thread, so a test can
inject an edge and assert on the engine immediately afterwards.
"""

from sensors.base import LevelSource


class ManualSource(LevelSource):
    """Level source whose edges are injected by calling emit()."""

    def emit(self, level: int) -> None:
        """Deliver ``level`` to every subscriber. Dropped after release()."""
        self._emit(1 if level else 0)

    def rising(self) -> None:
        self.emit(1)

    def falling(self) -> None:
        self.emit(0)
