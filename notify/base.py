"""Notifier interface.

A notifier delivers one human-readable arrival message. send_arrival()
returns on success and raises NotificationError on failure; it never
retries on its own.
"""

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class Notifier(ABC):
    """Delivers arrival messages."""

    @abstractmethod
    def send_arrival(self, message: str) -> None:
        """Send ``message``. Raises NotificationError on failure."""
        ...

    def close(self) -> None:
        """Release transport resources. Override if needed."""
        pass


class ConsoleNotifier(Notifier):
    """Logs the message instead of sending it. Used in development."""

    def send_arrival(self, message: str) -> None:
        logger.info("Arrival notification (console): %s", message, extra={"body": message})
