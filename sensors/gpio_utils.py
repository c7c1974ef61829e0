"""GPIO utilities for the PIR watcher.

Raspberry Pi GPIO pins are accessed through the gpiod library, which talks
to the kernel's GPIO character device (/dev/gpiochipN).

Each Pi model has one or more GPIO chips:
  Pi 3B/3B+/4  ->  /dev/gpiochip0  (BCM2835/BCM2711, 54 lines)
  Pi 5         ->  /dev/gpiochip4  (RP1, 54 lines)

We auto-detect the correct chip so the code works across Pi models.
The PIR line is requested with edge detection on both edges, so the
kernel timestamps and queues every transition for us instead of us
polling the level.
"""

import logging
from datetime import timedelta

import gpiod
from gpiod.edge_event import EdgeEvent
from gpiod.line import Bias, Direction, Edge

logger = logging.getLogger(__name__)

CONSUMER = "arrival-alert"

# Cached chip path - detected once at first use
_chip_path = None


def get_chip_path():
    """Find the main Broadcom GPIO chip (the one with 54 lines)."""
    global _chip_path
    if _chip_path is not None:
        return _chip_path

    # Try common paths; pick the first chip with >= 28 GPIO lines
    for path in ["/dev/gpiochip0", "/dev/gpiochip4"]:
        try:
            with gpiod.Chip(path) as chip:
                if chip.get_info().num_lines >= 28:
                    _chip_path = path
                    return path
        except (OSError, PermissionError):
            continue

    # Fallback
    _chip_path = "/dev/gpiochip0"
    return _chip_path


def request_edge_line(pin, bias=Bias.PULL_DOWN, debounce_ms=0):
    """Request a single GPIO line as input with both-edge detection.

    Args:
        pin:         BCM GPIO number (e.g. 17)
        bias:        Internal pull resistor setting
        debounce_ms: Kernel debounce period, 0 to disable

    Returns:
        gpiod.LineRequest on success, None on failure.
    """
    try:
        return gpiod.request_lines(
            get_chip_path(),
            consumer=CONSUMER,
            config={
                pin: gpiod.LineSettings(
                    direction=Direction.INPUT,
                    edge_detection=Edge.BOTH,
                    bias=bias,
                    debounce_period=timedelta(milliseconds=debounce_ms),
                ),
            },
        )
    except Exception as exc:
        logger.warning("GPIO %s: edge request failed - %s", pin, exc)
        return None


def edge_level(event):
    """Map a gpiod edge event to the level the line moved to."""
    return 1 if event.event_type == EdgeEvent.Type.RISING_EDGE else 0
