#!/usr/bin/env python3
"""Arrival Alert - Entry point.

Watches a PIR sensor and sends one SMS when someone arrives home.

Usage:
    python3 main.py                       # settings from env / .env / arrival.yaml
    python3 main.py --config home.yaml    # explicit YAML settings file
    python3 main.py --simulate            # random motion instead of GPIO
    python3 main.py --log-level DEBUG     # show warmup/debounce decisions

SIGINT / SIGTERM stop the motion engine and the health server and exit 0.
A configuration error exits 1 before anything starts.
"""

__version__ = "1.0.0"

import argparse
import logging
import signal
import sys
import threading

from config import load_config
from core.engine import MotionEngine
from core.errors import ConfigError
from core.log import setup_logging
from core.registry import get_source_class
from health_app import HealthServer
from notify import create_notifier

# Import sensors to trigger @register_source decorators
import sensors  # noqa: F401

logger = logging.getLogger(__name__)

# Seconds to let an in-flight SMS finish before the transport is closed
SEND_DRAIN_TIMEOUT = 5.0


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Arrival Alert - PIR motion to SMS notifier",
    )
    parser.add_argument(
        "--config", default=None,
        help="Path to a YAML settings file (default: arrival.yaml if present)",
    )
    parser.add_argument(
        "--simulate", action="store_true",
        help="Use the simulated sensor instead of GPIO",
    )
    parser.add_argument(
        "--log-level", default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override LOG_LEVEL",
    )
    parser.add_argument(
        "--version", action="version",
        version=f"Arrival Alert {__version__}",
    )
    return parser.parse_args(argv)


def build_engine(config, simulate=False):
    """Wire source, notifier and policy into a MotionEngine."""
    source_name = "simulated" if simulate else config.sensor_source
    source_cls = get_source_class(source_name)
    if source_cls is None:
        raise ConfigError(f"Sensor source {source_name!r} is not available on this machine")

    source = source_cls(config.gpio_pin)
    notifier = create_notifier(config)
    return MotionEngine(source, notifier, config.policy())


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level or "INFO")
    logger.info("Starting PIR Motion Detection System", extra={"version": __version__})

    try:
        config = load_config(args.config)
        setup_logging(args.log_level or config.log_level, config.log_format)
        engine = build_engine(config, simulate=args.simulate)
    except ConfigError as exc:
        logger.error("Failed to start application", extra={"error": str(exc)})
        return 1

    health = HealthServer(config.health_port)
    shutdown = threading.Event()

    def request_shutdown(signum, _frame):
        logger.info("Shutting down gracefully", extra={"signal": signal.Signals(signum).name})
        shutdown.set()

    signal.signal(signal.SIGINT, request_shutdown)
    signal.signal(signal.SIGTERM, request_shutdown)

    engine.start()
    health.start()
    logger.info("PIR Motion Detection System started successfully", extra=config.summary())

    try:
        while not shutdown.wait(1.0):
            pass
    finally:
        engine.stop()
        health.stop()
        engine.wait_for_dispatch(timeout=SEND_DRAIN_TIMEOUT)
        engine.notifier.close()
        logger.info("Shutdown complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
