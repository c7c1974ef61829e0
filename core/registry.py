"""Sensor source registry.

Register LevelSource types by name. The entry point reads SENSOR_SOURCE
from the configuration and instantiates the right class by looking it
up here.

Usage:
    @register_source("gpio")
    class PIRSource(LevelSource):
        ...
"""

import logging

logger = logging.getLogger(__name__)

SOURCE_REGISTRY = {}


def register_source(name):
    """Decorator to register a sensor source class by type name."""
    def decorator(cls):
        SOURCE_REGISTRY[name] = cls
        logger.debug("Registered source type: %s -> %s", name, cls.__name__)
        return cls
    return decorator


def get_source_class(name):
    """Return the registered class for ``name``, or None."""
    return SOURCE_REGISTRY.get(name)
