"""Exception types for Arrival Alert."""


class ArrivalAlertError(Exception):
    """Base class for all errors raised by this project."""


class ConfigError(ArrivalAlertError):
    """Configuration is missing or invalid. Fatal at startup."""


class EngineError(ArrivalAlertError):
    """The motion engine was driven through an unsupported lifecycle."""


class NotificationError(ArrivalAlertError):
    """A notification could not be delivered."""
