"""Arrival Alert - Configuration

Settings come from three layers, later ones winning:
  1. DEFAULTS below
  2. an optional YAML file (arrival.yaml, or --config PATH); keys may be
     written in either case, e.g. ``cooldown_ms: 120000``
  3. environment variables (a .env file is loaded first outside production)

Timing values are integer milliseconds. The PIR pin uses BCM numbering:
  BCM 17 = Physical Pin 11  (PIR output, default)

Production (APP_ENV=production) refuses to start without all four
Twilio settings.
"""

import logging
import os
import re
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

from core.errors import ConfigError
from core.policy import ActiveWindow, GatingPolicy, TIME_OF_DAY_RE

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "arrival.yaml"


class _ConfigLoader(yaml.SafeLoader):
    """SafeLoader that reads an unquoted 17:30 as text, not as the
    YAML 1.1 base-60 integer 1050."""


_CLOCK_TIME_RE = re.compile(r"^[0-9]+:[0-5]?[0-9]$")
_ConfigLoader.yaml_implicit_resolvers = {
    first: list(resolvers)
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
for _digit in "0123456789":
    _ConfigLoader.yaml_implicit_resolvers.setdefault(_digit, []).insert(
        0, ("tag:yaml.org,2002:str", _CLOCK_TIME_RE)
    )

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
DEFAULTS = {
    # Twilio (required in production)
    "TWILIO_ACCOUNT_SID": "",
    "TWILIO_AUTH_TOKEN": "",
    "FROM_NUMBER": "",
    "TO_NUMBER": "",

    # Sensor & timing
    "GPIO_PIN": 17,             # BCM 17 = Physical Pin 11
    "SENSOR_SOURCE": None,      # "gpio" in production, "simulated" otherwise
    "COOLDOWN_MS": 60000,       # min spacing between two sent alerts
    "WARMUP_MS": 60000,         # HC-SR501 needs ~60s to settle after power-up
    "DEBOUNCE_MS": 300,         # min spacing between two accepted motions

    # Schedule (optional, both or neither)
    "ACTIVE_FROM": None,
    "ACTIVE_TO": None,

    # Camera & photo cleanup (parsed, not acted on)
    "CAMERA_ENABLED": True,
    "PHOTO_CLEANUP_ENABLED": True,

    # Process
    "HEALTH_PORT": 3000,
    "APP_ENV": "development",
    "LOG_LEVEL": "INFO",
    "LOG_FORMAT": "json",
}

REQUIRED_IN_PRODUCTION = ["TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN", "FROM_NUMBER", "TO_NUMBER"]
SENSOR_SOURCES = ("gpio", "simulated")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMATS = ("json", "text")


class Config:
    """Validated, read-only settings for one process run."""

    def __init__(self, values: Dict[str, Any]):
        self.twilio_account_sid: str = values["TWILIO_ACCOUNT_SID"]
        self.twilio_auth_token: str = values["TWILIO_AUTH_TOKEN"]
        self.from_number: str = values["FROM_NUMBER"]
        self.to_number: str = values["TO_NUMBER"]
        self.gpio_pin: int = values["GPIO_PIN"]
        self.sensor_source: str = values["SENSOR_SOURCE"]
        self.cooldown_ms: int = values["COOLDOWN_MS"]
        self.warmup_ms: int = values["WARMUP_MS"]
        self.debounce_ms: int = values["DEBOUNCE_MS"]
        self.active_from: Optional[str] = values["ACTIVE_FROM"]
        self.active_to: Optional[str] = values["ACTIVE_TO"]
        self.camera_enabled: bool = values["CAMERA_ENABLED"]
        self.photo_cleanup_enabled: bool = values["PHOTO_CLEANUP_ENABLED"]
        self.health_port: int = values["HEALTH_PORT"]
        self.app_env: str = values["APP_ENV"]
        self.log_level: str = values["LOG_LEVEL"]
        self.log_format: str = values["LOG_FORMAT"]

    @property
    def production(self) -> bool:
        return self.app_env == "production"

    @property
    def has_twilio_credentials(self) -> bool:
        return all((
            self.twilio_account_sid, self.twilio_auth_token,
            self.from_number, self.to_number,
        ))

    def policy(self) -> GatingPolicy:
        window = None
        if self.active_from and self.active_to:
            window = ActiveWindow(self.active_from, self.active_to)
        return GatingPolicy(
            warmup_ms=self.warmup_ms,
            debounce_ms=self.debounce_ms,
            cooldown_ms=self.cooldown_ms,
            active_window=window,
        )

    def summary(self) -> Dict[str, Any]:
        """Loggable view of the settings, without secrets."""
        return {
            "app_env": self.app_env,
            "gpio_pin": self.gpio_pin,
            "sensor_source": self.sensor_source,
            "cooldown_ms": self.cooldown_ms,
            "warmup_ms": self.warmup_ms,
            "debounce_ms": self.debounce_ms,
            "active_from": self.active_from,
            "active_to": self.active_to,
            "camera_enabled": self.camera_enabled,
            "photo_cleanup_enabled": self.photo_cleanup_enabled,
            "health_port": self.health_port,
        }


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def load_config(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """Load, merge and validate configuration.

    Args:
        path:    YAML file; DEFAULT_CONFIG_FILE is used if present and
                 path is None. A missing explicit path is an error.
        environ: variables to read instead of os.environ (no .env loading)

    Raises:
        ConfigError: on any missing or invalid setting
    """
    if environ is None:
        if os.environ.get("APP_ENV", DEFAULTS["APP_ENV"]) != "production":
            load_dotenv(find_dotenv(usecwd=True), override=False)
        environ = os.environ

    raw: Dict[str, Any] = dict(DEFAULTS)
    raw.update(_read_yaml(path))
    for key in DEFAULTS:
        value = environ.get(key)
        if value is not None and value != "":
            raw[key] = value

    return Config(_validate(raw))


def _read_yaml(path: Optional[str]) -> Dict[str, Any]:
    if path is None:
        if not os.path.exists(DEFAULT_CONFIG_FILE):
            return {}
        path = DEFAULT_CONFIG_FILE

    try:
        with open(path) as f:
            data = yaml.load(f, Loader=_ConfigLoader) or {}
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    values = {}
    for key, value in data.items():
        name = str(key).upper()
        if name not in DEFAULTS:
            logger.warning("Ignoring unknown config key %r in %s", key, path)
            continue
        if value is not None:
            values[name] = value
    return values


def _validate(raw: Dict[str, Any]) -> Dict[str, Any]:
    values = dict(raw)

    values["APP_ENV"] = str(raw["APP_ENV"]).strip() or "development"
    for key in REQUIRED_IN_PRODUCTION:
        values[key] = str(raw[key] or "").strip()
    if values["APP_ENV"] == "production":
        for key in REQUIRED_IN_PRODUCTION:
            if not values[key]:
                raise ConfigError(f"Missing required environment variable: {key}")

    values["GPIO_PIN"] = _to_int("GPIO_PIN", raw["GPIO_PIN"])
    for key in ("COOLDOWN_MS", "WARMUP_MS", "DEBOUNCE_MS"):
        values[key] = _to_int(key, raw[key], minimum=0)
    values["HEALTH_PORT"] = _to_int("HEALTH_PORT", raw["HEALTH_PORT"], minimum=0)
    if values["HEALTH_PORT"] > 65535:
        raise ConfigError(f"HEALTH_PORT must be at most 65535, got {values['HEALTH_PORT']}")

    active_from = _optional_str(raw["ACTIVE_FROM"])
    active_to = _optional_str(raw["ACTIVE_TO"])
    if bool(active_from) != bool(active_to):
        raise ConfigError("ACTIVE_FROM and ACTIVE_TO must be set together")
    for key, value in (("ACTIVE_FROM", active_from), ("ACTIVE_TO", active_to)):
        if value and not TIME_OF_DAY_RE.match(value):
            raise ConfigError(f"{key} must be HH:MM, got {value!r}")
    if active_from and active_from > active_to:
        raise ConfigError(
            f"Active window {active_from}-{active_to} wraps past midnight; "
            "only same-day windows are supported"
        )
    values["ACTIVE_FROM"] = active_from
    values["ACTIVE_TO"] = active_to

    values["CAMERA_ENABLED"] = _to_flag(raw["CAMERA_ENABLED"])
    values["PHOTO_CLEANUP_ENABLED"] = _to_flag(raw["PHOTO_CLEANUP_ENABLED"])

    source = raw["SENSOR_SOURCE"]
    if source is None:
        source = "gpio" if values["APP_ENV"] == "production" else "simulated"
    source = str(source).strip().lower()
    if source not in SENSOR_SOURCES:
        raise ConfigError(
            f"SENSOR_SOURCE must be one of {', '.join(SENSOR_SOURCES)}, got {source!r}"
        )
    values["SENSOR_SOURCE"] = source

    level = str(raw["LOG_LEVEL"]).strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {level!r}")
    values["LOG_LEVEL"] = level

    fmt = str(raw["LOG_FORMAT"]).strip().lower()
    if fmt not in LOG_FORMATS:
        raise ConfigError(f"LOG_FORMAT must be json or text, got {fmt!r}")
    values["LOG_FORMAT"] = fmt

    return values


def _to_int(key: str, value: Any, minimum: Optional[int] = None) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from None
    if minimum is not None and number < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {number}")
    return number


def _to_flag(value: Any) -> bool:
    """Flags default on; only the string "false" (or YAML false) turns them off."""
    if isinstance(value, bool):
        return value
    return str(value).strip() != "false"


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
