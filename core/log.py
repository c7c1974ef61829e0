"""Logging setup.

Every gate decision and lifecycle transition is logged as one record.
In JSON mode each record is a single line:

    {"level": "info", "msg": "Arrival alert sent", "ts": "2024-01-15T10:30:00.000Z",
     "logger": "core.engine", "observed_at": 1705314600000}

Fields passed through ``extra=`` are copied onto the JSON object.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

# Attributes every LogRecord carries; anything else came from extra=
_RESERVED = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}

TEXT_FORMAT = "%(asctime)s  %(levelname)-7s  %(name)s  %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per line with at least level, msg and ts."""

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_obj: Dict[str, Any] = {
            "level": record.levelname.lower(),
            "msg": record.getMessage(),
            "ts": ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z",
            "logger": record.name,
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED and key not in log_obj:
                log_obj[key] = value

        return json.dumps(log_obj, default=str, ensure_ascii=False)


def setup_logging(level_name: str = "INFO", fmt: str = "json") -> None:
    """Configure the root logger.

    Args:
        level_name: DEBUG, INFO, WARNING or ERROR
        fmt:        "json" for structured lines, "text" for the console layout
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    if fmt == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%H:%M:%S"))
    else:
        handler.setFormatter(JSONFormatter())

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)
