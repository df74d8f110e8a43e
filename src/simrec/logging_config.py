"""Logging setup for SimRec scripts and embedding hosts.

Library modules only create loggers and attach ``extra`` fields; this module
decides how records are rendered. JSON lines keep those fields as top-level
keys so dropped-ID notes and timings can be filtered by a log pipeline.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Iterable

# Attributes of a bare LogRecord; anything beyond these arrived via ``extra``
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

# Libraries that are chatty at INFO during training
NOISY_LOGGERS = ("implicit", "numba")

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    """Fields passed to a logging call through ``extra``."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS
    }


class JSONFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        log_data.update(record_extras(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # numpy scalars and paths fall back to str
        return json.dumps(log_data, default=str)


def setup_logging(
    log_level: str = "INFO",
    json_format: bool = True,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Configure the root logger for a SimRec process.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Emit JSON lines if True, plain text otherwise.
        quiet: Loggers held at WARNING regardless of ``log_level``.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(PLAIN_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level.upper())

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
