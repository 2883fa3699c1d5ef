# anonymization/logging_config.py

"""Logging setup: JSON lines for machines, a short text form for terminals."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, TextIO

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RESERVED = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Returns the fields a caller attached with ``extra={...}``."""
    return {k: v for k, v in vars(record).items() if k not in _RESERVED}


class StructuredFormatter(logging.Formatter):
    """Renders each record as one JSON object.

    Context passed through ``extra`` (pattern names, counts, timings) is
    merged into the top level. Values that are not JSON types are rendered
    with ``str``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        for key, value in extra_fields(record).items():
            payload.setdefault(key, value)

        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """Plain one-line format with ``extra`` context appended as key=value."""

    def __init__(self) -> None:
        super().__init__(TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = extra_fields(record)
        if context:
            line += " " + " ".join(f"{k}={v}" for k, v in context.items())
        return line


def configure_logging(
    level: str = "INFO", stream: TextIO = sys.stdout, json_output: bool = True
) -> None:
    """Replaces the root handlers with a single stream handler.

    Args:
        level: Logging level name; unknown names fall back to INFO
        stream: Destination of the log lines
        json_output: Emit JSON lines; plain text when False
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream)
    handler.setLevel(log_level)
    handler.setFormatter(StructuredFormatter() if json_output else TextFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(log_level)
    root.addHandler(handler)

    logging.getLogger(__name__).debug(
        "Logging configured",
        extra={"log_level": level, "json_output": json_output},
    )
