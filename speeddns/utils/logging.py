"""
Logging configuration for speeddns.

Centralizes logging setup so the CLI, coordinator, invoker and reconciler stay
consistent. Records go to the console (human-readable or JSON) and, when a
log sink is supplied, are also appended to the shared `app.log` file as
`[YYYY-MM-DD HH:MM:SS] message` lines.

Usage:
    from speeddns.utils.logging import configure_logging, get_logger

    configure_logging(level="INFO", json_logs=False, sink=sink)
    log = get_logger(__name__)
    log.info("[RUN START]", extra={"domains": 2})
"""

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any, Dict, Optional

from speeddns.utils.log_sink import TIMESTAMP_FORMAT, LogSink

# Attributes present on every LogRecord; anything else arrived via `extra=`.
_STANDARD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "extra"}


def _json_formatter(record: logging.LogRecord) -> str:
    """Render a log record as JSON string."""
    payload: Dict[str, Any] = {
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    for key, value in vars(record).items():
        if key not in _STANDARD_ATTRS and not key.startswith("_"):
            payload[key] = value
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    if record.stack_info:
        payload["stack_info"] = record.stack_info
    if hasattr(record, "extra") and isinstance(record.extra, dict):
        payload.update(record.extra)
    return json.dumps(payload, default=str)


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


class LogSinkHandler(logging.Handler):
    """Forward formatted records into a LogSink."""

    def __init__(self, sink: LogSink, level: int | str = logging.NOTSET) -> None:
        super().__init__(level)
        self.sink = sink

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.sink.write(self.format(record) + "\n")
        except Exception:  # noqa: BLE001 - logging must never raise into callers
            self.handleError(record)


def configure_logging(
    level: str = "INFO",
    json_logs: bool = False,
    sink: Optional[LogSink] = None,
) -> None:
    """
    Configure root logging.

    Parameters
    ----------
    level : str
        Logging level name (e.g., "DEBUG", "INFO", "WARNING").
    json_logs : bool
        Whether to emit console logs as JSON. If False, uses a concise human formatter.
    sink : LogSink | None
        Shared log file to mirror records into.
    """
    formatter_name = "json" if json_logs else "console"
    handlers: Dict[str, Dict[str, Any]] = {
        "default": {
            "class": "logging.StreamHandler",
            "formatter": formatter_name,
            "level": level,
        }
    }
    if sink is not None:
        handlers["sink"] = {
            "()": LogSinkHandler,
            "sink": sink,
            "formatter": "sink",
            "level": level,
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": TIMESTAMP_FORMAT,
                },
                "sink": {
                    "format": "[%(asctime)s] %(message)s",
                    "datefmt": TIMESTAMP_FORMAT,
                },
                "json": {
                    "()": JsonFormatter,
                },
            },
            "handlers": handlers,
            "root": {
                "handlers": list(handlers),
                "level": level,
            },
        }
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger with the given name. If name is None, returns the root logger.
    """
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "JsonFormatter", "LogSinkHandler"]
