"""
Logging setup for the dashboard service.

Console output is human-readable by default and JSON lines when ``LOG_JSON``
is set (or ``json_output=True``); an optional log file always gets JSON.
Anything passed through ``extra={...}`` or ``log_with_context`` ends up as
top-level JSON keys, and the id of the API request being served is stamped
on every record logged while handling it.

Usage:
    from teamdash.core.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Sprints fetched", extra={"board_id": "42", "sprint_count": 7})
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

CONSOLE_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
CONSOLE_DATE_FORMAT = "%H:%M:%S"

# Loggers of libraries that log every outbound request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

# Set by RequestIDMiddleware for the duration of one API request
current_request_id: ContextVar[str | None] = ContextVar("current_request_id", default=None)

_STANDARD_RECORD_KEYS = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {
    "message",
    "asctime",
    "extra_fields",
}


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, location, then extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        request_id = current_request_id.get()
        if request_id:
            payload["request_id"] = request_id

        payload.update(getattr(record, "extra_fields", {}))
        payload.update({k: v for k, v in record.__dict__.items() if k not in _STANDARD_RECORD_KEYS})

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ContextFormatter(logging.Formatter):
    """
    Console formatter.

    Appends the request id, when there is one, and colours the level name on a
    terminal.
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[2m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str = CONSOLE_FORMAT, datefmt: str = CONSOLE_DATE_FORMAT, use_color: bool | None = None):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = sys.stdout.isatty() if use_color is None else use_color

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        request_id = current_request_id.get()
        if request_id:
            line = f"{line} (request {request_id[:8]})"
        color = self.LEVEL_COLORS.get(record.levelno) if self.use_color else None
        return f"{color}{line}{self.RESET}" if color else line


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


def _handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str | None = None,
    log_file: Path | None = None,
    json_output: bool | None = None,
) -> None:
    """
    Replace the root logger's handlers with the dashboard's.

    Args:
        level: Level name; ``LOG_LEVEL`` or INFO when omitted
        log_file: Also write JSON lines to this file (parent dirs created)
        json_output: JSON on the console; ``LOG_JSON`` when omitted

    Example:
        setup_logging(level="DEBUG")
        setup_logging(log_file=Path("logs/dashboard.log"), json_output=True)
    """
    log_level = logging.getLevelName((level or os.getenv("LOG_LEVEL") or "INFO").upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO
    if json_output is None:
        json_output = _env_flag("LOG_JSON")

    handlers = [
        _handler(
            logging.StreamHandler(sys.stdout),
            log_level,
            JSONFormatter() if json_output else ContextFormatter(),
        )
    ]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(_handler(logging.FileHandler(log_file, encoding="utf-8"), log_level, JSONFormatter()))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(log_level)
    for handler in handlers:
        root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: str, message: str, **context: Any) -> None:
    """
    Log with keyword fields that become top-level JSON keys.

    Example:
        log_with_context(logger, "info", "Overview served", filter="mobile", developers=12)
    """
    logger.log(logging.getLevelName(level.upper()), message, extra={"extra_fields": context})
