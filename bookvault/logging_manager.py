"""Centralized logging configuration for BookVault."""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Iterator, Optional

PROJECT_DIR = Path(__file__).resolve().parents[1]
LOG_DIR_ENV = "BOOKVAULT_LOG_DIR"
LOG_FILENAME = "bookvault.log"
LOGGER_NAME = "bookvault"
DEFAULT_LOG_LEVEL = logging.INFO

_logger: Optional[logging.Logger] = None
_log_context: contextvars.ContextVar[Dict[str, object]] = contextvars.ContextVar(
    "bookvault_log_context", default={}
)


class JSONLogFormatter(logging.Formatter):
    """Render log records as structured JSON strings."""

    DEFAULT_FIELDS: tuple[str, ...] = (
        "correlation_id",
        "user_email",
        "event",
        "status",
    )

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for attr in self.DEFAULT_FIELDS:
            value = getattr(record, attr, None)
            if value is not None:
                payload[attr] = value

        extra_attributes = _extract_extra_attributes(record)
        if extra_attributes:
            payload["extra"] = extra_attributes

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


# Attributes every LogRecord carries; anything else was supplied via ``extra``.
_RESERVED_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
}


def _extract_extra_attributes(record: logging.LogRecord) -> Dict[str, object]:
    extra: Dict[str, object] = {}
    for key, value in record.__dict__.items():
        if key in _RESERVED_ATTRIBUTES or key in JSONLogFormatter.DEFAULT_FIELDS:
            continue
        extra[key] = value
    return extra


class LogContextFilter(logging.Filter):
    """Inject values from the request context into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


def _resolve_log_dir() -> Optional[Path]:
    """Return the log directory; an empty ``BOOKVAULT_LOG_DIR`` disables file output."""

    value = os.environ.get(LOG_DIR_ENV)
    if value is None:
        return PROJECT_DIR / "log"
    value = value.strip()
    if not value:
        return None
    return Path(value).expanduser()


def _configure_handlers(logger: logging.Logger) -> None:
    formatter = JSONLogFormatter()
    context_filter = LogContextFilter()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    stream_handler.addFilter(context_filter)
    logger.addHandler(stream_handler)

    log_dir = _resolve_log_dir()
    if log_dir is None:
        return
    log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        log_dir / LOG_FILENAME, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    file_handler.addFilter(context_filter)
    logger.addHandler(file_handler)


def setup_logging(log_level: int = DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Configure the application logger once and return it."""
    global _logger

    if _logger is not None:
        configure_logging_level(log_level)
        return _logger

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    logger.propagate = False
    _configure_handlers(logger)

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Return the configured logger instance, initializing if necessary."""
    if _logger is None:
        return setup_logging()
    return _logger


def configure_logging_level(log_level: int | str) -> int:
    """Apply ``log_level`` (a level number or name such as ``"DEBUG"``)."""
    if isinstance(log_level, str):
        resolved = logging.getLevelName(log_level.strip().upper())
        level = resolved if isinstance(resolved, int) else DEFAULT_LOG_LEVEL
    else:
        level = log_level
    logger = get_logger()
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
    return level


@contextlib.contextmanager
def log_context(**values: object) -> Iterator[None]:
    """Temporarily enrich log records with ``values`` (``None`` values are skipped)."""

    current = dict(_log_context.get())
    current.update({key: value for key, value in values.items() if value is not None})
    token = _log_context.set(current)
    try:
        yield
    finally:
        _log_context.reset(token)


logger = get_logger()

__all__ = [
    "configure_logging_level",
    "get_logger",
    "log_context",
    "logger",
    "setup_logging",
]
