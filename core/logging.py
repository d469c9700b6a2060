"""
Logging Module - Centralized logging configuration
=================================================

All chatbot loggers live under the ``chatbot`` logger. This module wires
that tree to its outputs:
- Rich console output for the one-shot command line modes
- Rotating plain or JSON log files (the only output while the chat
  window owns the terminal)
- A JSON error log carrying the ``extra`` context of each record
"""

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from rich.logging import RichHandler


ROOT_LOGGER_NAME = "chatbot"

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s:%(lineno)d | %(message)s"

# attributes every LogRecord has; anything else came in through ``extra``
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the ``extra`` fields attached to a log record."""
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter, one object per line.

    Fields passed through ``extra`` (rule type, pattern, word, ...) are
    collected under ``context``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }

        context = record_context(record)
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ShortNameFilter(logging.Filter):
    """Adds ``short_name``: the logger name without the ``chatbot.`` prefix."""

    def filter(self, record: logging.LogRecord) -> bool:
        prefix = ROOT_LOGGER_NAME + "."
        record.short_name = record.name[len(prefix):] if record.name.startswith(prefix) else record.name
        return True


class LoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that merges its bound context into every call's
    ``extra`` mapping.
    """

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = dict(kwargs.get("extra") or {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return msg, kwargs


_configured = False


def setup_logging(
    log_dir: Optional[str] = None,
    log_level: str = "INFO",
    json_format: bool = False,
    console_output: bool = True,
    max_bytes: int = 1_000_000,
    backup_count: int = 3
) -> None:
    """
    Set up logging configuration for the application.

    This should be called once at application startup. Later calls are
    ignored.

    Args:
        log_dir: Directory for log files (optional)
        log_level: Minimum log level to capture
        json_format: Use JSON format for the main log file
        console_output: Also log to the console. Must be False while the
            chat window owns the screen.
        max_bytes: Size at which a log file is rotated
        backup_count: Rotated files kept per log

    Example:
        setup_logging(log_dir="~/.local/state/chatbot/logs", log_level="DEBUG")
    """
    global _configured

    if _configured:
        return

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root_logger.handlers.clear()
    root_logger.propagate = False

    if console_output:
        console_handler = RichHandler(show_path=False, markup=False, rich_tracebacks=True)
        console_handler.addFilter(ShortNameFilter())
        console_handler.setFormatter(logging.Formatter("%(short_name)s | %(message)s"))
        root_logger.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir).expanduser()
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path / "chatbot.log", maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(FILE_FORMAT))
        root_logger.addHandler(file_handler)

        error_handler = RotatingFileHandler(
            log_path / "errors.log", maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(error_handler)

    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())

    _configured = True


def get_logger(name: str, **extra) -> LoggerAdapter:
    """
    Get a logger under the ``chatbot`` tree.

    Args:
        name: Logger name, e.g. ``conversation.matcher``
        **extra: Context included in every record of this logger

    Returns:
        LoggerAdapter instance

    Example:
        logger = get_logger("conversation.matcher")
        logger.warning("Rule disabled", extra={"pattern": pattern})
    """
    prefix = ROOT_LOGGER_NAME + "."
    full_name = name if name.startswith(prefix) else prefix + name
    return LoggerAdapter(logging.getLogger(full_name), extra)
