"""
OneAPI logging infrastructure.

Two outputs:
- Console: human-readable, coloured unless NO_COLOR is set or stdout is not a tty
- File (optional): JSON Lines in ``<log_dir>/oneapi.log``, one object per
  record with timestamp, level, component, message and structured context

All loggers live under the ``oneapi`` namespace.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOG_FILE_NAME = "oneapi.log"
ROOT_LOGGER_NAME = "oneapi"

# =============================================================================
# Terminal Colors (respects NO_COLOR)
# =============================================================================

_NO_COLOR = bool(os.environ.get("NO_COLOR")) or not sys.stdout.isatty()


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "" if _NO_COLOR else "\033[0m"
    DIM = "" if _NO_COLOR else "\033[2m"

    # Log levels
    DEBUG = "" if _NO_COLOR else "\033[36m"  # Cyan
    INFO = "" if _NO_COLOR else "\033[32m"  # Green
    WARNING = "" if _NO_COLOR else "\033[33m"  # Yellow
    ERROR = "" if _NO_COLOR else "\033[31m"  # Red
    CRITICAL = "" if _NO_COLOR else "\033[35m"  # Magenta

    # Components
    API = "" if _NO_COLOR else "\033[34m"  # Blue
    STORAGE = "" if _NO_COLOR else "\033[36m"  # Cyan
    ONEAPI = "" if _NO_COLOR else "\033[35m"  # Magenta


# =============================================================================
# Formatters
# =============================================================================


class JSONLFormatter(logging.Formatter):
    """
    Formats log records as JSON Lines.

    Example output:
    {"timestamp":"2024-01-15T10:30:45.123000Z","level":"INFO","component":"Storage","message":"Created task 1","context":{"entity":"task","id":1}}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "component": getattr(record, "component", "OneAPI"),
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if context:
            entry["context"] = context

        if record.levelno >= logging.WARNING:
            source_info: dict[str, Any] = {}
            if record.pathname:
                source_info["file"] = record.pathname
            if record.lineno:
                source_info["line"] = record.lineno
            if record.funcName and record.funcName != "<module>":
                source_info["function"] = record.funcName
            if source_info:
                entry["source"] = source_info

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for console output."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.DEBUG,
        logging.INFO: Colors.INFO,
        logging.WARNING: Colors.WARNING,
        logging.ERROR: Colors.ERROR,
        logging.CRITICAL: Colors.CRITICAL,
    }

    def format(self, record: logging.LogRecord) -> str:
        component = getattr(record, "component", "OneAPI")
        component_color = getattr(record, "component_color", Colors.ONEAPI)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        if _NO_COLOR:
            prefix = f"[{timestamp}] [{component}]"
        else:
            prefix = (
                f"{Colors.DIM}{timestamp}{Colors.RESET} "
                f"{component_color}[{component}]{Colors.RESET}"
            )

        if record.levelno != logging.INFO:
            level_name = record.levelname
            if not _NO_COLOR:
                level_color = self.LEVEL_COLORS.get(record.levelno, "")
                level_name = f"{level_color}{level_name}{Colors.RESET}"
            prefix = f"{prefix} {level_name}:"

        message = f"{prefix} {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


# =============================================================================
# Logger Setup
# =============================================================================


class _ComponentFilter(logging.Filter):
    """Stamps records with a component tag unless one is already set."""

    def __init__(self, component: str, color: str):
        super().__init__()
        self.component = component
        self.color = color

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "component"):
            record.component = self.component
        if not hasattr(record, "component_color"):
            record.component_color = self.color
        return True


_loggers: dict[str, logging.Logger] = {}


def setup_logging(
    level: int = logging.INFO,
    log_dir: Path | str | None = None,
    max_bytes: int = 5 * 1024 * 1024,  # 5MB
    backup_count: int = 3,
) -> Path | None:
    """
    Initialize the logging infrastructure.

    Args:
        level: Minimum log level
        log_dir: Directory for the JSONL log file; None disables file output
        max_bytes: Max size per log file before rotation
        backup_count: Number of backup files to keep

    Returns:
        Path to the log directory, or None when logging to console only
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.propagate = False

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ConsoleFormatter())
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_dir is None:
        return None

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / LOG_FILE_NAME
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(JSONLFormatter())
    file_handler.setLevel(level)
    root_logger.addHandler(file_handler)

    log_with_context(
        root_logger,
        logging.INFO,
        "OneAPI logging initialized",
        log_format="jsonl",
        log_file=str(log_file),
    )

    return log_path


def get_logger(component: str, color: str = Colors.ONEAPI) -> logging.Logger:
    """
    Get a logger for a specific component.

    Args:
        component: Component name (e.g., "API", "Storage")
        color: ANSI color code for the component tag

    Returns:
        Logger under the ``oneapi`` namespace
    """
    if component in _loggers:
        return _loggers[component]

    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{component.lower().replace(' ', '_')}")
    logger.addFilter(_ComponentFilter(component, color))
    _loggers[component] = logger
    return logger


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    context: dict[str, Any] | None = None,
    **kwargs: Any,
) -> None:
    """
    Log a message with structured context data.

    The context ends up in the ``context`` key of the JSONL entry.
    """
    extra = {"context": {**(context or {}), **kwargs}} if (context or kwargs) else {}
    logger.log(level, message, extra=extra)


def get_api_logger() -> logging.Logger:
    """Logger for the HTTP layer."""
    return get_logger("API", Colors.API)


def get_storage_logger() -> logging.Logger:
    """Logger for database and repository operations."""
    return get_logger("Storage", Colors.STORAGE)


def get_oneapi_logger() -> logging.Logger:
    """Logger for startup and general messages."""
    return get_logger("OneAPI", Colors.ONEAPI)

