"""
crudkit logging infrastructure.

Provides:
- Component loggers (SESSION, GATEWAY, SCHEMA, SETTINGS) under the
  ``crudkit`` logger hierarchy
- Console output for human monitoring
- File output (JSONL) under ``.crudkit/logs/`` for tooling that tails logs

Log Format Design:
- Primary file: .crudkit/logs/crudkit.log, one JSON object per line
- Each line includes timestamp, level, component, message and structured context
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

# =============================================================================
# Terminal Colors (respects NO_COLOR)
# =============================================================================

_NO_COLOR = os.environ.get("NO_COLOR") or not sys.stdout.isatty()


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
    SESSION = "" if _NO_COLOR else "\033[34m"  # Blue
    GATEWAY = "" if _NO_COLOR else "\033[36m"  # Cyan
    SCHEMA = "" if _NO_COLOR else "\033[35m"  # Magenta
    SETTINGS = "" if _NO_COLOR else "\033[33m"  # Yellow


# =============================================================================
# JSONL Formatter
# =============================================================================


class JSONLFormatter(logging.Formatter):
    """
    Formats log records as JSON Lines.

    Each entry contains:
    - timestamp: ISO 8601 format (UTC)
    - level: DEBUG, INFO, WARNING, ERROR, CRITICAL
    - component: SESSION, GATEWAY, SCHEMA, SETTINGS, CRUDKIT
    - message: The log message
    - context: Additional structured data (optional)
    - source: Source file/location info (warnings and above)

    Example output:
    {"timestamp":"2024-01-15T10:30:45.123+00:00","level":"WARNING","component":"SESSION","message":"Status refresh failed","context":{"status":503}}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "component": getattr(record, "component", "CRUDKIT"),
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
        component = getattr(record, "component", "CRUDKIT")
        component_color = getattr(record, "component_color", "")

        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        level_color = self.LEVEL_COLORS.get(record.levelno, "")

        if _NO_COLOR:
            prefix = f"[{timestamp}] [{component}]"
        else:
            prefix = (
                f"{Colors.DIM}{timestamp}{Colors.RESET} "
                f"{component_color}[{component}]{Colors.RESET}"
            )

        # Add level for non-INFO messages
        if record.levelno != logging.INFO:
            level_name = record.levelname
            if not _NO_COLOR:
                level_name = f"{level_color}{level_name}{Colors.RESET}"
            prefix = f"{prefix} {level_name}:"

        return f"{prefix} {record.getMessage()}"


# =============================================================================
# Logger Setup
# =============================================================================


_loggers: dict[str, logging.Logger] = {}
_log_dir: Path | None = None

LOG_FILENAME = "crudkit.log"


def setup_logging(
    log_dir: Path | str | None = ".crudkit/logs",
    level: int = logging.INFO,
    max_bytes: int = 5 * 1024 * 1024,  # 5MB
    backup_count: int = 3,
    stream: Any = None,
) -> Path | None:
    """
    Initialize the crudkit logger hierarchy.

    Args:
        log_dir: Directory for the JSONL log file; None disables file output
        level: Minimum log level
        max_bytes: Max size per log file before rotation
        backup_count: Number of backup files to keep
        stream: Console stream (defaults to stderr)

    Returns:
        Path to the log directory, or None when file output is disabled
    """
    global _log_dir

    root_logger = logging.getLogger("crudkit")
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setFormatter(ConsoleFormatter())
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    if log_dir is None:
        _log_dir = None
        return None

    _log_dir = Path(log_dir)
    _log_dir.mkdir(parents=True, exist_ok=True)
    log_file = _log_dir / LOG_FILENAME

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(JSONLFormatter())
    file_handler.setLevel(level)
    root_logger.addHandler(file_handler)

    root_logger.debug(
        "crudkit logging initialized",
        extra={"component": "CRUDKIT", "context": {"log_file": str(log_file)}},
    )
    return _log_dir


def get_logger(component: str, color: str = "") -> logging.Logger:
    """
    Get a logger for a specific component.

    Args:
        component: Component name (e.g., "SESSION", "GATEWAY")
        color: ANSI color code for the component tag

    Returns:
        Logger named ``crudkit.<component>`` tagging every record with the component
    """
    if component in _loggers:
        return _loggers[component]

    logger = logging.getLogger(f"crudkit.{component.lower().replace(' ', '_')}")

    class ComponentFilter(logging.Filter):
        def filter(self, record: logging.LogRecord) -> bool:
            if not hasattr(record, "component"):
                record.component = component
            if not hasattr(record, "component_color"):
                record.component_color = color
            return True

    logger.addFilter(ComponentFilter())
    _loggers[component] = logger

    return logger


# =============================================================================
# Contextual Logging
# =============================================================================


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    context: dict[str, Any] | None = None,
    **kwargs: Any,
) -> None:
    """
    Log a message with structured context data.

    Args:
        logger: Logger instance
        level: Logging level (logging.INFO, logging.ERROR, etc.)
        message: Human-readable message
        context: Structured context data (included in JSONL output)
        **kwargs: Additional context items
    """
    extra = {"context": {**(context or {}), **kwargs}} if (context or kwargs) else {}
    logger.log(level, message, extra=extra)


# =============================================================================
# Component Loggers
# =============================================================================


def get_session_logger() -> logging.Logger:
    """Get logger for session state transitions."""
    return get_logger("SESSION", Colors.SESSION)


def get_gateway_logger() -> logging.Logger:
    """Get logger for backend requests."""
    return get_logger("GATEWAY", Colors.GATEWAY)


def get_schema_logger() -> logging.Logger:
    """Get logger for table definition loading and validation."""
    return get_logger("SCHEMA", Colors.SCHEMA)


def get_settings_logger() -> logging.Logger:
    """Get logger for settings fetches."""
    return get_logger("SETTINGS", Colors.SETTINGS)


def get_log_file() -> Path | None:
    """Get the path to the main log file."""
    if _log_dir:
        return _log_dir / LOG_FILENAME
    return None
