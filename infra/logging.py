"""
Quicklaunch Centralized Logging
-------------------------------
Structured logging with dispatch_id propagation.

Design:
- Every dispatch gets a unique dispatch_id
- dispatch_id propagates through: Dispatcher -> Matcher -> Spawner
- Console output via Rich, file output as JSON lines
- Severity discipline: DEBUG=trace, WARNING=recoverable, ERROR=failed dispatch

Usage:
    from infra.logging import get_logger, DispatchContext

    logger = get_logger("actions")

    with DispatchContext() as dispatch_id:
        logger.debug("Spawning command")
"""

import contextvars
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "quicklaunch"

_dispatch_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "dispatch_id", default=None
)


def generate_dispatch_id() -> str:
    """Generate a unique dispatch ID."""
    return f"dispatch_{uuid.uuid4().hex[:12]}"


def get_dispatch_id() -> Optional[str]:
    """Get the current dispatch ID from context."""
    return _dispatch_id_var.get()


class DispatchContext:
    """
    Context manager for dispatch scoping.

    Usage:
        with DispatchContext() as dispatch_id:
            # All logs within this block carry dispatch_id
            logger.info("Matching...")
    """

    def __init__(self, dispatch_id: Optional[str] = None):
        self._dispatch_id = dispatch_id or generate_dispatch_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = _dispatch_id_var.set(self._dispatch_id)
        return self._dispatch_id

    def __exit__(self, *args) -> None:
        if self._token is not None:
            _dispatch_id_var.reset(self._token)
            self._token = None


class DispatchIdFilter(logging.Filter):
    """Logging filter that adds dispatch_id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "dispatch_id", None) is None:
            record.dispatch_id = get_dispatch_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured file logging."""

    EXTRA_FIELDS = ("unique_id", "pattern", "command", "status")

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "dispatch_id": getattr(record, "dispatch_id", "-"),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in self.EXTRA_FIELDS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry)


_logging_initialized = False
_log_file_path: Optional[Path] = None


def configure_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    console: bool = True,
    file: bool = False,
) -> None:
    """
    Configure the quicklaunch logging system.

    Args:
        level: Logging level (default INFO)
        log_dir: Directory for log files (default: ./logs)
        console: Enable Rich console output on stderr
        file: Enable JSON file output
    """
    global _logging_initialized, _log_file_path

    if _logging_initialized:
        return

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    dispatch_filter = DispatchIdFilter()

    if console:
        console_handler = RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
        )
        console_handler.setLevel(level)
        console_handler.addFilter(dispatch_filter)
        root_logger.addHandler(console_handler)

    if file:
        log_path = Path(log_dir) if log_dir else Path("logs")
        log_path.mkdir(parents=True, exist_ok=True)

        _log_file_path = log_path / "quicklaunch.log"

        file_handler = logging.FileHandler(str(_log_file_path), encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)  # File gets everything
        file_handler.setFormatter(JSONFormatter())
        file_handler.addFilter(dispatch_filter)
        root_logger.addHandler(file_handler)

    _logging_initialized = True


def reset_logging() -> None:
    """Drop configured handlers so configure_logging() can run again."""
    global _logging_initialized, _log_file_path

    root_logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    _logging_initialized = False
    _log_file_path = None


def get_log_file_path() -> Optional[Path]:
    return _log_file_path


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the quicklaunch namespace.

    Args:
        name: Logger name (prefixed with 'quicklaunch.' if not already)
    """
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    return logging.getLogger(name)
