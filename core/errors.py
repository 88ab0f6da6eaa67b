"""
Error Handling Module
---------------------
Typed errors for action loading, matching, expansion and spawning.
"Nothing found" is a normal outcome and never an error.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Dict, List, Optional
import logging


class ErrorCategory(Enum):
    """Categories of errors for handling decisions."""
    INVALID_ACTION = auto()   # Persisted action is malformed (dropped on load)
    REGEX_COMPILE = auto()    # Action pattern is not a valid regex
    REGEX_EXPANSION = auto()  # Bad back-reference in a regex command template
    SPAWN = auto()            # Command could not be started
    CONFIG = auto()           # Settings file is unreadable or malformed


class QuicklaunchError(Exception):
    """
    Base error with category and metadata.

    Carried inside dispatch results so callers can report failures
    without catching anything.
    """

    category: ErrorCategory = ErrorCategory.CONFIG

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.category.name}: {self.message})"


class InvalidActionError(QuicklaunchError):
    """A persisted action is missing its type, pattern or command."""
    category = ErrorCategory.INVALID_ACTION


class RegexCompileError(QuicklaunchError):
    """An action pattern failed to compile."""
    category = ErrorCategory.REGEX_COMPILE

    def __init__(self, pattern: str, reason: str):
        super().__init__(
            f'Failed to create regex for "{pattern}": {reason}',
            details={"pattern": pattern, "reason": reason},
        )
        self.pattern = pattern
        self.reason = reason


class RegexExpansionError(QuicklaunchError):
    """A regex command template contains a malformed reference."""
    category = ErrorCategory.REGEX_EXPANSION

    def __init__(self, template: str, position: int, reason: str):
        super().__init__(
            f"Error while parsing replacement text \"{template}\" "
            f"at char {position}: {reason}",
            details={"template": template, "position": position},
        )
        self.template = template
        self.position = position
        self.reason = reason


class SpawnError(QuicklaunchError):
    """The spawn collaborator could not start the command."""
    category = ErrorCategory.SPAWN

    def __init__(self, command: str, reason: str):
        super().__init__(
            f'Failed to execute command "{command}": {reason}',
            details={"command": command},
        )
        self.command = command
        self.reason = reason


class ConfigError(QuicklaunchError):
    """Settings could not be loaded."""
    category = ErrorCategory.CONFIG


@dataclass
class ErrorRecord:
    """An error seen by the handler."""
    category: ErrorCategory
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def from_exception(cls, error: QuicklaunchError) -> "ErrorRecord":
        return cls(
            category=error.category,
            message=error.message,
            details=dict(error.details),
            timestamp=error.timestamp,
        )


class ErrorHandler:
    """
    Central error handler with logging and history.
    """

    LEVELS: Dict[ErrorCategory, int] = {
        ErrorCategory.INVALID_ACTION: logging.DEBUG,
        ErrorCategory.REGEX_COMPILE: logging.WARNING,
        ErrorCategory.REGEX_EXPANSION: logging.ERROR,
        ErrorCategory.SPAWN: logging.ERROR,
        ErrorCategory.CONFIG: logging.ERROR,
    }

    def __init__(self, max_history: int = 100):
        self._logger = logging.getLogger("quicklaunch.errors")
        self._error_history: List[ErrorRecord] = []
        self._max_history = max_history

    def handle(self, error: QuicklaunchError) -> str:
        """
        Handle an error and return user-friendly message.
        """
        record = ErrorRecord.from_exception(error)

        level = self.LEVELS.get(record.category, logging.ERROR)
        self._logger.log(level, f"{record.category.name}: {record.message}")

        self._error_history.append(record)
        if len(self._error_history) > self._max_history:
            self._error_history.pop(0)

        return self._get_user_message(record)

    def _get_user_message(self, record: ErrorRecord) -> str:
        """Generate user-friendly error message."""
        messages = {
            ErrorCategory.REGEX_EXPANSION: f"Failed to expand the action command. {record.message}",
            ErrorCategory.SPAWN: f"Failed to launch the command. {record.message}",
            ErrorCategory.CONFIG: f"Invalid configuration. {record.message}",
        }

        return messages.get(record.category, record.message)

    @property
    def history(self) -> List[ErrorRecord]:
        return list(self._error_history)

    def get_error_stats(self) -> Dict[str, int]:
        """Get error statistics."""
        stats: Dict[str, int] = {}
        for record in self._error_history:
            key = record.category.name
            stats[key] = stats.get(key, 0) + 1
        return stats

    def clear_history(self) -> None:
        """Clear error history."""
        self._error_history.clear()
