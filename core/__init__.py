# Core module - Errors and settings shared by every other module

from .errors import (
    ErrorHandler, ErrorCategory, QuicklaunchError,
    InvalidActionError, RegexCompileError, RegexExpansionError,
    SpawnError, ConfigError
)
from .settings import Settings, load_settings

__all__ = [
    "ErrorHandler", "ErrorCategory", "QuicklaunchError",
    "InvalidActionError", "RegexCompileError", "RegexExpansionError",
    "SpawnError", "ConfigError",
    "Settings", "load_settings",
]
