# Infrastructure module - Collaborators of the action dispatcher
# Config channel, process spawning, variable expansion and logging

from .channel import ConfigChannel
from .spawn import SpawnContext, spawn_command_line
from .variables import expand_variables
from .logging import (
    get_logger, configure_logging, reset_logging,
    DispatchContext, get_dispatch_id, generate_dispatch_id
)

__all__ = [
    # Channel
    "ConfigChannel",
    # Spawn
    "SpawnContext",
    "spawn_command_line",
    # Variables
    "expand_variables",
    # Logging
    "get_logger",
    "configure_logging",
    "reset_logging",
    "DispatchContext",
    "get_dispatch_id",
    "generate_dispatch_id",
]
