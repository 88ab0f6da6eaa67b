"""
Process Spawner
---------------
Fire-and-forget launch of a command line.

Rules:
- No shell=True; the command line is split with shlex
- The child is never waited on
- Failures surface as SpawnError
"""

from dataclasses import dataclass, field
from typing import Dict, Optional
import logging
import os
import shlex
import subprocess

from core.errors import SpawnError


_logger = logging.getLogger("quicklaunch.infra.spawn")


@dataclass
class SpawnContext:
    """Where and how a command is started."""
    display: Optional[str] = None
    working_directory: Optional[str] = None
    environment: Dict[str, str] = field(default_factory=dict)

    def build_environment(self) -> Dict[str, str]:
        env = dict(os.environ)
        env.update(self.environment)
        if self.display:
            env["DISPLAY"] = self.display
        return env


def spawn_command_line(command: str, context: Optional[SpawnContext] = None) -> subprocess.Popen:
    """
    Start command and return immediately.

    Raises:
        SpawnError: the command line is empty, cannot be parsed,
            or the program cannot be started.
    """
    context = context or SpawnContext()

    try:
        argv = shlex.split(command)
    except ValueError as e:
        raise SpawnError(command, f"Failed to parse command line: {e}") from e

    if not argv:
        raise SpawnError(command, "Command line is empty")

    try:
        process = subprocess.Popen(
            argv,
            cwd=context.working_directory,
            env=context.build_environment(),
            stdin=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        raise SpawnError(command, e.strerror or str(e)) from e
    except ValueError as e:
        # embedded null byte
        raise SpawnError(command, str(e)) from e

    _logger.debug(f"Spawned {argv[0]} (pid={process.pid})")
    return process
