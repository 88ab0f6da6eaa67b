"""
Quicklaunch Test Configuration
------------------------------
Shared fixtures and configuration for all tests.
"""

import subprocess
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import actions.store as store_module
from actions.store import ActionStore
from core.errors import SpawnError
from infra.channel import ConfigChannel
from infra.spawn import SpawnContext


# =============================================================================
# Test Isolation: Block Side Effects
# =============================================================================

@pytest.fixture(autouse=True)
def block_process_spawn(monkeypatch):
    """
    Block subprocess.Popen() during tests.

    Nothing in the suite may launch a real program; tests that need a
    spawner inject a RecordingSpawner instead.
    """
    def _blocked(*args, **kwargs):
        raise RuntimeError(
            "subprocess.Popen() is forbidden during tests. "
            "Inject a spawner or patch subprocess.Popen explicitly."
        )

    monkeypatch.setattr(subprocess, "Popen", _blocked)


@pytest.fixture(autouse=True)
def reset_shared_store():
    """Make sure no test leaks the shared action store."""
    yield
    if store_module._shared_store is not None:
        store_module._shared_store.close()
    store_module._shared_store = None
    store_module._shared_refs = 0


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / ".config"))
    for name in ("CHANNEL_PATH", "LOG_LEVEL", "LOG_DIR", "LOG_TO_FILE", "DISPLAY"):
        monkeypatch.delenv(f"QUICKLAUNCH_{name}", raising=False)


# =============================================================================
# Fakes
# =============================================================================

class RecordingSpawner:
    """Spawner that records commands instead of starting them."""

    def __init__(self, fail_with: Optional[str] = None):
        self.calls: List[Tuple[str, Optional[SpawnContext]]] = []
        self.fail_with = fail_with

    def __call__(self, command: str, context: Optional[SpawnContext] = None):
        self.calls.append((command, context))
        if self.fail_with is not None:
            raise SpawnError(command, self.fail_with)
        return None

    @property
    def commands(self) -> List[str]:
        return [command for command, _ in self.calls]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def channel() -> ConfigChannel:
    """Empty in-memory channel."""
    return ConfigChannel(name="test")


@pytest.fixture
def store(channel) -> ActionStore:
    """Store bootstrapped with the default actions."""
    action_store = ActionStore(channel)
    yield action_store
    action_store.close()


@pytest.fixture
def spawner() -> RecordingSpawner:
    return RecordingSpawner()


@pytest.fixture
def failing_spawner() -> RecordingSpawner:
    return RecordingSpawner(fail_with="No such file or directory")


@pytest.fixture
def write_action():
    """Write one action's fields into a channel."""
    def _write(channel: ConfigChannel, unique_id: int, type=None, pattern=None, command=None):
        base = f"/actions/action-{unique_id}"
        if type is not None:
            channel.set_int(f"{base}/type", type)
        if pattern is not None:
            channel.set_string(f"{base}/pattern", pattern)
        if command is not None:
            channel.set_string(f"{base}/command", command)

    return _write
