"""
Config Channel
--------------
Hierarchical key-value store with typed access and change notifications.

Keys are '/'-separated paths ("/actions/action-3/pattern"). Values are
ints, strings or lists of ints. Every set that changes a value notifies
the connected handlers synchronously with (key, new_value).

When created with a path the channel persists itself as a flat YAML
mapping. reload() re-reads the file and notifies handlers about every
key that changed on disk.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Union
import logging

import yaml

from core.errors import ConfigError

Value = Union[int, str, List[int]]
ChangeHandler = Callable[[str, Optional[Value]], None]


class ConfigChannel:
    """
    A single named configuration channel.

    Handlers are identified by the integer returned from connect(); a
    blocked handler is skipped until it is unblocked as many times as it
    was blocked.
    """

    def __init__(self, name: str = "quicklaunch", path: Optional[str] = None):
        self.name = name
        self._path = Path(path) if path else None
        self._properties: Dict[str, Value] = {}
        self._handlers: Dict[int, ChangeHandler] = {}
        self._block_counts: Dict[int, int] = {}
        self._next_handler_id = 1
        self._logger = logging.getLogger("quicklaunch.infra.channel")

        if self._path is not None and self._path.exists():
            self._properties = self._read_file()

    @property
    def path(self) -> Optional[Path]:
        return self._path

    # Persistence

    def _read_file(self) -> Dict[str, Value]:
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid channel file {self._path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Channel file {self._path} is not a mapping")

        properties: Dict[str, Value] = {}
        for key, value in data.items():
            if isinstance(key, str) and self._is_value(value):
                properties[key] = list(value) if isinstance(value, list) else value
            else:
                self._logger.debug(f"Ignoring channel entry {key!r}")
        return properties

    def _write_file(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self._properties, f, default_flow_style=False, sort_keys=True)

    def reload(self) -> int:
        """
        Re-read the backing file and notify about changed keys.

        Returns the number of keys that changed.
        """
        if self._path is None:
            return 0

        fresh = self._read_file() if self._path.exists() else {}
        changed = 0

        for key in sorted(set(self._properties) | set(fresh)):
            old = self._properties.get(key)
            new = fresh.get(key)
            if old == new:
                continue
            if new is None:
                del self._properties[key]
            else:
                self._properties[key] = new
            changed += 1
            self._emit(key, new)

        if changed:
            self._logger.debug(f"Reloaded {changed} changed properties from {self._path}")
        return changed

    # Typed access

    @staticmethod
    def _is_value(value: Any) -> bool:
        if isinstance(value, bool):
            return False
        if isinstance(value, (int, str)):
            return True
        return isinstance(value, list) and all(
            isinstance(v, int) and not isinstance(v, bool) for v in value
        )

    def has_property(self, key: str) -> bool:
        return key in self._properties

    def get(self, key: str) -> Optional[Value]:
        value = self._properties.get(key)
        return list(value) if isinstance(value, list) else value

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._properties.get(key)
        return value if isinstance(value, int) else default

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._properties.get(key)
        return value if isinstance(value, str) else default

    def get_array(self, key: str) -> Optional[List[int]]:
        value = self._properties.get(key)
        return list(value) if isinstance(value, list) else None

    def set_int(self, key: str, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{key}: expected int, got {type(value).__name__}")
        self._set(key, value)

    def set_string(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"{key}: expected str, got {type(value).__name__}")
        self._set(key, value)

    def set_array(self, key: str, values: List[int]) -> None:
        values = list(values)
        if not self._is_value(values):
            raise TypeError(f"{key}: expected a list of ints")
        self._set(key, values)

    def reset_property(self, key: str) -> None:
        """Remove a key; handlers receive None as the new value."""
        if key not in self._properties:
            return
        del self._properties[key]
        self._write_file()
        self._emit(key, None)

    def _set(self, key: str, value: Value) -> None:
        if self._properties.get(key) == value and key in self._properties:
            return
        self._properties[key] = value
        self._write_file()
        self._emit(key, list(value) if isinstance(value, list) else value)

    # Notifications

    def connect(self, handler: ChangeHandler) -> int:
        handler_id = self._next_handler_id
        self._next_handler_id += 1
        self._handlers[handler_id] = handler
        self._block_counts[handler_id] = 0
        return handler_id

    def disconnect(self, handler_id: int) -> None:
        self._handlers.pop(handler_id, None)
        self._block_counts.pop(handler_id, None)

    def is_connected(self, handler_id: int) -> bool:
        return handler_id in self._handlers

    def block(self, handler_id: int) -> None:
        if handler_id in self._block_counts:
            self._block_counts[handler_id] += 1

    def unblock(self, handler_id: int) -> None:
        if self._block_counts.get(handler_id, 0) > 0:
            self._block_counts[handler_id] -= 1

    @contextmanager
    def blocked(self, handler_id: int) -> Iterator[None]:
        """Block a handler for the duration of the block."""
        self.block(handler_id)
        try:
            yield
        finally:
            self.unblock(handler_id)

    def _emit(self, key: str, value: Optional[Value]) -> None:
        for handler_id, handler in list(self._handlers.items()):
            if self._block_counts.get(handler_id, 0) > 0:
                continue
            handler(key, value)

    def __contains__(self, key: str) -> bool:
        return key in self._properties

    def __repr__(self) -> str:
        return f"ConfigChannel(name={self.name}, properties={len(self._properties)})"
