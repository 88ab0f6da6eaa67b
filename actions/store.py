"""
Action Store
------------
Owns the ordered list of actions and keeps it in sync with a config
channel.

Channel layout:
    /actions                        list of action ids
    /actions/action-<id>/type       0 = prefix, 1 = regex
    /actions/action-<id>/pattern
    /actions/action-<id>/command

The store is shared: get_action_store() hands out the same instance with
a reference count, release_action_store() tears it down when the last
reference goes away.
"""

from typing import Iterator, List, Optional, Tuple
import logging
import re
import threading

from infra.channel import ConfigChannel, Value

from .models import Action, ActionType, default_actions, sort_actions

ACTIONS_PROPERTY = "/actions"
_ACTION_PROPERTY_RE = re.compile(r"^/actions/action-(-?\d+)/([^/]{1,30})$")


def action_property(unique_id: int, name: str) -> str:
    return f"{ACTIONS_PROPERTY}/action-{unique_id}/{name}"


def parse_action_property(key: str) -> Optional[Tuple[int, str]]:
    """Split '/actions/action-<id>/<field>' into (id, field)."""
    found = _ACTION_PROPERTY_RE.match(key)
    if found is None:
        return None
    return int(found.group(1)), found.group(2)


class ActionStore:
    """
    Ordered, channel-backed collection of actions.

    Responsibilities:
    - Load actions from the channel, or bootstrap the defaults
    - Keep prefixes before regexes, longer/later patterns first
    - Write actions back without reacting to its own writes
    - Apply field updates pushed by the channel
    """

    def __init__(self, channel: ConfigChannel, autoload: bool = True):
        self._channel = channel
        self._actions: List[Action] = []
        self._watch_id = 0
        self._logger = logging.getLogger("quicklaunch.actions.store")

        if autoload:
            self.load()

        self._watch_id = self._channel.connect(self.apply_external_change)

    @property
    def channel(self) -> ConfigChannel:
        return self._channel

    @property
    def actions(self) -> Tuple[Action, ...]:
        """Actions in match order."""
        return tuple(self._actions)

    @property
    def is_closed(self) -> bool:
        return self._watch_id == 0

    def get(self, unique_id: int) -> Optional[Action]:
        for action in self._actions:
            if action.unique_id == unique_id:
                return action
        return None

    def load(self) -> None:
        """(Re)load all actions from the channel."""
        actions: List[Action] = []

        if self._channel.has_property(ACTIONS_PROPERTY):
            seen = set()
            for unique_id in self._channel.get_array(ACTIONS_PROPERTY) or []:
                if unique_id in seen:
                    continue
                action = self._read_action(unique_id)
                if action is not None:
                    actions.append(action)
                    seen.add(unique_id)
            self._actions = sort_actions(actions)
        else:
            self._logger.debug("loaded default actions")
            self._actions = default_actions()
            self.save(save_actions=True)
            self._actions = sort_actions(self._actions)

        self._logger.debug(f"loaded {len(self._actions)} actions")

    def _read_action(self, unique_id: int) -> Optional[Action]:
        action_type = ActionType.from_value(
            self._channel.get_int(action_property(unique_id, "type"), -1)
        )
        if action_type is None:
            self._logger.debug(f"Dropping action {unique_id}: invalid type")
            return None

        pattern = self._channel.get_string(action_property(unique_id, "pattern"))
        command = self._channel.get_string(action_property(unique_id, "command"))
        if not pattern or not command:
            self._logger.debug(f"Dropping action {unique_id}: missing pattern or command")
            return None

        return Action(type=action_type, unique_id=unique_id, pattern=pattern, command=command)

    def save(self, save_actions: bool = False) -> None:
        """
        Write the id list, and with save_actions every action's fields.

        Notifications caused by these writes are not delivered back to
        this store.
        """
        with self._channel.blocked(self._watch_id):
            for action in self._actions if save_actions else ():
                self._channel.set_int(action_property(action.unique_id, "type"), int(action.type))
                self._channel.set_string(action_property(action.unique_id, "pattern"), action.pattern)
                self._channel.set_string(action_property(action.unique_id, "command"), action.command)

            self._channel.set_array(ACTIONS_PROPERTY, [a.unique_id for a in self._actions])

    def apply_external_change(self, key: Optional[str], value: Optional[Value]) -> None:
        """
        Update a field of an existing action from a channel notification.

        Actions are never added or removed here; unknown keys and values
        of the wrong type are ignored.
        """
        if key is None or key == ACTIONS_PROPERTY:
            return

        parsed = parse_action_property(key)
        if parsed is None:
            return

        unique_id, name = parsed
        action = self.get(unique_id)
        if action is None:
            return

        if name == "type" and isinstance(value, int) and not isinstance(value, bool):
            action_type = ActionType.from_value(value)
            if action_type is not None:
                action.type = action_type
        elif name == "pattern" and isinstance(value, str):
            action.pattern = value
        elif name == "command" and isinstance(value, str):
            action.command = value
        else:
            return

        self._logger.debug(f"Action {unique_id} {name} changed")

    def close(self) -> None:
        """Stop listening to the channel and drop all actions."""
        if self._watch_id:
            self._channel.disconnect(self._watch_id)
            self._watch_id = 0
        self._actions = []

    def __iter__(self) -> Iterator[Action]:
        return iter(tuple(self._actions))

    def __len__(self) -> int:
        return len(self._actions)

    def __repr__(self) -> str:
        return f"ActionStore(actions={len(self._actions)}, channel={self._channel.name})"


# Shared instance
_shared_store: Optional[ActionStore] = None
_shared_refs = 0
_shared_lock = threading.Lock()


def get_action_store(channel: Optional[ConfigChannel] = None) -> ActionStore:
    """
    Acquire the shared store.

    The first call creates it from channel (or the channel configured in
    settings); later calls return the same store and add a reference.
    """
    global _shared_store, _shared_refs

    with _shared_lock:
        if _shared_store is None:
            if channel is None:
                from core.settings import load_settings

                settings = load_settings()
                channel = ConfigChannel(path=str(settings.resolved_channel_path()))
            _shared_store = ActionStore(channel)
            _shared_refs = 1
            logging.getLogger("quicklaunch.actions.store").debug("allocate actions")
        else:
            _shared_refs += 1
        return _shared_store


def release_action_store(store: ActionStore) -> None:
    """Drop a reference; the last release closes the store."""
    global _shared_store, _shared_refs

    with _shared_lock:
        if store is not _shared_store or _shared_refs <= 0:
            raise RuntimeError("Releasing an action store that is not held")
        _shared_refs -= 1
        if _shared_refs == 0:
            _shared_store.close()
            _shared_store = None


def action_store_refcount() -> int:
    return _shared_refs
