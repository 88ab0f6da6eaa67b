"""
Action Models
-------------
One pattern/command pair with its type, plus the built-in defaults
and the canonical ordering.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Pattern, Tuple


class ActionType(IntEnum):
    """Action kinds. The integer values are what the channel stores."""
    PREFIX = 0
    REGEX = 1

    @classmethod
    def from_value(cls, value: object) -> Optional["ActionType"]:
        """Return the matching type, or None for anything else."""
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class Action:
    """
    A single action.

    REGEX actions cache their compiled pattern in `regex`. A failed
    compile is remembered in `regex_failed` so it is reported once.
    Assigning `pattern` clears both.
    """
    type: ActionType
    unique_id: int
    pattern: str
    command: str
    regex: Optional[Pattern] = field(default=None, repr=False, compare=False)
    regex_failed: bool = field(default=False, repr=False, compare=False)

    def __post_init__(self):
        self.type = ActionType(self.type)

    def __setattr__(self, name, value):
        super().__setattr__(name, value)
        if name == "pattern":
            self.invalidate()

    def invalidate(self) -> None:
        """Drop the cached regex and any remembered compile failure."""
        super().__setattr__("regex", None)
        super().__setattr__("regex_failed", False)

    @property
    def is_valid(self) -> bool:
        return bool(self.pattern) and bool(self.command)


# Built-in actions used on first run, in id order (1..N)
DEFAULT_ACTIONS: Tuple[Tuple[ActionType, str, str], ...] = (
    (ActionType.REGEX, r"^(file|http|https):\/\/(.*)$", r"exo-open \0"),
    (ActionType.PREFIX, "!", "exo-open --launch TerminalEmulator %s"),
    (ActionType.PREFIX, "!w", "exo-open --launch WebBrowser http://en.wikipedia.org/wiki/%s"),
    (ActionType.PREFIX, "#", "exo-open --launch TerminalEmulator man %s"),
)


def default_actions() -> List[Action]:
    return [
        Action(type=kind, unique_id=i + 1, pattern=pattern, command=command)
        for i, (kind, pattern, command) in enumerate(DEFAULT_ACTIONS)
    ]


def sort_actions(actions: List[Action]) -> List[Action]:
    """
    Canonical order: prefixes before regexes, and within a type
    patterns in reverse order so "!w" is tried before "!".
    """
    ordered = sorted(actions, key=lambda a: a.pattern, reverse=True)
    return sorted(ordered, key=lambda a: a.type != ActionType.PREFIX)
