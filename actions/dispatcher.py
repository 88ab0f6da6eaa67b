"""
Action Dispatcher
-----------------
Single entry point: text in, command launched (or not).

Pipeline:
    actions (canonical order) -> match -> expand -> expand variables -> spawn

Outcomes:
- NOTHING_FOUND: no action matched; nothing is spawned, no error
- SUCCEEDED: a command was produced and started
- ERROR: regex expansion or spawn failed; the error is attached

A regex expansion error stops the loop at once, later actions are not
tried.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable, Optional
import logging

from core.errors import QuicklaunchError, RegexExpansionError, SpawnError
from infra.logging import DispatchContext
from infra.spawn import SpawnContext, spawn_command_line
from infra.variables import expand_variables

from .expander import expand_command
from .matcher import ActionMatch, PatternMatcher
from .models import Action
from .store import ActionStore

Spawner = Callable[[str, Optional[SpawnContext]], Any]
VariableExpander = Callable[[str], str]


class DispatchStatus(Enum):
    """Terminal outcome of a dispatch."""
    NOTHING_FOUND = auto()
    SUCCEEDED = auto()
    ERROR = auto()


@dataclass
class DispatchResult:
    """Result of dispatching one piece of text."""
    status: DispatchStatus
    text: str
    command: Optional[str] = None
    action: Optional[Action] = None
    error: Optional[QuicklaunchError] = None
    dispatch_id: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def success(self) -> bool:
        return self.status == DispatchStatus.SUCCEEDED

    @property
    def found(self) -> bool:
        return self.status != DispatchStatus.NOTHING_FOUND

    def __repr__(self) -> str:
        detail = self.command if self.error is None else self.error.message
        return f"DispatchResult({self.status.name}: {detail})"


class ActionDispatcher:
    """
    Matches text against a store's actions and runs the expanded command.

    The spawner and variable expander are injected so the dispatcher
    itself performs no I/O.
    """

    def __init__(
        self,
        store: ActionStore,
        spawner: Optional[Spawner] = None,
        variable_expander: Optional[VariableExpander] = None,
        matcher: Optional[PatternMatcher] = None,
    ):
        self.store = store
        self._spawner = spawner or spawn_command_line
        self._expand_variables = variable_expander or expand_variables
        self._matcher = matcher or PatternMatcher()
        self._logger = logging.getLogger("quicklaunch.actions.dispatcher")

    def find(self, text: str) -> Optional[ActionMatch]:
        """Return the first matching action for text, without expanding it."""
        for action in self.store.actions:
            found = self._matcher.match(action, text)
            if found is not None:
                return found
        return None

    def execute(self, text: str, context: Optional[SpawnContext] = None) -> DispatchResult:
        if not isinstance(text, str):
            raise TypeError(f"text must be str, not {type(text).__name__}")

        with DispatchContext() as dispatch_id:
            found = self.find(text)
            if found is None:
                return DispatchResult(
                    status=DispatchStatus.NOTHING_FOUND,
                    text=text,
                    dispatch_id=dispatch_id,
                )

            action = found.action
            try:
                command = expand_command(action, found)
            except RegexExpansionError as e:
                self._logger.debug(
                    f"Expansion failed for action {action.unique_id}: {e.message}"
                )
                return DispatchResult(
                    status=DispatchStatus.ERROR,
                    text=text,
                    action=action,
                    error=e,
                    dispatch_id=dispatch_id,
                )

            command = self._expand_variables(command)
            self._logger.debug(
                f'spawn command "{command}"',
                extra={"unique_id": action.unique_id, "command": command},
            )

            try:
                self._spawner(command, context)
            except SpawnError as e:
                return DispatchResult(
                    status=DispatchStatus.ERROR,
                    text=text,
                    command=command,
                    action=action,
                    error=e,
                    dispatch_id=dispatch_id,
                )

            return DispatchResult(
                status=DispatchStatus.SUCCEEDED,
                text=text,
                command=command,
                action=action,
                dispatch_id=dispatch_id,
            )


def execute(
    store: ActionStore,
    text: str,
    context: Optional[SpawnContext] = None,
) -> DispatchResult:
    """Dispatch text with the default spawner and variable expansion."""
    return ActionDispatcher(store).execute(text, context)
