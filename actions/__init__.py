# Actions module - Pattern/command rules and their dispatch
# Text is matched against prefix and regex actions in canonical order;
# the first match is expanded and handed to the spawner

from .models import Action, ActionType, DEFAULT_ACTIONS, default_actions, sort_actions
from .matcher import PatternMatcher, ActionMatch
from .expander import expand_command, expand_prefix_command, expand_references
from .store import ActionStore, get_action_store, release_action_store
from .dispatcher import ActionDispatcher, DispatchResult, DispatchStatus, execute

__all__ = [
    "Action",
    "ActionType",
    "DEFAULT_ACTIONS",
    "default_actions",
    "sort_actions",
    "PatternMatcher",
    "ActionMatch",
    "expand_command",
    "expand_prefix_command",
    "expand_references",
    "ActionStore",
    "get_action_store",
    "release_action_store",
    "ActionDispatcher",
    "DispatchResult",
    "DispatchStatus",
    "execute",
]
