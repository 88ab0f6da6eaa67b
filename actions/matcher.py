"""
Pattern Matcher
---------------
Decides whether an action applies to a piece of text.

Prefix actions match on a literal, case-sensitive prefix. Regex actions
are compiled on first use and the result (or the failure) is cached on
the action until its pattern changes.
"""

from dataclasses import dataclass
from typing import Optional
import logging
import re

from core.errors import RegexCompileError

from .models import Action, ActionType


@dataclass
class ActionMatch:
    """Result of a successful match."""
    action: Action
    text: str
    match: Optional[re.Match] = None

    @property
    def is_regex(self) -> bool:
        return self.match is not None

    def group(self, index=0) -> Optional[str]:
        """Captured group for regex matches, or the whole text for prefixes."""
        if self.match is None:
            return self.text if index == 0 else None
        return self.match.group(index)

    @property
    def remainder(self) -> str:
        """Text after the matched prefix."""
        return self.text[len(self.action.pattern):]


class PatternMatcher:
    """
    Matches text against actions.

    Stateless apart from the caches it writes onto the actions.
    """

    def __init__(self):
        self._logger = logging.getLogger("quicklaunch.actions.matcher")

    def compile(self, action: Action) -> Optional[re.Pattern]:
        """
        Return the compiled regex for an action, compiling it if needed.

        Returns None when the pattern does not compile. The failure is
        logged once and remembered until the pattern changes.
        """
        if action.regex is not None:
            return action.regex
        if action.regex_failed:
            return None

        try:
            regex = re.compile(action.pattern)
        except (re.error, OverflowError, RecursionError) as e:
            error = RegexCompileError(action.pattern, str(e))
            self._logger.warning(error.message, extra={"unique_id": action.unique_id})
            action.regex_failed = True
            return None

        action.regex = regex
        return regex

    def match(self, action: Action, text: str) -> Optional[ActionMatch]:
        if action.type == ActionType.PREFIX:
            if text.startswith(action.pattern):
                return ActionMatch(action=action, text=text)
            return None

        regex = self.compile(action)
        if regex is None:
            return None

        found = regex.search(text)
        if found is None:
            return None
        return ActionMatch(action=action, text=text, match=found)
