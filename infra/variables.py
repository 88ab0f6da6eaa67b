"""
Variable expansion for command lines.

Expands '~' at the start of a word to the home directory and
$VAR / ${VAR} to environment values. Unknown variables are kept.
"""

from typing import Mapping, Optional
import os
import re

_VARIABLE_RE = re.compile(r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)\}|(?P<name>[A-Za-z_][A-Za-z0-9_]*))")
_TILDE_RE = re.compile(r"(?:(?<=\s)|^)~(?=/|\s|$)")


def expand_variables(command: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Return command with home directory and environment variables resolved."""
    env = os.environ if environ is None else environ

    home = env.get("HOME") or os.path.expanduser("~")
    command = _TILDE_RE.sub(lambda _m: home, command)

    def _replace(match: re.Match) -> str:
        name = match.group("braced") or match.group("name")
        return env.get(name, match.group(0))

    return _VARIABLE_RE.sub(_replace, command)
