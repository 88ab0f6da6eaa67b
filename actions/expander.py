"""
Command Expander
----------------
Turns an action's command template into the command line to run.

Prefix templates:
    %s  text after the prefix, leading whitespace removed
    %S  the whole text
    %%  a literal percent sign
    %x  any other character: dropped

Regex templates use back-references against the match:
    \\0 .. \\99, \\g<n>, \\g<name>   captured groups (missing groups expand to "")
    \\0ooo                        octal character code (\\0 alone is the whole match)
    \\xHH \\x{HHHH}                hexadecimal character code
    \\\\ \\n \\t \\r \\f \\v \\a        escaped characters
    \\l \\u                       lower/upper case the next character
    \\L \\U ... \\E                lower/upper case until \\E
"""

from typing import List, Optional, Tuple
import re

from core.errors import RegexExpansionError

from .matcher import ActionMatch
from .models import Action, ActionType

_OCTAL_DIGITS = "01234567"
_HEX_DIGITS = "0123456789abcdefABCDEF"

_SIMPLE_ESCAPES = {
    "\\": "\\",
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "f": "\f",
    "v": "\v",
    "a": "\a",
}


def expand_prefix_command(command: str, pattern: str, text: str) -> str:
    parts: List[str] = []
    i = 0
    length = len(command)

    while i < length:
        char = command[i]
        if char == "%" and i + 1 < length:
            token = command[i + 1]
            if token == "s":
                parts.append(text[len(pattern):].lstrip(" \t\n\r\f\v"))
            elif token == "S":
                parts.append(text)
            elif token == "%":
                parts.append("%")
            i += 2
        else:
            parts.append(char)
            i += 1

    return "".join(parts)


class _CaseState:
    """Tracks \\l \\u \\L \\U \\E while building the result."""

    def __init__(self):
        self.mode: Optional[str] = None
        self.once: Optional[str] = None

    def apply(self, value: str) -> str:
        if not value:
            return value
        if self.mode == "L":
            value = value.lower()
        elif self.mode == "U":
            value = value.upper()
        if self.once == "l":
            value = value[0].lower() + value[1:]
            self.once = None
        elif self.once == "u":
            value = value[0].upper() + value[1:]
            self.once = None
        return value


def _fetch_group(match: re.Match, ref) -> str:
    try:
        value = match.group(ref)
    except IndexError:
        # no such group
        return ""
    return value or ""


def _read_hex(command: str, start: int) -> Tuple[str, int]:
    """Read \\xHH or \\x{H...} at start; returns the character and the next index."""
    i = start + 2
    if command.startswith("{", i):
        close = command.find("}", i + 1)
        digits = command[i + 1:close] if close != -1 else ""
        if not digits or any(c not in _HEX_DIGITS for c in digits):
            raise RegexExpansionError(command, start, "hexadecimal digit or '}' expected")
        end = close + 1
    else:
        digits = command[i:i + 2]
        if len(digits) < 2 or any(c not in _HEX_DIGITS for c in digits):
            raise RegexExpansionError(command, start, "hexadecimal digit expected")
        end = i + 2

    code = int(digits, 16)
    if code > 0x10FFFF:
        raise RegexExpansionError(command, start, "character value out of range")
    return chr(code), end


def expand_references(command: str, match: re.Match) -> str:
    """
    Expand back-references in command against match.

    Raises:
        RegexExpansionError: on a trailing backslash, an unknown escape,
            a malformed \\g<...> reference or a bad \\x code.
    """
    result: List[str] = []
    case = _CaseState()
    i = 0
    length = len(command)

    while i < length:
        char = command[i]
        if char != "\\":
            result.append(case.apply(char))
            i += 1
            continue

        if i + 1 >= length:
            raise RegexExpansionError(command, i, "stray final '\\'")

        token = command[i + 1]

        if token == "0":
            end = i + 2
            while end < min(i + 5, length) and command[end] in _OCTAL_DIGITS:
                end += 1
            if end > i + 2:
                result.append(case.apply(chr(int(command[i + 2:end], 8))))
            else:
                result.append(case.apply(_fetch_group(match, 0)))
            i = end
        elif token.isdigit() and token.isascii():
            end = i + 2
            if end < length and command[end].isdigit() and command[end].isascii():
                end += 1
            result.append(case.apply(_fetch_group(match, int(command[i + 1:end]))))
            i = end
        elif token == "g":
            if i + 2 >= length or command[i + 2] != "<":
                raise RegexExpansionError(command, i, "missing '<' in symbolic reference")
            close = command.find(">", i + 3)
            if close == -1:
                raise RegexExpansionError(command, i, "unfinished symbolic reference")
            name = command[i + 3:close]
            if name.isdigit() and name.isascii():
                ref = int(name)
            elif name.isidentifier():
                ref = name
            else:
                raise RegexExpansionError(command, i, f"malformed symbolic reference '{name}'")
            result.append(case.apply(_fetch_group(match, ref)))
            i = close + 1
        elif token == "x":
            value, i = _read_hex(command, i)
            result.append(case.apply(value))
        elif token in _SIMPLE_ESCAPES:
            result.append(case.apply(_SIMPLE_ESCAPES[token]))
            i += 2
        elif token in ("l", "u"):
            case.once = token
            i += 2
        elif token in ("L", "U"):
            case.mode = token
            i += 2
        elif token == "E":
            case.mode = None
            i += 2
        else:
            raise RegexExpansionError(command, i, f"unknown escape sequence '\\{token}'")

    return "".join(result)


def expand_command(action: Action, found: ActionMatch) -> str:
    """Expand the action's template with the syntax for its type."""
    if action.type == ActionType.PREFIX:
        return expand_prefix_command(action.command, action.pattern, found.text)
    if found.match is None:
        raise ValueError(f"Regex action {action.unique_id} expanded without a match")
    return expand_references(action.command, found.match)
