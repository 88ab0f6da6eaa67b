"""
Command Expander Tests
----------------------
Prefix %-tokens and regex back-references.
"""

import re

import pytest

from actions.expander import expand_command, expand_prefix_command, expand_references
from actions.matcher import PatternMatcher
from actions.models import Action, ActionType
from core.errors import RegexExpansionError


class TestPrefixExpansion:

    def test_remainder_trimmed(self):
        assert expand_prefix_command("term %s", "!", "!   ls -la") == "term ls -la"

    def test_remainder_keeps_trailing_space(self):
        assert expand_prefix_command("[%s]", "!", "! ls ") == "[ls ]"

    def test_remainder_keeps_unicode_space(self):
        assert expand_prefix_command("[%s]", "!", "! \u00a0x") == "[\u00a0x]"

    def test_full_text(self):
        assert expand_prefix_command("echo %S", "!", "! hi") == "echo ! hi"

    def test_percent(self):
        assert expand_prefix_command("100%% %s", "#", "#x") == "100% x"

    def test_unknown_token_dropped(self):
        assert expand_prefix_command("a%qb", "!", "!x") == "ab"

    def test_trailing_percent_kept(self):
        assert expand_prefix_command("50%", "!", "!x") == "50%"

    def test_multiple_tokens(self):
        assert expand_prefix_command("%s|%S|%s", "!w", "!w foo") == "foo|!w foo|foo"

    def test_empty_remainder(self):
        assert expand_prefix_command("man %s", "#", "#") == "man "

    def test_web_search(self):
        command = "exo-open --launch WebBrowser http://en.wikipedia.org/wiki/%s"
        assert expand_prefix_command(command, "!w", "!w foo") == (
            "exo-open --launch WebBrowser http://en.wikipedia.org/wiki/foo"
        )


def _match(pattern, text):
    found = re.search(pattern, text)
    assert found is not None
    return found


class TestReferenceExpansion:

    def test_whole_match(self):
        assert expand_references(r"exo-open \0", _match(r"^(http)://(.*)$", "http://a.b")) == (
            "exo-open http://a.b"
        )

    def test_numbered_groups(self):
        found = _match(r"^(\w+)-(\w+)$", "left-right")
        assert expand_references(r"\2 \1", found) == "right left"

    def test_two_digit_group(self):
        pattern = "".join(f"({c})" for c in "abcdefghijk")
        found = _match(pattern, "abcdefghijk")
        assert expand_references(r"\11\10", found) == "kj"

    def test_missing_group_empty(self):
        assert expand_references(r"[\5]", _match("(a)", "a")) == "[]"

    def test_unmatched_group_empty(self):
        assert expand_references(r"[\2]", _match("(a)|(b)", "a")) == "[]"

    def test_symbolic_number(self):
        assert expand_references(r"\g<1>0", _match("(x)", "x")) == "x0"

    def test_symbolic_name(self):
        found = _match(r"(?P<host>[a-z.]+)", "example.org")
        assert expand_references(r"ping \g<host>", found) == "ping example.org"

    def test_symbolic_unknown_name_empty(self):
        assert expand_references(r"[\g<nope>]", _match("(a)", "a")) == "[]"

    def test_escapes(self):
        assert expand_references(r"a\\b\tc\nd", _match("x", "x")) == "a\\b\tc\nd"

    def test_case_conversion(self):
        found = _match(r"(\w+) (\w+)", "hello world")
        assert expand_references(r"\u\1 \U\2\E!", found) == "Hello WORLD!"
        assert expand_references(r"\L\0", _match("ABC", "ABC")) == "abc"
        assert expand_references(r"\l\0", _match("ABC", "ABC")) == "aBC"

    def test_octal_after_zero(self):
        found = _match(r"(a)", "a")
        assert expand_references(r"\0101", found) == "A"
        assert expand_references(r"\01", found) == "\x01"
        assert expand_references(r"\08", found) == "a8"

    def test_hex_escapes(self):
        found = _match("x", "x")
        assert expand_references(r"\x41\x{263A}", found) == "A\u263a"

    def test_percent_is_literal(self):
        assert expand_references(r"%s \0", _match("a", "a")) == "%s a"

    @pytest.mark.parametrize("template", [
        "trailing \\",
        r"unknown \q escape",
        r"\g1",
        r"\g<1",
        r"\g<bad name>",
        r"\g<>",
        r"\x4",
        r"\xZZ",
        r"\x{41",
        r"\x{}",
    ])
    def test_malformed(self, template):
        with pytest.raises(RegexExpansionError) as exc_info:
            expand_references(template, _match("(a)", "a"))
        assert exc_info.value.template == template


class TestExpandCommand:

    def test_prefix_action(self):
        action = Action(ActionType.PREFIX, 1, "#", "man %s")
        found = PatternMatcher().match(action, "# ls")
        assert expand_command(action, found) == "man ls"

    def test_regex_action(self):
        action = Action(ActionType.REGEX, 1, r"^(file|http|https):\/\/(.*)$", r"exo-open \0")
        found = PatternMatcher().match(action, "https://python.org")
        assert expand_command(action, found) == "exo-open https://python.org"

    def test_regex_action_ignores_percent_tokens(self):
        action = Action(ActionType.REGEX, 1, "^(.*)$", r"echo %s \1")
        found = PatternMatcher().match(action, "hi")
        assert expand_command(action, found) == "echo %s hi"
