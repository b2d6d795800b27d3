"""Substitute an input and its regex captures into a rule's command."""

from __future__ import annotations

import re

from rrr.config.models import PreparedCommand, Regex, Rule
from rrr.exceptions import PrepareError
from rrr.utils import shell_quote

INPUT_PLACEHOLDER = "%s"

_PLACEHOLDER_RE = re.compile(r"%(%|s|\d+)")


def capture_groups(rule: Rule, input: str) -> tuple[str, ...]:
    """Regex groups 1..n captured from input; globs capture nothing.

    Unmatched optional groups are left out.
    """
    if not isinstance(rule.pattern, Regex):
        return ()

    flags = re.IGNORECASE if rule.case_insensitive else 0
    try:
        compiled = re.compile(rule.pattern_as_str(), flags)
    except re.error as e:
        raise PrepareError(f"Cannot compile '{rule.pattern_as_str()}': {e}") from e

    found = compiled.search(input)
    if found is None:
        raise PrepareError(
            f"Rule '{rule.describe()}' should match '{input}' in order to capture"
        )
    return tuple(g for g in found.groups() if g is not None)


def substitute(template: str, captures: tuple[str, ...] | list[str], input: str) -> str:
    """Replace %1, %2, ... with quoted captures and %s with the quoted input.

    %% is an escaped literal %. If the template has no %s, the input is
    appended. Unknown %N placeholders are left as they are.
    """
    # Checked on the template, not after captures are substituted: captured
    # text is never scanned for placeholders.
    if not any(m.group(1) == "s" for m in _PLACEHOLDER_RE.finditer(template)):
        template = f"{template} {INPUT_PLACEHOLDER}"

    def replace(m: re.Match[str]) -> str:
        key = m.group(1)
        if key == "%":
            return "%"
        if key == "s":
            return shell_quote(input)
        index = int(key)
        if 1 <= index <= len(captures):
            return shell_quote(captures[index - 1])
        return m.group(0)

    return _PLACEHOLDER_RE.sub(replace, template)


def prepare(rule: Rule, input: str) -> PreparedCommand:
    """Build the ready-to-run command for rule applied to input."""
    captures = capture_groups(rule, input)
    command = substitute(rule.command, captures, input)
    return PreparedCommand(rule=rule, input=input, captures=captures, command=command)
