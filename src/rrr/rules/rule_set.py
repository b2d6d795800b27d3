"""Compiled, read-only rule matching for one profile."""

from __future__ import annotations

import fnmatch
import re

from rrr.config.models import Rule
from rrr.exceptions import CompileError


def expand_braces(pattern: str) -> list[str]:
    """Expand {a,b} alternatives in a glob, e.g. '*.{jpg,png}'.

    Braces without a top-level comma, or without a closing brace, are kept
    literally.
    """
    start = pattern.find("{")
    while start != -1:
        depth = 0
        commas: list[int] = []
        for i in range(start, len(pattern)):
            c = pattern[i]
            if c == "{":
                depth += 1
            elif c == "," and depth == 1:
                commas.append(i)
            elif c == "}":
                depth -= 1
                if depth == 0:
                    if commas:
                        head, tail = pattern[:start], pattern[i + 1:]
                        bounds = [start, *commas, i]
                        expanded: list[str] = []
                        for a, b in zip(bounds, bounds[1:]):
                            expanded.extend(expand_braces(head + pattern[a + 1:b] + tail))
                        return expanded
                    break
        start = pattern.find("{", start + 1)
    return [pattern]


def glob_to_regex(pattern: str) -> str:
    """Translate a glob (with brace alternatives) into an anchored regex."""
    return "|".join(fnmatch.translate(p) for p in expand_braces(pattern))


def _compile(rule: Rule, source: str, flags: int, profile: str) -> re.Pattern[str]:
    try:
        return re.compile(source, flags)
    except re.error as e:
        where = f" ({rule.config_origin})" if rule.config_origin else ""
        raise CompileError(
            f"Invalid pattern '{rule.pattern_as_str()}' in profile '{profile}'{where}: {e}"
        ) from e


class RuleSet:
    """Matches inputs against a profile's rules.

    Both rule lists are given in priority order (highest first). Regex rules
    always take priority over glob rules.
    """

    def __init__(
        self,
        profile: str,
        regex_rules: list[Rule],
        glob_rules: list[Rule],
        case_insensitive: bool = True,
    ):
        self.profile = profile
        self.case_insensitive = case_insensitive
        flags = re.IGNORECASE if case_insensitive else 0

        self._regex: list[tuple[re.Pattern[str], Rule]] = [
            (_compile(rule, rule.pattern_as_str(), flags, profile), rule)
            for rule in regex_rules
        ]
        self._glob: list[tuple[re.Pattern[str], Rule]] = [
            (_compile(rule, glob_to_regex(rule.pattern_as_str()), flags, profile), rule)
            for rule in glob_rules
        ]

    def __len__(self) -> int:
        return len(self._regex) + len(self._glob)

    @property
    def rules(self) -> list[Rule]:
        """All rules in priority order."""
        return [rule for _, rule in self._regex] + [rule for _, rule in self._glob]

    def _match_regex(self, input: str) -> list[Rule]:
        return [rule for compiled, rule in self._regex if compiled.search(input)]

    def _match_glob(self, input: str) -> list[Rule]:
        return [rule for compiled, rule in self._glob if compiled.match(input)]

    def match_one(self, input: str) -> Rule | None:
        """Return the highest-priority matching rule, or None."""
        for compiled, rule in self._regex:
            if compiled.search(input):
                return rule
        for compiled, rule in self._glob:
            if compiled.match(input):
                return rule
        return None

    def matches(self, input: str) -> list[Rule]:
        """Return every matching rule: regex hits first, then glob hits."""
        return self._match_regex(input) + self._match_glob(input)
