"""Rule data model: patterns, actions, provenance.

Patterns and actions are small tagged unions (frozen dataclasses checked with
isinstance). Pattern text is kept raw and only compiled by the rule set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from rrr.exceptions import ResolveError

DEFAULT_PROFILE = "default"


@dataclass(frozen=True)
class Glob:
    """Shell-style glob pattern, matched against the whole input."""

    text: str


@dataclass(frozen=True)
class Regex:
    """Regular expression, searched anywhere in the input."""

    text: str


Pattern = Union[Glob, Regex]


@dataclass(frozen=True)
class Command:
    """Literal shell-command template."""

    text: str


@dataclass(frozen=True)
class AliasRef:
    """Reference to an alias, resolved at build time."""

    identifier: str


Action = Union[Command, AliasRef]


@dataclass(frozen=True)
class ConfigOrigin:
    """Where a declaration came from (diagnostics only)."""

    file: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass(frozen=True)
class Explicit:
    """Rule written directly in a config file."""


@dataclass(frozen=True)
class Imported:
    """Rule synthesized from an imported desktop entry."""

    source: str


RuleOrigin = Union[Explicit, Imported]


@dataclass(frozen=True)
class Rule:
    """A (pattern, action) pair plus provenance.

    ``resolved_command`` stays None until the rule set builder resolves the
    action; the builder then creates a resolved copy with
    ``dataclasses.replace``. Rules are never mutated afterwards.
    """

    pattern: Pattern
    action: Action
    case_insensitive: bool = True
    rule_origin: RuleOrigin = Explicit()
    config_origin: ConfigOrigin | None = None
    resolved_command: str | None = None

    def pattern_as_str(self) -> str:
        return self.pattern.text

    @property
    def is_regex(self) -> bool:
        return isinstance(self.pattern, Regex)

    @property
    def is_resolved(self) -> bool:
        return self.resolved_command is not None

    @property
    def command(self) -> str:
        """The resolved command template."""
        if self.resolved_command is None:
            raise ResolveError(f"Rule '{self.describe()}' has not been resolved")
        return self.resolved_command

    def describe(self) -> str:
        """Short human-readable form, e.g. '*.pdf -> @viewer (rrr.conf:3:1)'."""
        prefix = "~" if self.is_regex else ""
        if isinstance(self.action, AliasRef):
            target = f"@{self.action.identifier}"
        else:
            target = self.action.text
        where = f" ({self.config_origin})" if self.config_origin else ""
        if isinstance(self.rule_origin, Imported):
            where += f" [imported from {self.rule_origin.source}]"
        return f"{prefix}{self.pattern_as_str()} -> {target}{where}"


@dataclass(frozen=True)
class PreparedCommand:
    """A rule's command with one input substituted, ready to execute.

    Built fresh for every (rule, input) pair, so a shared rule can be
    dispatched any number of times.
    """

    rule: Rule
    input: str
    captures: tuple[str, ...]
    command: str
