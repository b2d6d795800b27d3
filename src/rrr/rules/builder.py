"""Per-profile rule accumulation and alias resolution."""

from __future__ import annotations

from dataclasses import replace

from rrr.config.models import (
    Action,
    AliasRef,
    Command,
    ConfigOrigin,
    Explicit,
    Pattern,
    Regex,
    Rule,
    RuleOrigin,
)
from rrr.exceptions import UnresolvedAliasError
from rrr.output import debug
from rrr.rules.rule_set import RuleSet


def resolve_rule(rule: Rule, aliases: dict[str, str], profile: str) -> Rule:
    """Return a copy of rule with its action turned into a command template.

    Raises UnresolvedAliasError if the rule references an unknown alias.
    """
    action = rule.action
    if isinstance(action, Command):
        command = action.text
    elif isinstance(action, AliasRef):
        if action.identifier not in aliases:
            where = f" ({rule.config_origin})" if rule.config_origin else ""
            raise UnresolvedAliasError(
                f"Alias '{action.identifier}' does not exist in profile '{profile}'{where}"
            )
        command = aliases[action.identifier]
    else:
        raise TypeError(f"Unknown action type: {type(action).__name__}")
    return replace(rule, resolved_command=command)


class RuleSetBuilder:
    """Collects aliases and rules of one profile in declaration order."""

    def __init__(self, profile: str, case_insensitive: bool = True):
        self.profile = profile
        self.case_insensitive = case_insensitive
        self.aliases: dict[str, str] = {}
        self.regex_rules: list[Rule] = []
        self.glob_rules: list[Rule] = []

    def __len__(self) -> int:
        return len(self.regex_rules) + len(self.glob_rules)

    def alias(self, identifier: str, command: str) -> None:
        """Define (or redefine) an alias. Later definitions win."""
        if identifier in self.aliases:
            debug(f"[{self.profile}] alias '{identifier}' redefined")
        self.aliases[identifier] = command

    def rule(
        self,
        pattern: Pattern,
        action: Action,
        config_origin: ConfigOrigin | None = None,
        rule_origin: RuleOrigin = Explicit(),
    ) -> Rule:
        """Append a rule using this profile's case sensitivity."""
        rule = Rule(
            pattern=pattern,
            action=action,
            case_insensitive=self.case_insensitive,
            rule_origin=rule_origin,
            config_origin=config_origin,
        )
        self.add(rule)
        return rule

    def add(self, rule: Rule) -> None:
        if isinstance(rule.pattern, Regex):
            self.regex_rules.append(rule)
        else:
            self.glob_rules.append(rule)

    def resolve(self) -> tuple[list[Rule], list[Rule]]:
        """Resolve every rule. Returns (regex_rules, glob_rules) in declaration order."""
        regex_rules = [resolve_rule(r, self.aliases, self.profile) for r in self.regex_rules]
        glob_rules = [resolve_rule(r, self.aliases, self.profile) for r in self.glob_rules]
        return regex_rules, glob_rules

    def build(self) -> RuleSet:
        """Resolve and compile into a RuleSet.

        Rules are reversed so the most recently declared rule of each kind
        has the highest priority.
        """
        regex_rules, glob_rules = self.resolve()
        regex_rules.reverse()
        glob_rules.reverse()
        debug(
            f"[{self.profile}] building {len(regex_rules)} regex and "
            f"{len(glob_rules)} glob rules"
        )
        return RuleSet(
            self.profile,
            regex_rules=regex_rules,
            glob_rules=glob_rules,
            case_insensitive=self.case_insensitive,
        )
