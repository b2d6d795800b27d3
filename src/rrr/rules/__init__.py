"""Rule engine: builder, compiled rule sets, preparation."""

from rrr.rules.book import RuleBook
from rrr.rules.builder import RuleSetBuilder, resolve_rule
from rrr.rules.prepare import capture_groups, prepare, substitute
from rrr.rules.rule_set import RuleSet, expand_braces, glob_to_regex

__all__ = [
    "RuleBook",
    "RuleSet",
    "RuleSetBuilder",
    "capture_groups",
    "expand_braces",
    "glob_to_regex",
    "prepare",
    "resolve_rule",
    "substitute",
]
