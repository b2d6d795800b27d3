"""Profile name -> compiled RuleSet."""

from __future__ import annotations

from rrr.config.models import DEFAULT_PROFILE
from rrr.exceptions import ProfileError
from rrr.rules.rule_set import RuleSet


class RuleBook:
    """Every profile built from the loaded configuration."""

    def __init__(self, rule_sets: dict[str, RuleSet]):
        self._rule_sets = dict(rule_sets)

    def __contains__(self, profile: object) -> bool:
        return profile in self._rule_sets

    @property
    def profiles(self) -> list[str]:
        return sorted(self._rule_sets)

    def profile(self, name: str = DEFAULT_PROFILE) -> RuleSet:
        """Get the rule set of a profile.

        Raises ProfileError if the profile was never declared.
        """
        rule_set = self._rule_sets.get(name)
        if rule_set is None:
            raise ProfileError(f"Profile '{name}' does not exist")
        return rule_set
