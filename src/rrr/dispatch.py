"""Match inputs against a profile and run the selected command."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, TextIO

from rrr.config.models import DEFAULT_PROFILE, Rule
from rrr.exceptions import ExecutionError
from rrr.execution import ExecutionMode, ShellExecutor
from rrr.output import get_logger
from rrr.rules.book import RuleBook
from rrr.rules.prepare import prepare

_logger = get_logger()


class Outcome(str, Enum):
    """What happened to one input."""

    EXECUTED = "executed"
    SKIPPED = "skipped"  # dry-run or query: matched but not run
    NO_MATCH = "no_match"


@dataclass
class DispatchOptions:
    """Dispatch policy.

    fallback: on failure, try the next matching rule. EXEC mode is run as
        WAIT in that case, since a replaced process can't report failure.
    query: print the prepared command instead of running it.
    dry_run: match and prepare only.
    """

    fallback: bool = False
    mode: ExecutionMode = ExecutionMode.EXEC
    dry_run: bool = False
    query: bool = False

    @property
    def effective_mode(self) -> ExecutionMode:
        if self.fallback and not self.mode.reports_failure:
            return ExecutionMode.WAIT
        return self.mode

    @property
    def executes(self) -> bool:
        return not (self.dry_run or self.query)


class Dispatcher:
    """Dispatch inputs one at a time against a single profile."""

    def __init__(
        self,
        rule_book: RuleBook,
        profile: str = DEFAULT_PROFILE,
        executor: ShellExecutor | None = None,
        options: DispatchOptions | None = None,
        out: TextIO | None = None,
    ):
        self.rule_set = rule_book.profile(profile)
        self.profile = profile
        self.executor = executor or ShellExecutor()
        self.options = options or DispatchOptions()
        self.out = out

        if self.options.effective_mode is not self.options.mode:
            _logger.debug(
                f"fallback requested: running commands in "
                f"{self.options.effective_mode.value} mode instead of {self.options.mode.value}"
            )

    def dispatch(self, input: str) -> Outcome:
        """Process one input.

        Raises ExecutionError when the selected command fails (or, with
        fallback, when every matching command failed).
        """
        if self.options.fallback:
            return self._dispatch_with_fallback(input)
        return self._dispatch_without_fallback(input)

    def dispatch_all(self, inputs: Iterable[str]) -> list[Outcome]:
        """Process inputs strictly in order, stopping at the first error."""
        return [self.dispatch(input) for input in inputs]

    def _dispatch_without_fallback(self, input: str) -> Outcome:
        rule = self.rule_set.match_one(input)
        if rule is None:
            _logger.warning(f"no match for '{input}'")
            return Outcome.NO_MATCH
        return self._process_rule(input, rule)

    def _dispatch_with_fallback(self, input: str) -> Outcome:
        candidates = self.rule_set.matches(input)
        if not candidates:
            _logger.warning(f"no match for '{input}'")
            return Outcome.NO_MATCH

        outcome = Outcome.SKIPPED
        failures = 0
        for rule in candidates:
            try:
                outcome = self._process_rule(input, rule)
            except ExecutionError as e:
                failures += 1
                _logger.info(f"execution failed (continuing with next match): {e.message}")
                continue
            if outcome is Outcome.EXECUTED:
                return outcome

        if failures:
            raise ExecutionError(
                f"All {failures} matching rules failed for '{input}'"
            )
        return outcome

    def _process_rule(self, input: str, rule: Rule) -> Outcome:
        _logger.debug(f"matched rule for '{input}': {rule.describe()}")
        prepared = prepare(rule, input)

        if self.options.query:
            print(prepared.command, file=self.out or sys.stdout)
            return Outcome.SKIPPED
        if self.options.dry_run:
            _logger.info(f"dry-run '{prepared.command}'")
            return Outcome.SKIPPED

        mode = self.options.effective_mode
        _logger.info(f"{mode.value} '{prepared.command}'")
        try:
            self.executor.run(prepared.command, mode)
        except ExecutionError as e:
            raise ExecutionError(f"executing '{prepared.command}': {e.message}", e.exit_code)
        return Outcome.EXECUTED
