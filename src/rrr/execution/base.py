"""Execution modes and defaults."""

from __future__ import annotations

from enum import Enum

DEFAULT_SHELL = ["sh", "-c"]


class ExecutionMode(str, Enum):
    """How a prepared command is run.

    EXEC replaces the current process and never returns on success.
    FORK starts a child and returns without waiting.
    WAIT starts a child, waits, and fails on a non-zero exit.
    """

    EXEC = "exec"
    FORK = "fork"
    WAIT = "wait"

    @property
    def reports_failure(self) -> bool:
        """Whether a failed command can be observed by the caller."""
        return self is not ExecutionMode.EXEC
