"""Run prepared commands through a shell."""

from __future__ import annotations

import os
import shlex
import signal
import subprocess
import sys

from rrr.exceptions import ExecutionError, ValidationError
from rrr.execution.base import DEFAULT_SHELL, ExecutionMode
from rrr.output import debug


def parse_shell(value: str) -> list[str]:
    """Split a shell override like "bash -c" into an argv prefix.

    Raises ValidationError if it cannot be split or is empty.
    """
    try:
        argv = shlex.split(value)
    except ValueError as e:
        raise ValidationError(f"Invalid shell substitute '{value}': {e}")
    if not argv:
        raise ValidationError("Provided shell should have at least one argument")
    return argv


def _describe_status(returncode: int) -> str:
    if returncode < 0:
        try:
            name = signal.Signals(-returncode).name
        except ValueError:
            name = str(-returncode)
        return f"killed by signal {name}"
    return f"exited with status {returncode}"


class ShellExecutor:
    """Execute command strings as `<shell...> <command>`."""

    def __init__(self, shell: list[str] | None = None):
        if shell is not None and not shell:
            raise ValidationError("Provided shell should have at least one argument")
        self.shell = list(shell) if shell else list(DEFAULT_SHELL)

    def argv(self, command: str) -> list[str]:
        return [*self.shell, command]

    def run(self, command: str, mode: ExecutionMode) -> None:
        """Run command. Returns normally on success (never, for EXEC).

        Raises ExecutionError if the shell can't be started or, in WAIT
        mode, if the command fails.
        """
        argv = self.argv(command)
        debug(f"[exec] {mode.value}: {argv}")

        if mode is ExecutionMode.EXEC:
            self._exec(argv)
        elif mode is ExecutionMode.FORK:
            self._fork(argv)
        else:
            self._wait(argv)

    def _exec(self, argv: list[str]) -> None:
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            os.execvp(argv[0], argv)
        except OSError as e:
            raise ExecutionError(f"Cannot execute '{argv[0]}': {e}")

    def _fork(self, argv: list[str]) -> None:
        try:
            subprocess.Popen(argv)
        except OSError as e:
            raise ExecutionError(f"Cannot execute '{argv[0]}': {e}")

    def _wait(self, argv: list[str]) -> None:
        try:
            result = subprocess.run(argv)
        except OSError as e:
            raise ExecutionError(f"Cannot execute '{argv[0]}': {e}")
        if result.returncode != 0:
            raise ExecutionError(
                f"Command '{argv[-1]}' {_describe_status(result.returncode)}",
                exit_code=result.returncode if result.returncode > 0 else 1,
            )
