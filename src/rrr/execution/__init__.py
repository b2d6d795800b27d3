"""Execution backends."""

from rrr.execution.base import DEFAULT_SHELL, ExecutionMode
from rrr.execution.shell import ShellExecutor, parse_shell

__all__ = [
    "DEFAULT_SHELL",
    "ExecutionMode",
    "ShellExecutor",
    "parse_shell",
]
