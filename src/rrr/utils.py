"""Utility functions."""

from __future__ import annotations

import os
import shlex
from pathlib import Path

IDENTIFIER_CHARS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-"


def shell_quote(s: str) -> str:
    """Quote a string for safe use as one shell word (only if needed)."""
    return shlex.quote(s)


def unquote(s: str) -> str:
    """Remove shell quotes from a string, e.g. '"hello world"' -> 'hello world'.

    Raises ValueError if the string is not exactly one shell word.
    """
    try:
        parts = shlex.split(s)
    except ValueError as e:
        raise ValueError(f"invalid quoted string {s!r}: {e}") from e
    if len(parts) != 1:
        raise ValueError(f"invalid quoted string {s!r}")
    return parts[0]


def is_quoted(s: str) -> bool:
    """True if s starts with a single or double quote."""
    return s[:1] in ("'", '"')


def is_identifier(s: str) -> bool:
    """Check alias identifier syntax: [A-Za-z_][A-Za-z0-9_-]*."""
    if not s or s[0].isdigit() or s[0] == "-":
        return False
    return all(c in IDENTIFIER_CHARS for c in s)


def parse_bool(value: str) -> bool:
    """Parse a boolean from an environment-style string.

    Raises ValueError if the value is not recognized.
    """
    lower = value.strip().lower()
    if lower in ("1", "true", "yes", "on"):
        return True
    if lower in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"Invalid boolean value: '{value}' (use true/false)")


def expand_path(path: str | Path) -> Path:
    """Expand ~ and $VARS in a path."""
    return Path(os.path.expandvars(os.path.expanduser(str(path))))
