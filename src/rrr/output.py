"""Colored output utilities and logging."""

from __future__ import annotations

import logging
import sys

# ANSI color codes
RED = "\033[31m"
YELLOW = "\033[33m"
CYAN = "\033[36m"
DIM = "\033[2m"
NC = "\033[0m"  # No color / reset

# Module logger
_logger = logging.getLogger("rrr")


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors to log levels."""

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        if not _supports_color():
            return msg
        if record.levelno >= logging.ERROR:
            return f"{RED}{msg}{NC}"
        elif record.levelno >= logging.WARNING:
            return f"{YELLOW}{msg}{NC}"
        elif record.levelno <= logging.DEBUG:
            return f"{DIM}{msg}{NC}"
        return msg


def verbosity_to_level(verbosity: int) -> int:
    """Map the number of -v flags to a logging level."""
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(verbosity: int = 0) -> None:
    """Configure logging for rrr.

    Args:
        verbosity: Number of -v flags. 0 shows warnings, 1 info, 2+ debug.
    """
    level = verbosity_to_level(verbosity)
    _logger.setLevel(level)

    # Only add handler if none exist
    if not _logger.handlers:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(ColoredFormatter("%(levelname)s %(message)s"))
        _logger.addHandler(stream_handler)
    else:
        # Update existing handler level
        for h in _logger.handlers:
            h.setLevel(level)


def get_logger() -> logging.Logger:
    """Get the rrr logger for use in other modules."""
    return _logger


def debug(msg: str) -> None:
    """Log debug message (only shown with -vv)."""
    _logger.debug(msg)


def _supports_color(stream: object = None) -> bool:
    """Check if stream supports color."""
    if stream is None:
        stream = sys.stderr
    isatty = getattr(stream, "isatty", None)
    if isatty is None or not callable(isatty):
        return False
    return bool(isatty())


def _colorize(color: str, text: str, stream: object = None) -> str:
    """Wrap text in color codes if stream supports it."""
    if _supports_color(stream):
        return f"{color}{text}{NC}"
    return text


def error(msg: str) -> None:
    """Print error message. The caller decides the exit code."""
    print(_colorize(RED, f"error: {msg}"), file=sys.stderr)


def warn(msg: str) -> None:
    """Print warning message."""
    print(_colorize(YELLOW, f"warning: {msg}"), file=sys.stderr)
