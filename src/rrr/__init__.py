"""rrr - run the right command for a file, based on glob and regex rules."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("runrunrun")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"  # Fallback for editable installs without scm
