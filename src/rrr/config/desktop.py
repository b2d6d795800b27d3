"""Desktop entry import (*.desktop -> glob rules).

A desktop entry's Exec line is bound to every file extension registered for
the MIME types it declares:

    [Desktop Entry]
    Exec=zathura %U
    MimeType=application/pdf;application/postscript;

gives rules like '*.pdf -> zathura %s' and '*.ps -> zathura %s'.
"""

from __future__ import annotations

import configparser
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from rrr.config.models import Command, Glob
from rrr.exceptions import ConfigError, MissingAttributeError
from rrr.output import debug

DESKTOP_SUFFIX = ".desktop"
DESKTOP_SECTION = "Desktop Entry"

# File and URL field codes all stand for "the input"
_INPUT_CODES = re.compile(r"%[fFuU]")
# Remaining field codes (icon, name, location, deprecated ones) are dropped
_OTHER_CODES = re.compile(r"\s*%[icdDnNvmk]")


@dataclass
class DesktopEntry:
    """The attributes of a desktop entry that rrr cares about."""

    path: Path
    exec: str | None
    mime_types: list[str]


def is_desktop_file(path: Path) -> bool:
    return path.suffix == DESKTOP_SUFFIX


def normalize_exec(exec_line: str) -> str:
    """Turn desktop field codes into rrr placeholders.

    %f %F %u %U become %s and other codes are removed. %% stays escaped,
    so it reaches the command as a literal %.
    """
    parts = exec_line.split("%%")
    parts = [_OTHER_CODES.sub("", _INPUT_CODES.sub("%s", p)) for p in parts]
    return "%%".join(parts).strip()


def read_desktop_entry(path: Path) -> DesktopEntry:
    """Parse the [Desktop Entry] section of a desktop file.

    Raises ConfigError if the file cannot be read or has no such section.
    """
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    try:
        with open(path, encoding="utf-8") as f:
            parser.read_file(f, source=str(path))
    except (OSError, UnicodeDecodeError, configparser.Error) as e:
        raise ConfigError(f"Cannot read desktop entry '{path}': {e}") from e

    if not parser.has_section(DESKTOP_SECTION):
        raise ConfigError(f"Missing '{DESKTOP_SECTION}' section in '{path}'")

    section = parser[DESKTOP_SECTION]
    mime_types = [m.strip() for m in section.get("MimeType", "").split(";") if m.strip()]
    return DesktopEntry(path=path, exec=section.get("Exec"), mime_types=mime_types)


def extensions_for(mime_type: str) -> list[str]:
    """File extensions (without dot) registered for a MIME type."""
    return [ext.lstrip(".") for ext in mimetypes.guess_all_extensions(mime_type, strict=False)]


def desktop_rules(
    path: Path, ignore_missing_attrs: bool = True
) -> Iterator[tuple[Glob, Command]]:
    """Yield (pattern, action) pairs synthesized from one desktop file.

    Raises MissingAttributeError if Exec or MimeType is missing and
    ignore_missing_attrs is False; otherwise such files yield nothing.
    """
    entry = read_desktop_entry(path)

    if entry.exec is None or not entry.mime_types:
        missing = "Exec" if entry.exec is None else "MimeType"
        if not ignore_missing_attrs:
            raise MissingAttributeError(f"Missing '{missing}' attribute in '{path}'")
        debug(f"[import] {path}: no '{missing}' attribute, skipped")
        return

    command = Command(normalize_exec(entry.exec))

    for mime_type in entry.mime_types:
        for extension in extensions_for(mime_type):
            yield Glob(f"*.{extension}"), command
