"""Line lexer for rrr configuration files.

Format:
    # comment
    :include ~/.config/rrr.d
    :import /usr/share/applications
    :profile work
    viewer = zathura --fork
    *.pdf -> @viewer
    ~^https?://(.*)$ -> firefox %s
    "*.tar.gz" -> 'tar xzf'

Every non-blank, non-comment line becomes exactly one record. Malformed
lines become InvalidLine records; raising is left to the loader.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Union

from rrr.config.models import Action, AliasRef, Command, ConfigOrigin, Glob, Pattern, Regex
from rrr.utils import is_identifier, is_quoted, unquote

META_DIRECTIVES = ("include", "import", "profile")

REGEX_PREFIX = "~"
ALIAS_PREFIX = "@"

_ALIAS_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_-]*)\s*=\s*(.*)$")
_ARROW_RE = re.compile(r"\s+->\s+")


@dataclass(frozen=True)
class MetaLine:
    """:include, :import or :profile directive."""

    directive: str
    argument: str
    origin: ConfigOrigin


@dataclass(frozen=True)
class AliasLine:
    """identifier = command"""

    identifier: str
    value: str
    origin: ConfigOrigin


@dataclass(frozen=True)
class MatchLine:
    """pattern -> command | @alias"""

    pattern: Pattern
    action: Action
    origin: ConfigOrigin


@dataclass(frozen=True)
class InvalidLine:
    """A line that could not be parsed.

    kind is one of "meta", "alias", "string" or "line".
    """

    kind: str
    text: str
    origin: ConfigOrigin


ConfigLine = Union[MetaLine, AliasLine, MatchLine, InvalidLine]


def tokenize(text: str, file: str) -> Iterator[ConfigLine]:
    """Yield one record per meaningful line of text."""
    for lineno, line in enumerate(text.splitlines(), start=1):
        record = tokenize_line(line, file, lineno)
        if record is not None:
            yield record


def tokenize_line(line: str, file: str, lineno: int) -> ConfigLine | None:
    """Classify a single line. Returns None for blank lines and comments."""
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    column = len(line) - len(line.lstrip()) + 1
    origin = ConfigOrigin(file=file, line=lineno, column=column)

    if stripped.startswith(":"):
        return _tokenize_meta(stripped, origin)

    # An unquoted arrow makes it a match line, even if the pattern contains "="
    split = _split_match(stripped)
    alias = _ALIAS_RE.match(stripped)
    if alias and (split is None or _is_single_string(alias.group(2).strip())):
        return _tokenize_alias(stripped, alias.group(1), alias.group(2).strip(), origin)

    if split is not None:
        return _tokenize_match(split[0], split[1], origin)

    if "=" in stripped:
        return InvalidLine("alias", stripped, origin)
    return InvalidLine("line", stripped, origin)


def _parse_string(text: str) -> str:
    """Unquote text if it is a single quoted word, otherwise return it unchanged.

    Raises ValueError for an unterminated leading quote.
    """
    if not is_quoted(text):
        return text
    end = _closing_quote(text, 0)
    if end < 0:
        raise ValueError(f"unterminated quote in {text!r}")
    if end != len(text):
        return text
    return unquote(text)


def _tokenize_meta(stripped: str, origin: ConfigOrigin) -> ConfigLine:
    parts = stripped[1:].split(None, 1)
    if len(parts) != 2 or parts[0] not in META_DIRECTIVES:
        return InvalidLine("meta", stripped, origin)

    directive, raw_arg = parts[0], parts[1].strip()
    try:
        argument = _parse_string(raw_arg)
    except ValueError:
        return InvalidLine("string", raw_arg, origin)

    if not argument:
        return InvalidLine("meta", stripped, origin)
    if directive == "profile" and not is_quoted(raw_arg) and any(c.isspace() for c in argument):
        return InvalidLine("meta", stripped, origin)
    return MetaLine(directive, argument, origin)


def _tokenize_alias(stripped: str, identifier: str, raw_value: str, origin: ConfigOrigin) -> ConfigLine:
    if not raw_value:
        return InvalidLine("alias", stripped, origin)
    try:
        value = _parse_string(raw_value)
    except ValueError:
        return InvalidLine("string", raw_value, origin)
    return AliasLine(identifier, value, origin)


def _is_single_string(text: str) -> bool:
    return is_quoted(text) and _closing_quote(text, 0) == len(text)


def _closing_quote(text: str, start: int) -> int:
    """Index just past the quoted string opening at text[start], or -1."""
    quote = text[start]
    i = start + 1
    while i < len(text):
        if quote == '"' and text[i] == "\\":
            i += 2
            continue
        if text[i] == quote:
            return i + 1
        i += 1
    return -1


def _split_match(stripped: str) -> tuple[str, str] | None:
    """Split 'pattern -> target' on the first arrow outside a quoted pattern."""
    offset = 0
    body_start = 1 if stripped.startswith(REGEX_PREFIX) else 0
    if is_quoted(stripped[body_start:]):
        offset = _closing_quote(stripped, body_start)
        if offset < 0:
            offset = 0

    arrow = _ARROW_RE.search(stripped, offset)
    if arrow is None:
        return None
    return stripped[: arrow.start()], stripped[arrow.end():].strip()


def _tokenize_match(raw_pattern: str, raw_target: str, origin: ConfigOrigin) -> ConfigLine:
    is_regex = raw_pattern.startswith(REGEX_PREFIX)
    body = raw_pattern[1:] if is_regex else raw_pattern

    try:
        text = _parse_string(body)
    except ValueError:
        return InvalidLine("string", body, origin)
    if not text:
        return InvalidLine("line", f"{raw_pattern} -> {raw_target}", origin)

    pattern: Pattern = Regex(text) if is_regex else Glob(text)

    if raw_target.startswith(ALIAS_PREFIX):
        identifier = raw_target[1:]
        if not is_identifier(identifier):
            return InvalidLine("alias", raw_target, origin)
        return MatchLine(pattern, AliasRef(identifier), origin)

    try:
        command = _parse_string(raw_target)
    except ValueError:
        return InvalidLine("string", raw_target, origin)
    return MatchLine(pattern, Command(command), origin)
