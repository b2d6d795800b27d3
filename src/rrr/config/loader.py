"""Configuration loading: includes, imports, profiles.

The loader walks config files recursively and feeds one RuleSetBuilder per
profile. A :profile directive only lasts until the end of the file that
contains it; the including file continues in its own profile.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable

from rrr.config.desktop import desktop_rules, is_desktop_file
from rrr.config.lexer import AliasLine, ConfigLine, InvalidLine, MatchLine, MetaLine, tokenize
from rrr.config.models import DEFAULT_PROFILE, ConfigOrigin, Imported
from rrr.exceptions import ConfigError, ConfigSyntaxError, ImportUnavailableError
from rrr.output import debug
from rrr.rules.book import RuleBook
from rrr.rules.builder import RuleSetBuilder
from rrr.utils import expand_path

CONFIG_FILENAME = "rrr.conf"

INVALID_MESSAGES = {
    "meta": "Invalid meta",
    "alias": "Invalid alias",
    "string": "Invalid string",
    "line": "Invalid line",
}


def default_config_paths() -> list[Path]:
    """System-wide then per-user config file locations."""
    system_dir = Path("/usr/local/etc") if sys.platform.startswith("freebsd") else Path("/etc")
    return [system_dir / CONFIG_FILENAME, Path.home() / ".config" / CONFIG_FILENAME]


class ConfigLoader:
    """Accumulates rules from config files, one builder per profile.

    Args:
        case_insensitive: Match all patterns ignoring case.
        only_profiles: If given, only aliases and rules of these profiles
            are kept. Other profiles are still tracked so :profile switches
            stay correct, but their content is discarded.
        allow_import: Whether :import directives are allowed.
        ignore_missing_attrs: Skip desktop entries without Exec/MimeType
            instead of failing.
    """

    def __init__(
        self,
        case_insensitive: bool = True,
        only_profiles: Iterable[str] | None = None,
        allow_import: bool = True,
        ignore_missing_attrs: bool = True,
    ):
        self.case_insensitive = case_insensitive
        self.only_profiles = set(only_profiles) if only_profiles is not None else None
        self.allow_import = allow_import
        self.ignore_missing_attrs = ignore_missing_attrs

        self.builders: dict[str, RuleSetBuilder] = {
            DEFAULT_PROFILE: RuleSetBuilder(DEFAULT_PROFILE, case_insensitive)
        }
        self.current_profile = DEFAULT_PROFILE
        self.loaded_files: set[Path] = set()

    # ---- loading ----

    def load(self, path: str | Path) -> "ConfigLoader":
        """Load a config file (and everything it includes).

        Loading a file that was already loaded is a no-op.
        """
        try:
            file_path = Path(path).resolve(strict=True)
        except OSError as e:
            raise ConfigError(f"Cannot load configuration file '{path}': {e}") from e

        if file_path in self.loaded_files:
            debug(f"[config] '{file_path}' already loaded")
            return self
        self.loaded_files.add(file_path)

        try:
            text = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot load configuration file '{file_path}': {e}") from e

        debug(f"[config] loading '{file_path}'")
        saved_profile = self.current_profile
        try:
            for line in tokenize(text, str(file_path)):
                self._load_line(line)
        finally:
            self.current_profile = saved_profile
        return self

    def _load_line(self, line: ConfigLine) -> None:
        if isinstance(line, MetaLine):
            if line.directive == "include":
                self._include(_target_path(line.argument, line.origin), line.origin)
            elif line.directive == "import":
                self._import(_target_path(line.argument, line.origin), line.origin)
            elif line.directive == "profile":
                self._switch_profile(line.argument)
        elif isinstance(line, AliasLine):
            if self.is_profile_loadable():
                self.current_builder().alias(line.identifier, line.value)
        elif isinstance(line, MatchLine):
            if self.is_profile_loadable():
                self.current_builder().rule(line.pattern, line.action, line.origin)
        elif isinstance(line, InvalidLine):
            message = INVALID_MESSAGES.get(line.kind, "Invalid line")
            raise ConfigSyntaxError(f"{message} '{line.text}' ({line.origin})")

    def _include(self, target: Path, origin: ConfigOrigin) -> None:
        if not target.exists():
            raise ConfigError(f"Cannot include '{target}': no such file or directory ({origin})")
        self._include_rec(target)

    def _include_rec(self, target: Path) -> None:
        if target.is_file():
            self.load(target)
        elif target.is_dir():
            for entry in _read_dir(target):
                self._include_rec(entry)

    def _import(self, target: Path, origin: ConfigOrigin) -> None:
        if not self.allow_import:
            raise ImportUnavailableError(f"Importing is disabled, cannot import '{target}' ({origin})")
        if not self.is_profile_loadable():
            return
        if not target.exists():
            raise ConfigError(f"Cannot import '{target}': no such file or directory ({origin})")
        self._import_rec(target, origin)

    def _import_rec(self, target: Path, origin: ConfigOrigin) -> None:
        if target.is_file() and is_desktop_file(target):
            builder = self.current_builder()
            count = 0
            for pattern, action in desktop_rules(target, self.ignore_missing_attrs):
                builder.rule(pattern, action, origin, Imported(str(target)))
                count += 1
            debug(f"[import] '{target}': {count} rules")
        elif target.is_dir():
            for entry in _read_dir(target):
                self._import_rec(entry, origin)

    def _switch_profile(self, profile: str) -> None:
        if profile not in self.builders:
            self.builders[profile] = RuleSetBuilder(profile, self.case_insensitive)
        self.current_profile = profile

    # ---- state ----

    def is_profile_loadable(self) -> bool:
        """Whether lines of the current profile should be kept."""
        return self.only_profiles is None or self.current_profile in self.only_profiles

    def current_builder(self) -> RuleSetBuilder:
        return self.builders[self.current_profile]

    def build(self) -> RuleBook:
        """Resolve and compile every profile.

        Raises ResolveError or CompileError on the first bad rule.
        """
        return RuleBook({name: builder.build() for name, builder in self.builders.items()})


def _target_path(argument: str, origin: ConfigOrigin) -> Path:
    """Expand ~ and $VARS; relative paths are relative to the declaring file."""
    path = expand_path(argument)
    if not path.is_absolute():
        path = Path(origin.file).parent / path
    return path


def _read_dir(directory: Path) -> list[Path]:
    """Directory entries in name order; unreadable directories yield nothing."""
    try:
        return sorted(directory.iterdir())
    except OSError as e:
        debug(f"[config] skipping unreadable directory '{directory}': {e}")
        return []


def load_rule_book(
    paths: Iterable[str | Path] | None = None,
    only_profiles: Iterable[str] | None = None,
    case_insensitive: bool = True,
    allow_import: bool = True,
) -> RuleBook:
    """Load config files and build every profile.

    With no explicit paths, the existing default config files are loaded and
    at least one of them must exist.
    """
    loader = ConfigLoader(
        case_insensitive=case_insensitive,
        only_profiles=only_profiles,
        allow_import=allow_import,
    )

    explicit = list(paths or [])
    if explicit:
        for path in explicit:
            loader.load(path)
    else:
        defaults = default_config_paths()
        found = [p for p in defaults if p.is_file()]
        if not found:
            raise ConfigError(
                "None of the configuration files "
                + " nor ".join(f"'{p}'" for p in defaults)
                + " could be loaded"
            )
        for path in found:
            loader.load(path)

    return loader.build()
