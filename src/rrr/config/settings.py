"""Tool settings (~/.config/rrr/settings.toml) and RRR_* environment defaults."""

from __future__ import annotations

import os
import tomli
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from rrr.config.models import DEFAULT_PROFILE
from rrr.exceptions import ConfigError
from rrr.output import warn
from rrr.utils import expand_path, parse_bool

DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "rrr" / "settings.toml"

KNOWN_FIELDS = {
    "config",
    "profile",
    "case_sensitive",
    "fallback",
    "fork",
    "shell",
    "import",
}

BOOL_FIELDS = ("case_sensitive", "fallback", "fork", "import")


@dataclass
class Settings:
    """Defaults for command-line options."""

    config: list[str] = field(default_factory=list)
    profile: str = DEFAULT_PROFILE
    case_sensitive: bool = False
    fallback: bool = False
    fork: bool = False
    shell: str | None = None
    allow_import: bool = True

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from a TOML file.

        Returns default settings if the file doesn't exist.
        """
        if path is None:
            path = DEFAULT_SETTINGS_PATH

        if not path.exists():
            return cls()

        try:
            with open(path, "rb") as f:
                data = tomli.load(f)
        except (OSError, tomli.TOMLDecodeError) as e:
            raise ConfigError(f"{path.name}: {e}")

        unknown = set(data.keys()) - KNOWN_FIELDS
        if unknown:
            warn(f"{path.name}: unknown fields: {', '.join(sorted(unknown))}")

        for name in BOOL_FIELDS:
            if name in data and not isinstance(data[name], bool):
                raise ConfigError(f"{path.name}: '{name}' must be true or false")
        for name in ("profile", "shell"):
            if name in data and not isinstance(data[name], str):
                raise ConfigError(f"{path.name}: '{name}' must be a string")

        config = data.get("config", [])
        if isinstance(config, str):
            config = [config]
        if not isinstance(config, list) or not all(isinstance(c, str) for c in config):
            raise ConfigError(f"{path.name}: 'config' must be a path or a list of paths")

        return cls(
            config=[str(expand_path(c)) for c in config],
            profile=data.get("profile", DEFAULT_PROFILE),
            case_sensitive=data.get("case_sensitive", False),
            fallback=data.get("fallback", False),
            fork=data.get("fork", False),
            shell=data.get("shell"),
            allow_import=data.get("import", True),
        )

    def apply_env(self, environ: Mapping[str, str] | None = None) -> "Settings":
        """Override settings from RRR_* environment variables (in place)."""
        if environ is None:
            environ = os.environ

        try:
            if val := environ.get("RRR_CONFIG"):
                self.config = [val]
            if val := environ.get("RRR_PROFILE"):
                self.profile = val
            if (val := environ.get("RRR_CASE_SENSITIVE")) is not None:
                self.case_sensitive = parse_bool(val)
            if (val := environ.get("RRR_FALLBACK")) is not None:
                self.fallback = parse_bool(val)
            if val := environ.get("RRR_SHELL"):
                self.shell = val
        except ValueError as e:
            raise ConfigError(f"Environment: {e}")
        return self


def settings_path(environ: Mapping[str, str] | None = None) -> Path:
    """Settings file location, overridable with RRR_SETTINGS."""
    if environ is None:
        environ = os.environ
    override = environ.get("RRR_SETTINGS")
    return expand_path(override) if override else DEFAULT_SETTINGS_PATH


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Settings file, then environment overrides."""
    return Settings.load(settings_path(environ)).apply_env(environ)
