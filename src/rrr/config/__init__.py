"""Configuration: rule model, config-file lexer and loader, tool settings."""

from rrr.config.models import (
    AliasRef,
    Command,
    ConfigOrigin,
    DEFAULT_PROFILE,
    Explicit,
    Glob,
    Imported,
    PreparedCommand,
    Regex,
    Rule,
)

__all__ = [
    "AliasRef",
    "Command",
    "ConfigOrigin",
    "DEFAULT_PROFILE",
    "Explicit",
    "Glob",
    "Imported",
    "PreparedCommand",
    "Regex",
    "Rule",
]
