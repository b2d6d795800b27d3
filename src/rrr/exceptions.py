"""Exception hierarchy for rrr."""

from __future__ import annotations


class RrrError(Exception):
    """Base exception for all rrr errors.

    Attributes:
        message: Human-readable error message
        exit_code: Suggested exit code for CLI (default 1)
    """

    def __init__(self, message: str, exit_code: int = 1):
        self.message = message
        self.exit_code = exit_code
        super().__init__(message)


class ConfigError(RrrError):
    """Configuration loading errors (unreadable files, bad includes, settings)."""

    pass


class ConfigSyntaxError(ConfigError):
    """A configuration line could not be parsed."""

    pass


class ImportUnavailableError(ConfigError):
    """An :import directive was found but importing is disabled."""

    pass


class MissingAttributeError(ConfigError):
    """A desktop entry lacks a required attribute (Exec, MimeType)."""

    pass


class ResolveError(RrrError):
    """A rule's action could not be turned into a command."""

    pass


class UnresolvedAliasError(ResolveError):
    """A rule references an alias that its profile never defines."""

    pass


class CompileError(RrrError):
    """A pattern could not be compiled into a matcher."""

    pass


class PrepareError(RrrError):
    """Substituting an input into a matched rule failed."""

    pass


class ExecutionError(RrrError):
    """Shell command could not be spawned or exited unsuccessfully."""

    pass


class ProfileError(RrrError):
    """The requested profile does not exist."""

    pass


class ValidationError(RrrError):
    """Input validation errors (arguments, shell override)."""

    pass
