"""
Error taxonomy for tool checks.

Every failure a single check can hit is one of these kinds. Lower layers
raise them; the checker records them on the outcome instead of letting
them escape.
"""

from __future__ import annotations


class CheckError(Exception):
    """
    Base exception for check failures.

    Attributes:
        message: Human-readable error message
        command: Command the error relates to, if any
        kind: Short machine-readable error kind
        downgradable: Whether an optional tool may report this as a warning
    """
    kind = "error"
    downgradable = False

    def __init__(self, message: str, command: str | None = None):
        self.message = message
        self.command = command
        super().__init__(message)


class CommandNotFound(CheckError):
    """Executable is not on the search path."""
    kind = "command_not_found"
    downgradable = True


class ProbeFailed(CheckError):
    """No probe produced usable version text."""
    kind = "probe_failed"
    downgradable = True


class NoVersionFound(CheckError):
    kind = "no_version_found"


class InvalidPattern(CheckError):
    kind = "invalid_pattern"


class InvalidConstraint(CheckError):
    kind = "invalid_constraint"


class InvalidVersion(CheckError):
    kind = "invalid_version"


class VersionMismatch(CheckError):
    """Installed version parsed fine but is outside the constraint."""
    kind = "version_mismatch"
    downgradable = True


class ToolNotInConfiguration(CheckError):
    """A requested tool key has no descriptor."""
    kind = "tool_not_in_configuration"


class ConfigError(CheckError):
    """Configuration file is missing, unreadable or invalid."""
    kind = "config_error"
