"""
Version probing: run a tool to obtain text that contains its version.

Tools have no standard version flag, so when no explicit argument is
configured a fixed sequence of common flags is tried and the first
output that looks like a version banner wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .errors import CommandNotFound, ProbeFailed
from .process import (
    DEFAULT_TIMEOUT_SECONDS,
    ERROR_NOT_FOUND,
    ERROR_PERMISSION,
    ERROR_TIMEOUT,
    ProcessRunner,
    SubprocessRunner,
)
from .tools import ToolDescriptor

logger = logging.getLogger(__name__)

# Order matters: most common first
VERSION_ARG_SETS: tuple[tuple[str, ...], ...] = (
    ("--version",),
    ("version",),
    ("-v",),
    ("-V",),
    ("--version-short",),
    ("-version",),
)

MAX_VERSION_LINE_LENGTH = 200

REJECT_PATTERNS: tuple[str, ...] = (
    "usage:",
    "error:",
    "flag provided",
    "unknown flag",
    "unknown command",
    "help",
    "failed validation",
)


@dataclass(frozen=True)
class ProbeResult:
    """
    Raw version text and the arguments that produced it.

    Attributes:
        output: Combined stdout/stderr of the accepted invocation
        args: Arguments passed to the command
        exit_code: Exit status of the accepted invocation
    """
    output: str
    args: tuple[str, ...]
    exit_code: int | None = None


def looks_like_version_output(output: str) -> bool:
    """Check whether command output looks like a version banner.

    Only the first line is inspected: it must be short, must not read
    like help or error text, and must contain a digit and a dot.

    Args:
        output: Captured command output

    Returns:
        True if the first line plausibly reports a version
    """
    if not output:
        return False

    first_line = output.split("\n", 1)[0].strip()
    if len(first_line) > MAX_VERSION_LINE_LENGTH:
        return False

    lowered = first_line.lower()
    if any(pattern in lowered for pattern in REJECT_PATTERNS):
        return False

    has_digit = any(ch in "0123456789" for ch in first_line)
    return has_digit and "." in first_line


def probe_version(
    tool: ToolDescriptor,
    runner: ProcessRunner | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> ProbeResult:
    """Invoke a tool to obtain its version text.

    Args:
        tool: Tool descriptor with a non-empty command
        runner: Process runner (defaults to SubprocessRunner)
        timeout: Per-attempt timeout in seconds

    Returns:
        ProbeResult with the accepted output

    Raises:
        CommandNotFound: The executable could not be started and printed nothing
        ProbeFailed: No attempt produced usable version text
    """
    runner = runner or SubprocessRunner()

    if tool.version_arg:
        return _probe_explicit(tool, tuple(tool.version_arg.split()), runner, timeout)
    return _probe_smart_guess(tool, runner, timeout)


def _probe_explicit(
    tool: ToolDescriptor,
    args: tuple[str, ...],
    runner: ProcessRunner,
    timeout: float,
) -> ProbeResult:
    result = runner.run(tool.command, args, timeout)
    logger.debug("probe %s %s -> exit=%s error=%s", tool.command, " ".join(args), result.exit_code, result.error)

    # Tools commonly print their version while exiting non-zero
    if result.output:
        return ProbeResult(output=result.output, args=args, exit_code=result.exit_code)

    if result.error in (ERROR_NOT_FOUND, ERROR_PERMISSION):
        raise CommandNotFound(f"{tool.command}: command not found", command=tool.command)
    if result.error:
        raise ProbeFailed(f"{tool.command}: {_describe_error(result.error, timeout)}", command=tool.command)
    if not result.ok:
        raise ProbeFailed(f"{tool.command}: exit status {result.exit_code}", command=tool.command)

    # Clean exit with no output: let extraction report the missing version
    return ProbeResult(output="", args=args, exit_code=result.exit_code)


def _probe_smart_guess(tool: ToolDescriptor, runner: ProcessRunner, timeout: float) -> ProbeResult:
    for args in VERSION_ARG_SETS:
        result = runner.run(tool.command, args, timeout)
        logger.debug("probe %s %s -> exit=%s error=%s", tool.command, " ".join(args), result.exit_code, result.error)

        if result.error == ERROR_NOT_FOUND:
            # No other argument set can start a missing executable
            break

        if result.output and looks_like_version_output(result.output):
            return ProbeResult(output=result.output, args=args, exit_code=result.exit_code)

    raise ProbeFailed(f"{tool.command}: failed to get version", command=tool.command)


def _describe_error(error: str, timeout: float) -> str:
    if error == ERROR_TIMEOUT:
        return f"timed out after {timeout:g}s"
    return error.replace("_", " ")


def format_probe_command(tool: ToolDescriptor, args: Sequence[str]) -> str:
    """Render the command line a probe ran, e.g. ``go version``."""
    return " ".join([tool.command, *args])
