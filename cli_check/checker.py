"""
Check orchestration: one tool end to end, and fan-out across many.

A single check never raises for a tool-level failure; every problem is
recorded on the returned CheckOutcome.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Mapping, Sequence

from .common import vlog
from .constraints import parse_constraint, parse_version
from .errors import (
    CheckError,
    CommandNotFound,
    InvalidConstraint,
    InvalidVersion,
    ToolNotInConfiguration,
    VersionMismatch,
)
from .extract import extract_version
from .probe import probe_version
from .process import DEFAULT_TIMEOUT_SECONDS, ProcessRunner, SubprocessRunner, which
from .tools import ToolDescriptor

STATUS_PASS = "pass"
STATUS_FAIL = "fail"
STATUS_OPTIONAL_MISSING = "optional_missing"

# Internal result variants, collapsed to the three statuses above
KIND_EXISTENCE_PASS = "existence_pass"
KIND_EXISTENCE_MISSING = "existence_missing"
KIND_PROBE_FAILED = "probe_failed"
KIND_EXTRACTION_FAILED = "extraction_failed"
KIND_INVALID_CONSTRAINT = "invalid_constraint"
KIND_INVALID_VERSION = "invalid_version"
KIND_VERSION_PASS = "version_pass"
KIND_VERSION_MISMATCH = "version_mismatch"
KIND_NOT_CONFIGURED = "not_configured"

DEFAULT_MAX_WORKERS = 16


@dataclass(frozen=True)
class CheckOutcome:
    """
    Result of checking one tool.

    Attributes:
        tool: Descriptor that was checked
        status: "pass", "fail" or "optional_missing"
        kind: Internal result variant
        installed_version: Extracted version, whenever extraction succeeded
        resolved_path: PATH resolution, only for passing existence checks
        raw_output: Probe text used for extraction
        probe_args: Arguments of the probe that produced raw_output
        error: Failure cause when status is not "pass"
    """
    tool: ToolDescriptor
    status: str
    kind: str
    installed_version: str | None = None
    resolved_path: str | None = None
    raw_output: str | None = None
    probe_args: tuple[str, ...] | None = None
    error: CheckError | None = None

    @property
    def passed(self) -> bool:
        return self.status == STATUS_PASS

    @property
    def failure_reason(self) -> str | None:
        return self.error.message if self.error else None


def _failed_status(tool: ToolDescriptor, error: CheckError) -> str:
    if tool.optional and error.downgradable:
        return STATUS_OPTIONAL_MISSING
    return STATUS_FAIL


def check_tool(
    tool: ToolDescriptor,
    runner: ProcessRunner | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    verbose: bool = False,
) -> CheckOutcome:
    """
    Check a single tool.

    Without a version constraint only PATH resolution is checked; the tool
    is not executed. With a constraint the tool is probed, its version
    extracted and tested against the constraint.

    Args:
        tool: Tool descriptor
        runner: Process runner (defaults to SubprocessRunner)
        timeout: Per-probe timeout in seconds
        verbose: Enable verbose logging

    Returns:
        CheckOutcome
    """
    if not tool.is_version_check:
        return _check_existence(tool, verbose)
    return _check_version(tool, runner or SubprocessRunner(verbose=verbose), timeout, verbose)


def _check_existence(tool: ToolDescriptor, verbose: bool) -> CheckOutcome:
    path = which(tool.command)
    if path:
        vlog(f"{tool.name}: found at {path}", verbose)
        return CheckOutcome(tool=tool, status=STATUS_PASS, kind=KIND_EXISTENCE_PASS, resolved_path=path)

    error = CommandNotFound(f"{tool.command}: command not found", command=tool.command)
    vlog(f"{tool.name}: {error.message}", verbose)
    return CheckOutcome(
        tool=tool,
        status=_failed_status(tool, error),
        kind=KIND_EXISTENCE_MISSING,
        error=error,
    )


def _check_version(
    tool: ToolDescriptor,
    runner: ProcessRunner,
    timeout: float,
    verbose: bool,
) -> CheckOutcome:
    try:
        probe = probe_version(tool, runner, timeout)
    except CheckError as e:
        vlog(f"{tool.name}: probe failed: {e.message}", verbose)
        return CheckOutcome(tool=tool, status=_failed_status(tool, e), kind=KIND_PROBE_FAILED, error=e)

    base = dict(tool=tool, raw_output=probe.output, probe_args=probe.args)

    try:
        installed = extract_version(probe.output, tool.version_pattern)
    except CheckError as e:
        error = type(e)(f"failed to extract version: {e.message}", command=tool.command)
        return CheckOutcome(status=STATUS_FAIL, kind=KIND_EXTRACTION_FAILED, error=error, **base)

    vlog(f"{tool.name}: installed version {installed}", verbose)

    try:
        constraint = parse_constraint(tool.version)
    except InvalidConstraint as e:
        return CheckOutcome(
            status=STATUS_FAIL,
            kind=KIND_INVALID_CONSTRAINT,
            installed_version=installed,
            error=e,
            **base,
        )

    try:
        version = parse_version(installed)
    except InvalidVersion as e:
        error = InvalidVersion(f"failed to parse installed version '{installed}': {e.message}", command=tool.command)
        return CheckOutcome(
            status=STATUS_FAIL,
            kind=KIND_INVALID_VERSION,
            installed_version=installed,
            error=error,
            **base,
        )

    if constraint.check(version):
        return CheckOutcome(status=STATUS_PASS, kind=KIND_VERSION_PASS, installed_version=installed, **base)

    error = VersionMismatch(f"version {installed} does not satisfy {constraint}", command=tool.command)
    return CheckOutcome(
        status=_failed_status(tool, error),
        kind=KIND_VERSION_MISMATCH,
        installed_version=installed,
        error=error,
        **base,
    )


def not_configured_outcome(name: str) -> CheckOutcome:
    """Synthetic failure for a requested tool with no descriptor."""
    error = ToolNotInConfiguration(f"tool '{name}' not found in configuration", command=name)
    return CheckOutcome(
        tool=ToolDescriptor(name=name, command=name),
        status=STATUS_FAIL,
        kind=KIND_NOT_CONFIGURED,
        error=error,
    )


def check_all(
    tools: Mapping[str, ToolDescriptor],
    requested: Sequence[str] | None = None,
    runner: ProcessRunner | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    max_workers: int | None = None,
    verbose: bool = False,
) -> list[CheckOutcome]:
    """
    Check many tools, optionally restricted to requested keys.

    Checks run in parallel with a bounded worker pool; results come back
    in input order (request order, or mapping order when checking all).

    Args:
        tools: Mapping of tool key to descriptor
        requested: Tool keys to check; empty or None checks everything
        runner: Process runner shared by all checks (must be thread-safe)
        timeout: Per-probe timeout in seconds
        max_workers: Maximum concurrent checks (default: min(16, tool count))
        verbose: Enable verbose logging

    Returns:
        One CheckOutcome per requested (or configured) tool

    Raises:
        ValueError: a requested tool name is blank
    """
    if requested:
        if any(not name or not name.strip() for name in requested):
            raise ValueError("requested tool names must not be empty")
        plan: list[ToolDescriptor | str] = [tools.get(name, name) for name in requested]
    else:
        plan = list(tools.values())

    targets = [item for item in plan if isinstance(item, ToolDescriptor)]
    if max_workers is None:
        max_workers = min(DEFAULT_MAX_WORKERS, max(len(targets), 1))

    vlog(f"Checking {len(targets)} tool(s) with {max_workers} worker(s)", verbose)

    runner = runner or SubprocessRunner(verbose=verbose)
    results: list[CheckOutcome] = []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(check_tool, item, runner, timeout, verbose)
            if isinstance(item, ToolDescriptor) else None
            for item in plan
        ]
        for item, future in zip(plan, futures):
            if future is None:
                results.append(not_configured_outcome(item))
            else:
                results.append(future.result())

    return results


def summarize(outcomes: Sequence[CheckOutcome]) -> dict[str, int]:
    """Count outcomes by status."""
    summary = {
        "total": len(outcomes),
        STATUS_PASS: 0,
        STATUS_FAIL: 0,
        STATUS_OPTIONAL_MISSING: 0,
    }
    for outcome in outcomes:
        summary[outcome.status] += 1
    return summary


def should_exit_with_error(outcomes: Sequence[CheckOutcome]) -> bool:
    """True if any outcome failed (optional-missing does not count)."""
    return any(outcome.status == STATUS_FAIL for outcome in outcomes)
