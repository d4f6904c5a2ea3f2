"""
Process execution and PATH lookup.

The prober and the existence check only talk to the system through the
small ProcessRunner interface defined here, so tests can swap in a fake.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import Protocol, Sequence

from .common import vlog

DEFAULT_TIMEOUT_SECONDS = 5.0

# Errors reported by a runner when no output could be captured
ERROR_NOT_FOUND = "not_found"
ERROR_PERMISSION = "permission"
ERROR_TIMEOUT = "timeout"
ERROR_OS = "os_error"


@dataclass(frozen=True)
class ProcessResult:
    """
    Outcome of one process invocation.

    Attributes:
        output: Combined stdout and stderr text
        exit_code: Process exit status, None if it never ran to completion
        error: Why the process could not run or finish, None otherwise
    """
    output: str = ""
    exit_code: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.exit_code == 0


class ProcessRunner(Protocol):
    def run(self, command: str, args: Sequence[str], timeout: float) -> ProcessResult:
        ...


class SubprocessRunner:
    """ProcessRunner backed by subprocess.run."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def run(self, command: str, args: Sequence[str], timeout: float) -> ProcessResult:
        """Run ``command`` with ``args``, merging stderr into stdout.

        Args:
            command: Executable name or path
            args: Arguments passed to the executable
            timeout: Absolute wall-clock limit in seconds

        Returns:
            ProcessResult; never raises for a failed or missing command
        """
        argv = [command, *args]
        vlog(f"Running: {' '.join(argv)}", self.verbose)
        try:
            proc = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,  # Isolate stdin
                text=True,
                errors="replace",
                timeout=timeout,
                check=False,
                env={**os.environ, "TERM": "dumb"},  # Disable ANSI/color output from subprocesses
            )
        except subprocess.TimeoutExpired:
            vlog(f"Timed out after {timeout}s: {' '.join(argv)}", self.verbose)
            return ProcessResult(error=ERROR_TIMEOUT)
        except FileNotFoundError:
            return ProcessResult(error=ERROR_NOT_FOUND)
        except PermissionError:
            return ProcessResult(error=ERROR_PERMISSION)
        except OSError as e:
            vlog(f"Could not run {command}: {e}", self.verbose)
            return ProcessResult(error=ERROR_OS)

        return ProcessResult(output=proc.stdout or "", exit_code=proc.returncode)


def which(command: str) -> str | None:
    """Resolve a command on PATH without executing it.

    Args:
        command: Binary name or path

    Returns:
        Absolute path to the executable, or None if not found
    """
    return shutil.which(command)
