"""
Shared test helpers.
"""

import threading

import pytest

from cli_check.process import ProcessResult


class FakeRunner:
    """
    ProcessRunner that answers from a table instead of spawning processes.

    Keys are (command, args) tuples; unknown invocations return the
    default result. Every call is recorded in ``calls``.
    """

    def __init__(self, responses=None, default=None):
        self.responses = dict(responses or {})
        self.default = default or ProcessResult(output="", exit_code=1)
        self.calls = []
        self._lock = threading.Lock()

    def run(self, command, args, timeout):
        with self._lock:
            self.calls.append((command, tuple(args), timeout))
        return self.responses.get((command, tuple(args)), self.default)


@pytest.fixture
def fake_runner():
    """Factory fixture for FakeRunner."""
    return FakeRunner
