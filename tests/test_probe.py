"""
Tests for version probing (cli_check/probe.py).
"""

import pytest

from cli_check.errors import CommandNotFound, ProbeFailed
from cli_check.probe import (
    VERSION_ARG_SETS,
    format_probe_command,
    looks_like_version_output,
    probe_version,
)
from cli_check.process import ERROR_NOT_FOUND, ERROR_TIMEOUT, ProcessResult
from cli_check.tools import ToolDescriptor


class TestLooksLikeVersionOutput:
    """Tests for the version banner heuristic."""

    def test_go_version_banner(self):
        assert looks_like_version_output("go version go1.20.0 darwin/amd64") is True

    def test_usage_text_rejected(self):
        assert looks_like_version_output("Usage: tool [options]") is False

    def test_long_line_rejected(self):
        assert looks_like_version_output("a" * 300) is False

    def test_long_line_with_version_rejected(self):
        assert looks_like_version_output("1.2.3 " + "x" * 250) is False

    def test_empty_rejected(self):
        assert looks_like_version_output("") is False

    @pytest.mark.parametrize("line", [
        "error: unknown option --version-short",
        "flag provided but not defined: -version",
        "Error: unknown flag: --version",
        "Error: unknown command \"version\" for \"tool\"",
        "Run 'tool help' for 1.0 usage",
        "config failed validation at 1.2",
    ])
    def test_help_and_error_text_rejected(self, line):
        assert looks_like_version_output(line) is False

    def test_requires_dot(self):
        assert looks_like_version_output("version 12") is False

    def test_requires_digit(self):
        assert looks_like_version_output("version a.b") is False

    def test_only_first_line_inspected(self):
        """Version on a later line does not count."""
        assert looks_like_version_output("tool\nversion 1.2.3") is False
        assert looks_like_version_output("tool 1.2.3\nUsage: tool") is True


class TestExplicitProbe:
    """Tests for probes with a configured version argument."""

    def test_splits_arguments_on_whitespace(self, fake_runner):
        runner = fake_runner({("docker", ("compose", "version")): ProcessResult("Docker Compose version v2.24.1\n", 0)})
        tool = ToolDescriptor(name="compose", command="docker", version=">=2", version_arg="compose  version")

        result = probe_version(tool, runner)

        assert result.output == "Docker Compose version v2.24.1\n"
        assert result.args == ("compose", "version")
        assert len(runner.calls) == 1

    def test_output_with_nonzero_exit_is_success(self, fake_runner):
        runner = fake_runner({("kubeconform", ("-v",)): ProcessResult("v0.6.4\n", 1)})
        tool = ToolDescriptor(name="kubeconform", command="kubeconform", version=">=0.6", version_arg="-v")

        result = probe_version(tool, runner)

        assert result.output == "v0.6.4\n"
        assert result.exit_code == 1

    def test_help_text_is_still_returned(self, fake_runner):
        """Explicit probes do not apply the version heuristic."""
        runner = fake_runner({("tool", ("--ver",)): ProcessResult("Usage: tool\n", 2)})
        tool = ToolDescriptor(name="tool", command="tool", version=">=1", version_arg="--ver")

        assert probe_version(tool, runner).output == "Usage: tool\n"

    def test_missing_command(self, fake_runner):
        runner = fake_runner(default=ProcessResult(error=ERROR_NOT_FOUND))
        tool = ToolDescriptor(name="nope", command="nope", version=">=1", version_arg="--version")

        with pytest.raises(CommandNotFound, match="nope"):
            probe_version(tool, runner)

    def test_nonzero_exit_without_output(self, fake_runner):
        runner = fake_runner(default=ProcessResult(output="", exit_code=3))
        tool = ToolDescriptor(name="tool", command="tool", version=">=1", version_arg="--version")

        with pytest.raises(ProbeFailed, match="tool: exit status 3"):
            probe_version(tool, runner)

    def test_timeout(self, fake_runner):
        runner = fake_runner(default=ProcessResult(error=ERROR_TIMEOUT))
        tool = ToolDescriptor(name="slow", command="slow", version=">=1", version_arg="--version")

        with pytest.raises(ProbeFailed, match="slow: timed out after 5s"):
            probe_version(tool, runner)

    def test_passes_timeout_to_runner(self, fake_runner):
        runner = fake_runner(default=ProcessResult("1.0.0", 0))
        tool = ToolDescriptor(name="tool", command="tool", version=">=1", version_arg="--version")

        probe_version(tool, runner, timeout=2.5)

        assert runner.calls == [("tool", ("--version",), 2.5)]


class TestSmartGuess:
    """Tests for the fallback argument sequence."""

    def test_fixed_order(self):
        assert VERSION_ARG_SETS == (
            ("--version",),
            ("version",),
            ("-v",),
            ("-V",),
            ("--version-short",),
            ("-version",),
        )

    def test_first_attempt_accepted(self, fake_runner):
        runner = fake_runner({("node", ("--version",)): ProcessResult("v20.11.0\n", 0)})
        tool = ToolDescriptor(name="node", command="node", version=">=18")

        result = probe_version(tool, runner)

        assert result.args == ("--version",)
        assert len(runner.calls) == 1

    def test_skips_help_output(self, fake_runner):
        runner = fake_runner({
            ("go", ("--version",)): ProcessResult("flag provided but not defined: -version\n", 2),
            ("go", ("version",)): ProcessResult("go version go1.22.1 linux/amd64\n", 0),
        })
        tool = ToolDescriptor(name="go", command="go", version=">=1.20")

        result = probe_version(tool, runner)

        assert result.args == ("version",)
        assert result.output.startswith("go version go1.22.1")

    def test_accepts_nonzero_exit_with_version_text(self, fake_runner):
        runner = fake_runner({("tool", ("-V",)): ProcessResult("tool 3.1.4\n", 1)})
        tool = ToolDescriptor(name="tool", command="tool", version=">=3")

        result = probe_version(tool, runner)

        assert result.args == ("-V",)
        assert [call[1] for call in runner.calls] == [("--version",), ("version",), ("-v",), ("-V",)]

    def test_timeout_moves_to_next_attempt(self, fake_runner):
        runner = fake_runner({
            ("tool", ("--version",)): ProcessResult(error=ERROR_TIMEOUT),
            ("tool", ("version",)): ProcessResult("tool v1.4.0", 0),
        })
        tool = ToolDescriptor(name="tool", command="tool", version=">=1")

        assert probe_version(tool, runner).args == ("version",)

    def test_no_attempt_qualifies(self, fake_runner):
        runner = fake_runner(default=ProcessResult("Usage: tool [options]\n", 1))
        tool = ToolDescriptor(name="tool", command="tool", version=">=1")

        with pytest.raises(ProbeFailed, match="tool: failed to get version"):
            probe_version(tool, runner)
        assert len(runner.calls) == len(VERSION_ARG_SETS)

    def test_missing_command_stops_early(self, fake_runner):
        runner = fake_runner(default=ProcessResult(error=ERROR_NOT_FOUND))
        tool = ToolDescriptor(name="ghost", command="ghost", version=">=1")

        with pytest.raises(ProbeFailed, match="ghost"):
            probe_version(tool, runner)
        assert len(runner.calls) == 1


class TestFormatProbeCommand:
    def test_joins_command_and_args(self):
        tool = ToolDescriptor(name="Go", command="go", version=">=1")
        assert format_probe_command(tool, ("version",)) == "go version"
