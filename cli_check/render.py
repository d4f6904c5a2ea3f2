"""
Output rendering and formatting.

Formats: pretty (default), quiet (failures only), json, and table
(columns aligned by terminal display width).
"""

from __future__ import annotations

import json
import re
import sys
from typing import Sequence, TextIO

from wcwidth import wcswidth

from .checker import (
    STATUS_FAIL,
    STATUS_OPTIONAL_MISSING,
    STATUS_PASS,
    CheckOutcome,
    summarize,
)
from .common import env_flag, use_color
from .probe import format_probe_command

FORMAT_PRETTY = "pretty"
FORMAT_QUIET = "quiet"
FORMAT_JSON = "json"
FORMAT_TABLE = "table"
FORMATS = (FORMAT_PRETTY, FORMAT_QUIET, FORMAT_JSON, FORMAT_TABLE)

# ANSI color codes
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
CYAN = "\033[36m"
RESET = "\033[0m"

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*m")


class Renderer:
    """Writes outcomes to a stream, colored when the stream is a terminal."""

    def __init__(self, stream: TextIO | None = None, color: bool | None = None, emoji: bool | None = None):
        self.stream = stream or sys.stdout
        self.color = use_color(self.stream) if color is None else color
        self.emoji = env_flag("CLI_CHECK_EMOJI") if emoji is None else emoji

    def colorize(self, text: str, color: str) -> str:
        if not self.color or not text:
            return text
        return f"{color}{text}{RESET}"

    def status_icon(self, status: str) -> str:
        if not self.emoji:
            return {STATUS_PASS: "ok", STATUS_FAIL: "x", STATUS_OPTIONAL_MISSING: "!"}.get(status, "?")
        return {STATUS_PASS: "✅", STATUS_FAIL: "❌", STATUS_OPTIONAL_MISSING: "⚠️"}.get(status, "❓")

    def write(self, line: str = "") -> None:
        print(line, file=self.stream)

    def render(self, outcomes: Sequence[CheckOutcome], fmt: str = FORMAT_PRETTY) -> None:
        if fmt == FORMAT_JSON:
            self.render_json(outcomes)
        elif fmt == FORMAT_QUIET:
            self.render_quiet(outcomes)
        elif fmt == FORMAT_TABLE:
            self.render_table(outcomes)
        else:
            self.render_pretty(outcomes)

    def _header(self, outcome: CheckOutcome) -> str:
        icon = self.status_icon(outcome.status)
        if outcome.status == STATUS_PASS:
            return f"{self.colorize(icon, GREEN)} {outcome.tool.name}"
        if outcome.status == STATUS_OPTIONAL_MISSING:
            return f"{self.colorize(icon, YELLOW)} {outcome.tool.name} (optional)"
        return f"{self.colorize(icon, RED)} {outcome.tool.name}"

    def render_pretty(self, outcomes: Sequence[CheckOutcome]) -> None:
        """Print every outcome with details and a summary line."""
        self.write("Checking CLI Tools...")
        self.write()

        for outcome in outcomes:
            tool = outcome.tool
            self.write(self._header(outcome))

            if tool.version:
                if outcome.raw_output and outcome.probe_args is not None:
                    self.write(f"   $ {format_probe_command(tool, outcome.probe_args)}")
                    self.write(f"   {outcome.raw_output.splitlines()[0]}")
                if outcome.error:
                    self.write(f"   {self.colorize('Error:', RED)} {outcome.failure_reason}")
                self.write(f"   Required: {tool.version}")
                if outcome.installed_version:
                    color = GREEN if outcome.passed else RED
                    self.write(f"   Installed: {self.colorize(outcome.installed_version, color)}")
            elif outcome.resolved_path:
                self.write(f"   Found at: {self.colorize(outcome.resolved_path, CYAN)}")
            elif outcome.error:
                self.write(f"   {self.colorize('Error:', RED)} {outcome.failure_reason}")

            if tool.message and not outcome.passed:
                self.write(f"   {self.colorize('Message:', CYAN)} {tool.message}")

            self.write()

        summary = summarize(outcomes)
        line = (
            f"Summary: {self.colorize(str(summary[STATUS_PASS]), GREEN)} passed, "
            f"{self.colorize(str(summary[STATUS_FAIL]), RED)} failed"
        )
        if summary[STATUS_OPTIONAL_MISSING]:
            line += f", {self.colorize(str(summary[STATUS_OPTIONAL_MISSING]), YELLOW)} optional missing"
        self.write(line)

    def render_quiet(self, outcomes: Sequence[CheckOutcome]) -> None:
        """Print only outcomes that did not pass."""
        for outcome in outcomes:
            if outcome.passed:
                continue
            self.write(self._header(outcome))
            if outcome.error:
                self.write(f"   {self.colorize('Error:', RED)} {outcome.failure_reason}")
            if outcome.tool.version:
                self.write(f"   Required: {outcome.tool.version}")
            self.write()

    def render_json(self, outcomes: Sequence[CheckOutcome]) -> None:
        """Print outcomes and summary as a JSON document."""
        json.dump(outcomes_to_json(outcomes), self.stream, indent=2, ensure_ascii=False)
        self.write()

    def render_table(self, outcomes: Sequence[CheckOutcome]) -> None:
        """Print one aligned row per outcome."""
        rows = [("state", "tool", "required", "installed", "detail")]
        for outcome in outcomes:
            if outcome.passed:
                detail = outcome.resolved_path or ""
            else:
                detail = outcome.failure_reason or ""
            installed = outcome.installed_version or ""
            if installed:
                installed = self.colorize(installed, GREEN if outcome.passed else RED)
            rows.append((
                self.status_icon(outcome.status),
                outcome.tool.name,
                outcome.tool.version or "",
                installed,
                detail,
            ))

        for line in align_columns(rows):
            self.write(line)


def display_width(text: str) -> int:
    """Terminal display width of text, ignoring ANSI escapes."""
    visible = ANSI_ESCAPE_RE.sub("", text)
    width = wcswidth(visible)
    return width if width >= 0 else len(visible)


def align_columns(rows: Sequence[Sequence[str]], pad: int = 2) -> list[str]:
    """Left-align cells by display width so emoji and colors line up."""
    if not rows:
        return []
    ncol = max(len(r) for r in rows)
    widths = [0] * ncol
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], display_width(cell))

    lines = []
    for row in rows:
        cells = []
        for i in range(ncol):
            cell = row[i] if i < len(row) else ""
            cells.append(cell + " " * (widths[i] - display_width(cell)))
        lines.append((" " * pad).join(cells).rstrip())
    return lines


def outcomes_to_json(outcomes: Sequence[CheckOutcome]) -> dict:
    """Build the JSON document for a set of outcomes."""
    tools = []
    for outcome in outcomes:
        tool = outcome.tool
        entry = {
            "name": tool.name,
            "cli": tool.command,
            "required": not tool.optional,
            "status": outcome.status,
        }
        optional_fields = {
            "versionRequired": tool.version,
            "versionInstalled": outcome.installed_version,
            "path": outcome.resolved_path,
            "error": outcome.failure_reason,
            "message": tool.message,
        }
        if outcome.raw_output and outcome.probe_args is not None:
            optional_fields["command"] = format_probe_command(tool, outcome.probe_args)
            optional_fields["output"] = outcome.raw_output
        entry.update({k: v for k, v in optional_fields.items() if v})
        tools.append(entry)

    summary = summarize(outcomes)
    return {
        "tools": tools,
        "summary": {
            "total": summary["total"],
            "passed": summary[STATUS_PASS],
            "failed": summary[STATUS_FAIL],
            "optionalMissing": summary[STATUS_OPTIONAL_MISSING],
        },
    }
