"""
Tests for version extraction (cli_check/extract.py).
"""

import pytest

from cli_check.errors import InvalidPattern, NoVersionFound
from cli_check.extract import extract_version


class TestDefaultExtraction:
    """Extraction without a configured pattern."""

    def test_go_banner(self):
        assert extract_version("go version go1.22.1 linux/amd64") == "1.22.1"

    def test_two_component_version(self):
        assert extract_version("tool 3.4") == "3.4"

    def test_leading_v_not_included(self):
        assert extract_version("v20.11.0\n") == "20.11.0"

    def test_first_matching_line_wins(self):
        output = "Some Tool\nbuilt 2024\nversion 1.2.3\nlibfoo 4.5.6\n"
        assert extract_version(output) == "1.2.3"

    def test_blank_lines_skipped(self):
        assert extract_version("\n\n   \n  2.0.1  \n") == "2.0.1"

    def test_no_version(self):
        with pytest.raises(NoVersionFound, match="no version found in output"):
            extract_version("nothing here\n42\n")

    def test_empty_output(self):
        with pytest.raises(NoVersionFound):
            extract_version("")


class TestPatternExtraction:
    """Extraction with a configured regular expression."""

    def test_capture_group_returned(self):
        assert extract_version("Version: v2.5.1", r"v(\d+\.\d+\.\d+)") == "2.5.1"

    def test_whole_match_without_group(self):
        assert extract_version("release-7.1.0-final", r"\d+\.\d+\.\d+") == "7.1.0"

    def test_searches_across_lines(self):
        output = "Docker Compose\nbuild abc\nVersion: 1.2.3\n"
        assert extract_version(output, r"Version: (\d+\.\d+\.\d+)") == "1.2.3"

    def test_optional_group_not_participating(self):
        """Group 1 absent from the match falls back to the whole match."""
        assert extract_version("tool 1.2", r"(beta)?\d+\.\d+") == "1.2"

    def test_pattern_not_matching(self):
        with pytest.raises(NoVersionFound, match="pattern did not match"):
            extract_version("tool 1.2.3", r"Version: (\d+)")

    def test_invalid_pattern(self):
        with pytest.raises(InvalidPattern, match="invalid version pattern"):
            extract_version("tool 1.2.3", r"(\d+")

    def test_empty_pattern_uses_default(self):
        assert extract_version("tool 1.2.3", "") == "1.2.3"
