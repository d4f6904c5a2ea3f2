"""
Version extraction from raw command output.
"""

from __future__ import annotations

import re

from .errors import InvalidPattern, NoVersionFound

# X.Y or X.Y.Z
VERSION_RE = re.compile(r"\d+\.\d+(?:\.\d+)?")


def extract_version(output: str, pattern: str | None = None) -> str:
    """Extract a version string from command output.

    With a pattern, the whole output is searched and the first capture
    group (or the whole match when the pattern has no groups) is returned.
    Without one, lines are scanned top to bottom and the first X.Y or
    X.Y.Z substring wins. A leading "v" is never stripped here.

    Args:
        output: Raw probe output
        pattern: Optional regular expression

    Returns:
        Bare version string

    Raises:
        InvalidPattern: pattern does not compile
        NoVersionFound: nothing matched
    """
    if pattern:
        try:
            regex = re.compile(pattern)
        except re.error as e:
            raise InvalidPattern(f"invalid version pattern: {e}") from e

        match = regex.search(output)
        if not match:
            raise NoVersionFound("pattern did not match")
        if regex.groups and match.group(1) is not None:
            return match.group(1)
        return match.group(0)

    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        m = VERSION_RE.search(line)
        if m:
            return m.group(0)

    raise NoVersionFound("no version found in output")
