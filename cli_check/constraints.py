"""
Semantic version constraints built atop the semver package.

Supported expressions:
- exact versions ("1.2.3", "=1.2.3", "==1.2.3") and "!=" exclusions
- comparisons (">=1.0.0", ">1.2", "<2", "<=1.4.x")
- caret ranges ^x.y.z and tilde ranges ~x.y.z (also "~>")
- wildcards ("1.2.x", "1.*", "*")
- hyphen ranges ("1.2.3 - 2.3")
- comparator sets split by spaces or commas (">=1.0.0 <2.0.0")
- alternatives split by "||" ("^18.0.0 || ^20.0.0")

Versions with one or two components ("1", "1.2") are padded with zeros
before comparison. Pre-release precedence follows semantic versioning
(1.2.3-1 < 1.2.3); build metadata is ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from semver import Version

from .errors import InvalidConstraint, InvalidVersion

# Dot-separated identifiers of [0-9A-Za-z-]
IDENTIFIERS = r"[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*"

PARTIAL_RE = re.compile(
    r"^v?(?P<major>\d+|[xX*])(?:\.(?P<minor>\d+|[xX*]))?(?:\.(?P<patch>\d+|[xX*]))?"
    rf"(?:-(?P<pre>{IDENTIFIERS}))?(?:\+{IDENTIFIERS})?$"
)
OPERATOR_RE = re.compile(r"^(>=|<=|!=|==|~>|>|<|=|\^|~)?(.*)$")
HYPHEN_RE = re.compile(r"^(\S+)\s+-\s+(\S+)$")
WILDCARDS = {"x", "X", "*"}


def _make_version(major: int, minor: int, patch: int, pre: str | None = None) -> Version:
    return Version(major, minor, patch, prerelease=pre)


def _release(version: Version) -> tuple[int, int, int]:
    return (version.major, version.minor, version.patch)


def parse_version(text: str) -> Version:
    """Parse an installed version string.

    Args:
        text: Version such as "1.25.4", "v2.0.0-rc.1" or "1.2"

    Returns:
        semver Version padded to three components, without build metadata

    Raises:
        InvalidVersion: text is not a semantic version
    """
    candidate = text.strip()
    if candidate.startswith("v"):
        candidate = candidate[1:]

    try:
        version = Version.parse(candidate, optional_minor_and_patch=True)
    except (ValueError, TypeError) as e:
        raise InvalidVersion(f"invalid semantic version: {text!r}") from e
    return version.replace(build=None)


@dataclass(frozen=True)
class Comparator:
    """
    A single version comparison.

    Attributes:
        op: One of "=", "!=", ">", ">=", "<", "<=", or "outside"
        version: Version compared against (lower bound for "outside")
        upper: Exclusive upper bound, only used by "outside"
    """
    op: str
    version: Version
    upper: Version | None = None

    def matches(self, v: Version) -> bool:
        if self.op == "=":
            return v == self.version
        if self.op == "!=":
            return v != self.version
        if self.op == ">":
            return v > self.version
        if self.op == ">=":
            return v >= self.version
        if self.op == "<":
            return v < self.version
        if self.op == "<=":
            return v <= self.version
        if self.op == "outside":
            return v < self.version or v >= self.upper
        raise ValueError(f"Unknown comparator operator: {self.op}")

    def __str__(self) -> str:
        if self.op == "outside":
            return f"!({self.version} - {self.upper})"
        return f"{self.op}{self.version}"


@dataclass(frozen=True)
class Constraint:
    """
    Parsed constraint: a disjunction of comparator sets.

    An empty comparator set matches any release version.
    """
    raw: str
    alternatives: tuple[tuple[Comparator, ...], ...]

    def check(self, version: Version) -> bool:
        return any(_set_matches(comparators, version) for comparators in self.alternatives)

    def __str__(self) -> str:
        return self.raw


def _set_matches(comparators: tuple[Comparator, ...], version: Version) -> bool:
    if not all(c.matches(version) for c in comparators):
        return False
    if version.prerelease is not None:
        # Pre-releases only match when the set names one on the same release
        return any(
            c.version.prerelease is not None and _release(c.version) == _release(version)
            for c in comparators
        )
    return True


def parse_constraint(text: str) -> Constraint:
    """Parse a constraint expression.

    Args:
        text: Expression such as ">=1.20.0" or "^18.0.0 || ^20.0.0"

    Returns:
        Constraint

    Raises:
        InvalidConstraint: expression is empty or malformed
    """
    if not text or not text.strip():
        raise InvalidConstraint("empty version constraint")

    alternatives = []
    for alternative in text.split("||"):
        try:
            alternatives.append(_parse_alternative(alternative.strip()))
        except ValueError as e:
            raise InvalidConstraint(f"invalid version constraint '{text}': {e}") from e

    return Constraint(raw=text.strip(), alternatives=tuple(alternatives))


def _parse_alternative(text: str) -> tuple[Comparator, ...]:
    if not text:
        raise ValueError("empty alternative")

    hyphen = HYPHEN_RE.match(text)
    if hyphen:
        return _expand_hyphen(hyphen.group(1), hyphen.group(2))

    # Allow a space between operator and version (">= 1.2")
    text = re.sub(r"(>=|<=|!=|==|~>|>|<|=|\^|~)\s+", r"\1", text)

    comparators: list[Comparator] = []
    for token in re.split(r"[\s,]+", text):
        if token:
            comparators.extend(_expand_token(token))
    return tuple(comparators)


def _parse_partial(text: str) -> tuple[int | None, int | None, int | None, str | None]:
    m = PARTIAL_RE.match(text)
    if not m:
        raise ValueError(f"malformed version '{text}'")

    parts: list[int | None] = []
    wildcard = False
    for name in ("major", "minor", "patch"):
        value = m.group(name)
        if value is None or value in WILDCARDS:
            wildcard = True
        if wildcard:
            parts.append(None)
        else:
            parts.append(int(value))

    pre = m.group("pre")
    if pre and parts[2] is None:
        raise ValueError(f"pre-release requires a full version: '{text}'")
    return (parts[0], parts[1], parts[2], pre)


def _floor(major: int | None, minor: int | None, patch: int | None, pre: str | None = None) -> Version:
    return _make_version(major or 0, minor or 0, patch or 0, pre)


def _next_after(major: int, minor: int | None) -> Version:
    """Smallest version above a partial X or X.Y."""
    if minor is None:
        return _make_version(major + 1, 0, 0)
    return _make_version(major, minor + 1, 0)


def _expand_token(token: str) -> list[Comparator]:
    m = OPERATOR_RE.match(token)
    op = m.group(1) or "="
    major, minor, patch, pre = _parse_partial(m.group(2))

    if op == "==":
        op = "="
    if op == "~>":
        op = "~"

    if major is None:
        # "*", ">=*", "<=*": any version
        if op in ("=", ">=", "<="):
            return []
        raise ValueError(f"wildcard cannot be used with '{op}'")

    full = patch is not None

    if op == "=":
        if full:
            return [Comparator("=", _make_version(major, minor, patch, pre))]
        return [Comparator(">=", _floor(major, minor, None)), Comparator("<", _next_after(major, minor))]

    if op == "!=":
        if full:
            return [Comparator("!=", _make_version(major, minor, patch, pre))]
        return [Comparator("outside", _floor(major, minor, None), _next_after(major, minor))]

    if op == ">":
        if full:
            return [Comparator(">", _make_version(major, minor, patch, pre))]
        return [Comparator(">=", _next_after(major, minor))]

    if op == ">=":
        return [Comparator(">=", _floor(major, minor, patch, pre))]

    if op == "<":
        return [Comparator("<", _floor(major, minor, patch, pre))]

    if op == "<=":
        if full:
            return [Comparator("<=", _make_version(major, minor, patch, pre))]
        return [Comparator("<", _next_after(major, minor))]

    if op == "~":
        lower = Comparator(">=", _floor(major, minor, patch, pre))
        return [lower, Comparator("<", _next_after(major, minor))]

    if op == "^":
        lower = Comparator(">=", _floor(major, minor, patch, pre))
        if major > 0 or minor is None:
            upper = _make_version(major + 1, 0, 0)
        elif minor > 0 or patch is None:
            upper = _make_version(0, minor + 1, 0)
        else:
            upper = _make_version(0, 0, patch + 1)
        return [lower, Comparator("<", upper)]

    raise ValueError(f"unknown operator '{op}'")


def _expand_hyphen(low: str, high: str) -> tuple[Comparator, ...]:
    lmajor, lminor, lpatch, lpre = _parse_partial(low)
    hmajor, hminor, hpatch, hpre = _parse_partial(high)

    comparators = []
    if lmajor is not None:
        comparators.append(Comparator(">=", _floor(lmajor, lminor, lpatch, lpre)))
    if hmajor is not None:
        if hpatch is not None:
            comparators.append(Comparator("<=", _make_version(hmajor, hminor, hpatch, hpre)))
        else:
            comparators.append(Comparator("<", _next_after(hmajor, hminor)))
    return tuple(comparators)


def satisfies(version: str, constraint: str) -> bool:
    """Check a version string against a constraint string.

    Raises:
        InvalidConstraint: constraint does not parse
        InvalidVersion: version does not parse
    """
    parsed_constraint = parse_constraint(constraint)
    return parsed_constraint.check(parse_version(version))
