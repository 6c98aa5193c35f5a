"""
Semantic version parsing and range matching.

Supports the range operators package manifests commonly declare for their
engine compatibility: caret, tilde, comparison operators, exact versions,
wildcards and partial versions, hyphen ranges, whitespace-separated
intersections and ``||`` unions.
"""

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import List, Optional, Tuple

from pkgsearch.core.exceptions import MalformedEngineRange


_IDENTIFIER = r"[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*"

_VERSION_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    rf"(?:-({_IDENTIFIER}))?"
    rf"(?:\+({_IDENTIFIER}))?$"
)

_PARTIAL_RE = re.compile(
    r"^(?P<op>\^|~>|~|>=|<=|>|<|=)?v?"
    r"(?P<major>\d+|[xX*])"
    r"(?:\.(?P<minor>\d+|[xX*]))?"
    r"(?:\.(?P<patch>\d+|[xX*]))?"
    rf"(?:-(?P<pre>{_IDENTIFIER}))?"
    rf"(?:\+(?P<build>{_IDENTIFIER}))?$"
)

# "> = 1.2.3" and ">= 1.2.3" both bind the operator to the version
_OPERATOR_SPACE_RE = re.compile(r"(\^|~>|~|>=|<=|>|<|=)\s+")
_HYPHEN_RE = re.compile(r"^(\S+)\s+-\s+(\S+)$")


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """
    A parsed semantic version.

    Ordering follows semver precedence; build metadata is ignored.
    """
    major: int
    minor: int
    patch: int
    prerelease: Tuple[str, ...] = ()
    build: Tuple[str, ...] = ()

    @property
    def precedence(self) -> tuple:
        if not self.prerelease:
            release_key: tuple = (1,)
        else:
            release_key = (0,) + tuple(
                (0, int(part), "") if part.isdigit() else (1, 0, part)
                for part in self.prerelease
            )
        return (self.major, self.minor, self.patch, release_key)

    def __eq__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self.precedence == other.precedence

    def __lt__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self.precedence < other.precedence

    def __hash__(self):
        return hash(self.precedence)

    def __str__(self):
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + ".".join(self.build)
        return text


def parse_version(text) -> Optional[Version]:
    """
    Parse a full semantic version.

    Args:
        text: Version string such as ``1.2.3`` or ``v2.0.0-beta.1``.

    Returns:
        The parsed version, or None if ``text`` is not a valid semver.
    """
    if not isinstance(text, str):
        return None
    match = _VERSION_RE.match(text.strip())
    if not match:
        return None
    major, minor, patch, pre, build = match.groups()
    return Version(
        int(major),
        int(minor),
        int(patch),
        tuple(pre.split(".")) if pre else (),
        tuple(build.split(".")) if build else (),
    )


Comparator = Tuple[str, Version]

_COMPARE = {
    ">=": lambda v, bound: v >= bound,
    "<=": lambda v, bound: v <= bound,
    ">": lambda v, bound: v > bound,
    "<": lambda v, bound: v < bound,
    "=": lambda v, bound: v == bound,
}


@dataclass(frozen=True)
class VersionRange:
    """
    A union of comparator sets.

    A version satisfies the range when it satisfies every comparator of at
    least one set. An empty set matches any version.
    """
    raw: str
    alternatives: Tuple[Tuple[Comparator, ...], ...]

    def contains(self, version) -> bool:
        if not isinstance(version, Version):
            version = parse_version(version)
            if version is None:
                return False
        return any(
            all(_COMPARE[op](version, bound) for op, bound in comparators)
            for comparators in self.alternatives
        )

    __contains__ = contains


def parse_range(text) -> VersionRange:
    """
    Parse a version range expression.

    Args:
        text: Range such as ``^1.2.0``, ``>=1.0.0 <2.0.0`` or ``~1.2 || 2.x``.

    Returns:
        The parsed range.

    Raises:
        MalformedEngineRange: If ``text`` is not a supported range expression.
    """
    if not isinstance(text, str):
        raise MalformedEngineRange(text, "range must be a string")

    alternatives = []
    for part in text.split("||"):
        part = _OPERATOR_SPACE_RE.sub(r"\1", part.strip())
        comparators: List[Comparator] = []
        hyphen = _HYPHEN_RE.match(part)
        if hyphen:
            comparators.extend(_hyphen_comparators(text, hyphen.group(1), hyphen.group(2)))
        else:
            for token in part.split():
                comparators.extend(_token_comparators(text, token))
        alternatives.append(tuple(comparators))

    return VersionRange(raw=text, alternatives=tuple(alternatives))


def satisfies(version, range_text: str) -> bool:
    """
    Check whether ``version`` falls within ``range_text``.

    Raises:
        MalformedEngineRange: If the range cannot be parsed.
    """
    return parse_range(range_text).contains(version)


@dataclass(frozen=True)
class _Partial:
    major: Optional[int]
    minor: Optional[int]
    patch: Optional[int]
    prerelease: Tuple[str, ...]

    def floor(self) -> Version:
        return Version(self.major or 0, self.minor or 0, self.patch or 0, self.prerelease)

    def next_bound(self) -> Version:
        """Smallest version past everything this partial version covers."""
        if self.minor is None:
            return Version(self.major + 1, 0, 0)
        return Version(self.major, self.minor + 1, 0)


def _wildcard(value: Optional[str]) -> Optional[int]:
    if value is None or value in ("x", "X", "*"):
        return None
    return int(value)


def _parse_partial(raw: str, token: str) -> Tuple[str, _Partial]:
    match = _PARTIAL_RE.match(token)
    if not match:
        raise MalformedEngineRange(raw, f"unrecognized comparator {token!r}")
    major = _wildcard(match.group("major"))
    minor = _wildcard(match.group("minor"))
    patch = _wildcard(match.group("patch"))
    # Anything after a wildcard is a wildcard too
    if major is None:
        minor = patch = None
    elif minor is None:
        patch = None
    pre = match.group("pre")
    if pre and patch is None:
        raise MalformedEngineRange(raw, f"prerelease on partial version {token!r}")
    partial = _Partial(major, minor, patch, tuple(pre.split(".")) if pre else ())
    return match.group("op") or "", partial


def _token_comparators(raw: str, token: str) -> List[Comparator]:
    op, partial = _parse_partial(raw, token)

    if partial.major is None:
        if op in ("", "=", ">=", "<=", "^", "~", "~>"):
            return []
        raise MalformedEngineRange(raw, f"operator {op!r} cannot take a wildcard")

    full = partial.patch is not None
    floor = partial.floor()

    if op in ("", "="):
        if full:
            return [("=", floor)]
        return [(">=", floor), ("<", partial.next_bound())]

    if op == "^":
        if partial.minor is None or partial.major > 0:
            upper = Version(partial.major + 1, 0, 0)
        elif partial.patch is None or partial.minor > 0:
            upper = Version(0, partial.minor + 1, 0)
        else:
            upper = Version(0, 0, partial.patch + 1)
        return [(">=", floor), ("<", upper)]

    if op in ("~", "~>"):
        return [(">=", floor), ("<", partial.next_bound())]

    if op == ">=":
        return [(">=", floor)]

    if op == ">":
        if full:
            return [(">", floor)]
        return [(">=", partial.next_bound())]

    if op == "<=":
        if full:
            return [("<=", floor)]
        return [("<", partial.next_bound())]

    # op == "<"
    return [("<", floor)]


def _hyphen_comparators(raw: str, low: str, high: str) -> List[Comparator]:
    low_op, low_partial = _parse_partial(raw, low)
    high_op, high_partial = _parse_partial(raw, high)
    if low_op or high_op:
        raise MalformedEngineRange(raw, "hyphen ranges take bare versions")

    comparators: List[Comparator] = []
    if low_partial.major is not None:
        comparators.append((">=", low_partial.floor()))
    if high_partial.major is not None:
        if high_partial.patch is not None:
            comparators.append(("<=", high_partial.floor()))
        else:
            comparators.append(("<", high_partial.next_bound()))
    return comparators
