"""Change severities and the lattice used to merge them.

Severities are ordered none < patch < minor < major. The pre-release
variants share the ordinal of their base level, so they propagate and
merge like that level, but carry an extra flag the version calculator
uses to append a prerelease suffix.

Within one ordinal the variants are ranked too, so that merging is a
plain max over a total order:

    prerelease < prepatch < patch < preminor < minor < premajor < major
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum


class Severity(str, Enum):
    NONE = "none"
    PRERELEASE = "prerelease"
    PREPATCH = "prepatch"
    PATCH = "patch"
    PREMINOR = "preminor"
    MINOR = "minor"
    PREMAJOR = "premajor"
    MAJOR = "major"

    @property
    def ordinal(self) -> int:
        """Base level: 0 for none, 1 patch, 2 minor, 3 major."""
        return _ORDINAL[self]

    @property
    def rank(self) -> tuple[int, int]:
        return (_ORDINAL[self], _TIE_BREAK[self])

    @property
    def is_prerelease(self) -> bool:
        return self in _PRERELEASE

    def __str__(self) -> str:
        return self.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_ORDINAL = {
    Severity.NONE: 0,
    Severity.PRERELEASE: 1,
    Severity.PREPATCH: 1,
    Severity.PATCH: 1,
    Severity.PREMINOR: 2,
    Severity.MINOR: 2,
    Severity.PREMAJOR: 3,
    Severity.MAJOR: 3,
}

# Release variants outrank pre-release variants of the same ordinal
_TIE_BREAK = {
    Severity.NONE: 0,
    Severity.PRERELEASE: 0,
    Severity.PREPATCH: 1,
    Severity.PATCH: 2,
    Severity.PREMINOR: 1,
    Severity.MINOR: 2,
    Severity.PREMAJOR: 1,
    Severity.MAJOR: 2,
}

_PRERELEASE = frozenset(
    {Severity.PRERELEASE, Severity.PREPATCH, Severity.PREMINOR, Severity.PREMAJOR}
)


def parse_severity(value: str | Severity) -> Severity:
    """Convert a change type string ("minor", "prepatch", ...) to a Severity.

    Raises:
        ValueError: If the string names no known severity.
    """
    if isinstance(value, Severity):
        return value
    try:
        return Severity(value.strip().lower())
    except ValueError:
        choices = ", ".join(s.value for s in Severity)
        raise ValueError(
            f"Unknown change type {value!r} (expected one of: {choices})"
        ) from None


def merge(a: Severity, b: Severity) -> Severity:
    """Return the higher of two severities.

    Commutative and associative, so the order in which change records and
    propagation steps are applied never affects the result.
    """
    return a if a.rank >= b.rank else b


def merge_all(severities: Iterable[Severity]) -> Severity:
    """Merge any number of severities, starting from NONE."""
    result = Severity.NONE
    for severity in severities:
        result = merge(result, severity)
    return result
