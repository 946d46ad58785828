"""Version parsing and bumping utilities.

Handles conversion between version strings and semver objects, with
special handling for incomplete version strings (e.g., "1.0" → "1.0.0"),
and computes the next version for each change severity.
"""

from __future__ import annotations

import semver

from .errors import VersionParseError
from .severity import Severity


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Handles incomplete versions by padding the numeric core with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "1.2-beta.1" → "1.2.0-beta.1"

    Raises:
        VersionParseError: If the string is not a (padded) semantic version.
    """
    text = version_str.strip()
    # Split off prerelease/build so only the numeric core is padded
    marks = [i for i in (text.find("-"), text.find("+")) if i >= 0]
    cut = min(marks, default=len(text))
    core, suffix = text[:cut], text[cut:]

    parts = core.split(".")
    if len(parts) > 3 or not all(p.isdigit() for p in parts):
        raise VersionParseError(version_str)
    while len(parts) < 3:
        parts.append("0")

    try:
        return semver.Version.parse(".".join(parts) + suffix)
    except ValueError as exc:
        raise VersionParseError(version_str, str(exc)) from exc


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings: negative if a < b, 0 if equal, positive if a > b."""
    return parse_version(a).compare(parse_version(b))


def _prerelease_suffix(prerelease_id: str) -> str:
    return f"{prerelease_id}.0" if prerelease_id else "0"


def _increment_prerelease(prerelease: str) -> str:
    """Increment the trailing numeric identifier of a prerelease suffix.

    Examples:
        "beta.1" → "beta.2"
        "0" → "1"
        "beta" → "beta.0"
    """
    identifiers = prerelease.split(".")
    if identifiers[-1].isdigit():
        identifiers[-1] = str(int(identifiers[-1]) + 1)
    else:
        identifiers.append("0")
    return ".".join(identifiers)


def next_version(version_str: str, severity: Severity, prerelease_id: str = "") -> str:
    """Return the version a package gets for a change of the given severity.

    Release bumps drop any prerelease suffix. Pre-release bumps perform
    the matching release bump and then start a fresh suffix at 0.

    Examples:
        next_version("1.2.3", Severity.MINOR) → "1.3.0"
        next_version("1.2.3", Severity.PREMAJOR, "beta") → "2.0.0-beta.0"
        next_version("1.2.4-beta.0", Severity.PRERELEASE) → "1.2.4-beta.1"
        next_version("1.2.3", Severity.PRERELEASE) → "1.2.4-0"

    Raises:
        VersionParseError: If version_str cannot be parsed.
    """
    version = parse_version(version_str)

    if severity is Severity.NONE:
        return version_str
    if severity is Severity.PRERELEASE and version.prerelease:
        prerelease = _increment_prerelease(version.prerelease)
        return str(version.replace(prerelease=prerelease, build=None))

    if severity in (Severity.MAJOR, Severity.PREMAJOR):
        bumped = version.bump_major()
    elif severity in (Severity.MINOR, Severity.PREMINOR):
        bumped = version.bump_minor()
    else:
        bumped = version.bump_patch()

    if severity.is_prerelease:
        bumped = bumped.replace(prerelease=_prerelease_suffix(prerelease_id))
    return str(bumped)
