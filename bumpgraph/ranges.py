"""Dependency range rewriting.

Rewrites the range a dependent declares on a bumped package so that it
references the package's new version, keeping the operator the author
chose. Handles npm-style ranges ("^1.2.3", "~1.2", "1.2.3"), PEP 440
single-clause specifiers ("==1.2.3", "~=1.2", ">=1.2") and the
"workspace:" protocol wrapping either. Anything else falls back to the
exact new version.
"""

from __future__ import annotations

import re

from packaging.specifiers import InvalidSpecifier, Specifier

WORKSPACE_PROTOCOL = "workspace:"

# Ranges that float with the workspace and never name a version
SENTINELS = frozenset({"*", "workspace:*", "workspace:^", "workspace:~"})

_VERSION = r"v?\d+(?:\.\d+){0,2}(?:-[0-9A-Za-z.-]+)?(?:\+[0-9A-Za-z.-]+)?"
_NPM_RANGE = re.compile(rf"^(?P<op>\^|~|=|>=)?(?P<version>{_VERSION})$")

# PEP 440 operators that still admit the new version after substitution
_PEP440_OPERATORS = ("===", "==", "~=", ">=")


def range_style(old_range: str) -> str | None:
    """Return the operator prefix of a recognized range, or None.

    The prefix is what rewrite_range() keeps: "^", "~", "", "=", ">=",
    "==", "~=", "===", optionally preceded by "workspace:". Sentinels are
    returned whole.

    Examples:
        range_style("^1.0.0") → "^"
        range_style("1.0.0") → ""
        range_style("workspace:~1.0") → "workspace:~"
        range_style(">=1.0,<2.0") → None
    """
    text = old_range.strip()
    if text in SENTINELS:
        return text
    if text.startswith(WORKSPACE_PROTOCOL):
        inner = range_style(text[len(WORKSPACE_PROTOCOL) :])
        if inner is None or inner in SENTINELS:
            return None
        return WORKSPACE_PROTOCOL + inner

    match = _NPM_RANGE.match(text)
    if match:
        return match.group("op") or ""

    try:
        spec = Specifier(text)
    except InvalidSpecifier:
        return None
    if spec.operator in _PEP440_OPERATORS and not spec.version.endswith(".*"):
        return spec.operator
    return None


def rewrite_range(old_range: str, new_version: str) -> str:
    """Point a dependency range at a new version, preserving its style.

    Examples:
        rewrite_range("^1.0.0", "1.1.0") → "^1.1.0"
        rewrite_range("workspace:~1.0.0", "1.0.1") → "workspace:~1.0.1"
        rewrite_range("~=1.0", "1.2.0") → "~=1.2.0"
        rewrite_range("workspace:*", "2.0.0") → "workspace:*"
        rewrite_range(">=1.0,<2.0", "2.0.0") → "2.0.0"

    Args:
        old_range: Range as declared by the dependent.
        new_version: The dependency's new version.

    Returns:
        The new range. Unrecognized ranges become the exact new version.
    """
    style = range_style(old_range)
    if style is None:
        return new_version
    if style in SENTINELS:
        return old_range.strip()
    return f"{style}{new_version}"
