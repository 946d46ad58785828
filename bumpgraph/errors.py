"""Exception types raised by bumpgraph.

Library code raises these; only the CLI turns them into exit codes.
"""

from __future__ import annotations


class BumpgraphError(Exception):
    """Base class for all bumpgraph errors."""


class VersionParseError(BumpgraphError, ValueError):
    """A manifest version or prerelease suffix is not a valid semver."""

    def __init__(self, version: str, reason: str = "not a valid semantic version"):
        self.version = version
        self.reason = reason
        super().__init__(f"Invalid version {version!r}: {reason}")


class AmbiguousGroupMembershipError(BumpgraphError):
    """One or more packages are members of more than one group.

    Attributes:
        conflicts: Map of package name → sorted names of every group
                   that claims it.
    """

    def __init__(self, conflicts: dict[str, list[str]]):
        self.conflicts = conflicts
        details = "; ".join(
            f"{pkg} in {', '.join(groups)}" for pkg, groups in sorted(conflicts.items())
        )
        super().__init__(f"Packages belong to more than one group: {details}")


class WorkspaceError(BumpgraphError):
    """The workspace layout or configuration cannot be loaded."""


class ChangeFileError(BumpgraphError):
    """A change file cannot be read or does not describe a valid change."""
