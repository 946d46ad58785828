"""Data models for bumpgraph.

These Pydantic models are the inputs and outputs of the bump engine:
the manifest snapshot, change records, groups and options going in, and
the per-package decisions and failures coming out.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from packaging.utils import canonicalize_name
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .severity import Severity, parse_severity


class DependencyKind(str, Enum):
    """The manifest section a dependency is declared in."""

    RUNTIME = "runtime"
    DEV = "dev"
    PEER = "peer"

    @property
    def propagates(self) -> bool:
        """Whether a bump of the dependency escalates the dependent's severity.

        Peer dependents only get their range refreshed.
        """
        return self is not DependencyKind.PEER

    def __str__(self) -> str:
        return self.value


class PackageInfo(BaseModel):
    """Manifest data for a single package in the workspace.

    Attributes:
        name: Unique package name.
        path: Relative path from workspace root to the package directory.
        version: Current version string.
        dependencies: Runtime dependencies, name → range.
        dev_dependencies: Development dependencies, name → range.
        peer_dependencies: Peer dependencies, name → range.
    """

    name: str
    path: str
    version: str
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict)
    peer_dependencies: dict[str, str] = Field(default_factory=dict)

    def ranges(self, kind: DependencyKind) -> dict[str, str]:
        """Return the name → range mapping for one dependency kind."""
        if kind is DependencyKind.RUNTIME:
            return self.dependencies
        if kind is DependencyKind.DEV:
            return self.dev_dependencies
        return self.peer_dependencies


class ChangeMetadata(BaseModel):
    """Free-form details about a change. Never read by the engine."""

    comment: str = ""
    email: str = ""
    commit: str = ""
    date: datetime | None = None
    extra: dict[str, Any] = Field(default_factory=dict)


class ChangeRecord(BaseModel):
    """An author-declared request to bump a package.

    Accepts both the snake_case field names and the camelCase keys used
    in change files (``packageName``, ``type``, ``dependentChangeType``).
    Package names are stored in PEP 503 form, as workspace discovery
    stores them. A missing or null dependent severity resolves to
    ``patch`` here, so the engine never has to apply a default itself.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    package_name: str = Field(alias="packageName")
    severity: Severity = Field(alias="type")
    dependent_severity: Severity = Field(
        default=Severity.PATCH, alias="dependentChangeType"
    )
    metadata: ChangeMetadata = Field(default_factory=ChangeMetadata)

    @field_validator("package_name")
    @classmethod
    def _canonical_package_name(cls, value: str) -> str:
        return canonicalize_name(value)

    @field_validator("severity", mode="before")
    @classmethod
    def _parse_severity(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_severity(value)
        return value

    @field_validator("dependent_severity", mode="before")
    @classmethod
    def _default_dependent_severity(cls, value: Any) -> Any:
        if value is None or value == "":
            return Severity.PATCH
        if isinstance(value, str):
            return parse_severity(value)
        return value


class GroupConfig(BaseModel):
    """A configured group before its globs are matched against packages."""

    name: str
    include: list[str]
    exclude: list[str] = Field(default_factory=list)

    @field_validator("include", "exclude", mode="before")
    @classmethod
    def _coerce_to_list(cls, value: Any) -> Any:
        # A single pattern may be written as a plain string
        if isinstance(value, str):
            return [value]
        return value


class PackageGroup(BaseModel):
    """A named set of packages that always share one bump severity."""

    name: str
    members: frozenset[str] = Field(default_factory=frozenset)


class BumpOptions(BaseModel):
    """Options for one engine run.

    Attributes:
        propagate_to_dependencies: Escalate dependents of bumped packages.
        rewrite_dependent_ranges: When propagation is off, still refresh
            the ranges that unbumped dependents declare on bumped packages.
        groups: Groups with resolved membership.
        prerelease_id: Identifier used for new prerelease suffixes
            (``"beta"`` gives ``2.0.0-beta.0``; empty gives ``2.0.0-0``).
        existing_packages: Names known to have been released before. When
            given, any other package is flagged as new.
        workspace_root: Passed through untouched.
    """

    propagate_to_dependencies: bool = False
    rewrite_dependent_ranges: bool = True
    groups: list[PackageGroup] = Field(default_factory=list)
    prerelease_id: str = ""
    existing_packages: frozenset[str] | None = None
    workspace_root: str | None = None


class RangeRewrite(BaseModel):
    """A dependency range in a dependent's manifest that must change.

    Attributes:
        dependency: Name of the bumped dependency.
        kind: Manifest section holding the range.
        old_range: Range as currently declared.
        new_range: Range referencing the dependency's new version.
    """

    dependency: str
    kind: DependencyKind
    old_range: str
    new_range: str


class BumpDecision(BaseModel):
    """The engine's verdict for one package."""

    name: str
    severity: Severity
    old_version: str
    version: str
    rewrites: list[RangeRewrite] = Field(default_factory=list)
    is_newly_modified: bool = False
    is_new_package: bool = False

    @property
    def modified(self) -> bool:
        return self.severity is not Severity.NONE

    @property
    def ranges(self) -> dict[str, str]:
        """Rewritten ranges as dependency name → new range."""
        return {r.dependency: r.new_range for r in self.rewrites}

    def range_for(self, dependency: str, kind: DependencyKind) -> str | None:
        for rewrite in self.rewrites:
            if rewrite.dependency == dependency and rewrite.kind is kind:
                return rewrite.new_range
        return None


class FailureKind(str, Enum):
    VERSION_PARSE = "version-parse"
    AMBIGUOUS_GROUP = "ambiguous-group"

    def __str__(self) -> str:
        return self.value


class BumpFailure(BaseModel):
    """A per-package problem reported alongside the successful decisions."""

    package: str
    kind: FailureKind
    message: str


class BumpResult(BaseModel):
    """Output of one engine run.

    Attributes:
        decisions: Package name → decision, sorted by name.
        failures: Problems that did not stop the run, in package order.
    """

    decisions: dict[str, BumpDecision] = Field(default_factory=dict)
    failures: list[BumpFailure] = Field(default_factory=list)

    @property
    def modified_packages(self) -> list[str]:
        return [name for name, d in self.decisions.items() if d.modified]

    @property
    def ok(self) -> bool:
        return not self.failures
