"""Bump propagation: decide which packages bump, by how much, and how
dependents' ranges are rewritten.

The engine works on an in-memory snapshot in four phases:
1. Seed severities from the change records
2. Propagate dependent severities along runtime and dev edges
3. Synchronize every group to its highest member severity
4. Repeat 2-3 until nothing changes, then compute versions and ranges

Severities only ever move up a finite lattice, so the loop in step 4
terminates. All working state lives in a BumpState owned by one run.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from pydantic import BaseModel, Field

from .errors import AmbiguousGroupMembershipError, VersionParseError
from .graph import DependencyGraph, build_dependents, dependents_of
from .groups import build_group_index
from .models import (
    BumpDecision,
    BumpFailure,
    BumpOptions,
    BumpResult,
    ChangeRecord,
    DependencyKind,
    FailureKind,
    PackageInfo,
    RangeRewrite,
)
from .ranges import rewrite_range
from .severity import Severity, merge, merge_all
from .versions import next_version


class BumpState(BaseModel):
    """Working state of a single engine run.

    Attributes:
        severity: Package name → resolved severity so far.
        dependent_severity: Package name → severity its dependents receive.
            Set for packages that are changed or modified.
        modified: Packages whose severity is above none.
        changed: Packages with at least one change record of their own.
    """

    severity: dict[str, Severity] = Field(default_factory=dict)
    dependent_severity: dict[str, Severity] = Field(default_factory=dict)
    modified: set[str] = Field(default_factory=set)
    changed: set[str] = Field(default_factory=set)


def seed_state(
    packages: Mapping[str, PackageInfo], changes: Iterable[ChangeRecord]
) -> BumpState:
    """Create the initial state from the change records.

    Records naming packages outside the snapshot are dropped. Multiple
    records for one package merge both their severities and their
    dependent severities.
    """
    state = BumpState(severity={name: Severity.NONE for name in sorted(packages)})

    for record in changes:
        name = record.package_name
        if name not in packages:
            continue
        state.changed.add(name)
        state.severity[name] = merge(state.severity[name], record.severity)
        state.dependent_severity[name] = merge(
            state.dependent_severity.get(name, Severity.NONE),
            record.dependent_severity,
        )

    state.modified = {
        n for n in state.changed if state.severity[n] is not Severity.NONE
    }
    return state


def _escalate(
    state: BumpState, name: str, severity: Severity, dependent_severity: Severity
) -> bool:
    """Raise a package's severity and inherited dependent severity.

    Returns:
        True if either value went up.
    """
    raised = False

    current = state.severity[name]
    candidate = merge(current, severity)
    if candidate is not current:
        state.severity[name] = candidate
        state.modified.add(name)
        raised = True

    if name in state.modified:
        inherited = state.dependent_severity.get(name, Severity.NONE)
        candidate = merge(inherited, dependent_severity)
        if candidate is not inherited:
            state.dependent_severity[name] = candidate
            raised = True

    return raised


def propagation_pass(
    state: BumpState, graph: DependencyGraph, options: BumpOptions
) -> bool:
    """Push each changed or modified package's dependent severity to its
    dependents.

    A package with a "none" change record still hands its dependent
    severity on, even though it is not bumped itself. Packages modified
    during the pass are processed in the same pass. Does nothing unless
    propagate_to_dependencies is set.

    Returns:
        True if any severity changed.
    """
    if not options.propagate_to_dependencies:
        return False

    changed = False
    queue = sorted(state.modified | state.changed)
    while queue:
        name = queue.pop(0)
        dependent_severity = state.dependent_severity.get(name, Severity.NONE)
        if dependent_severity is Severity.NONE:
            continue

        for dependent in dependents_of(graph, name, propagating_only=True):
            if _escalate(state, dependent, dependent_severity, dependent_severity):
                changed = True
                if dependent not in queue:
                    queue.append(dependent)

    return changed


def group_sync_pass(state: BumpState, group_index: Mapping[str, str]) -> bool:
    """Raise every member of a group to the group's highest severity.

    Returns:
        True if any severity changed.
    """
    members: dict[str, list[str]] = {}
    for name in sorted(group_index):
        members.setdefault(group_index[name], []).append(name)

    changed = False
    for group_name in sorted(members):
        names = members[group_name]
        group_severity = merge_all(state.severity[n] for n in names)
        if group_severity is Severity.NONE:
            continue

        group_dependent = merge_all(
            state.dependent_severity.get(n, Severity.NONE) for n in names
        )
        for name in names:
            if _escalate(state, name, group_severity, group_dependent):
                changed = True

    return changed


def run_to_fixpoint(
    state: BumpState,
    graph: DependencyGraph,
    group_index: Mapping[str, str],
    options: BumpOptions,
) -> int:
    """Alternate propagation and group sync until a pass changes nothing.

    Returns:
        Number of passes run, including the final one that changed nothing.
    """
    passes = 0
    while True:
        passes += 1
        propagated = propagation_pass(state, graph, options)
        synced = group_sync_pass(state, group_index)
        if not (propagated or synced):
            return passes


def _wants_rewrite(state: BumpState, dependent: str, options: BumpOptions) -> bool:
    if options.propagate_to_dependencies or options.rewrite_dependent_ranges:
        return True
    return dependent in state.modified


def finalize(
    state: BumpState,
    packages: Mapping[str, PackageInfo],
    graph: DependencyGraph,
    options: BumpOptions,
    group_conflicts: Mapping[str, list[str]] | None = None,
) -> BumpResult:
    """Turn the fixpoint state into versions, range rewrites and failures.

    A package whose version cannot be parsed gets a failure instead of a
    decision, and no range is rewritten to point at it.
    """
    failures: list[BumpFailure] = []
    for name, group_names in sorted((group_conflicts or {}).items()):
        failures.append(
            BumpFailure(
                package=name,
                kind=FailureKind.AMBIGUOUS_GROUP,
                message=str(AmbiguousGroupMembershipError({name: group_names})),
            )
        )

    versions: dict[str, str] = {}
    for name in sorted(packages):
        info = packages[name]
        severity = state.severity[name]
        if severity is Severity.NONE:
            versions[name] = info.version
            continue
        try:
            versions[name] = next_version(info.version, severity, options.prerelease_id)
        except VersionParseError as exc:
            failures.append(
                BumpFailure(
                    package=name, kind=FailureKind.VERSION_PARSE, message=str(exc)
                )
            )

    rewrites: dict[str, list[RangeRewrite]] = {name: [] for name in versions}
    for dep in sorted(state.modified):
        if dep not in versions:
            continue
        for dependent in graph[dep]:
            if dependent.name not in versions:
                continue
            if not _wants_rewrite(state, dependent.name, options):
                continue
            old_range = packages[dependent.name].ranges(dependent.kind)[dep]
            new_range = rewrite_range(old_range, versions[dep])
            if new_range != old_range:
                rewrites[dependent.name].append(
                    RangeRewrite(
                        dependency=dep,
                        kind=dependent.kind,
                        old_range=old_range,
                        new_range=new_range,
                    )
                )

    kind_order = list(DependencyKind)
    decisions: dict[str, BumpDecision] = {}
    for name, version in versions.items():
        severity = state.severity[name]
        decisions[name] = BumpDecision(
            name=name,
            severity=severity,
            old_version=packages[name].version,
            version=version,
            rewrites=sorted(
                rewrites[name],
                key=lambda r: (kind_order.index(r.kind), r.dependency),
            ),
            is_newly_modified=(
                severity is not Severity.NONE and name not in state.changed
            ),
            is_new_package=(
                options.existing_packages is not None
                and name not in options.existing_packages
            ),
        )

    failures.sort(key=lambda f: (f.package, f.kind.value))
    return BumpResult(decisions=decisions, failures=failures)


def compute_bumps(
    packages: Mapping[str, PackageInfo],
    changes: Iterable[ChangeRecord],
    options: BumpOptions | None = None,
) -> BumpResult:
    """Compute the bump decision for every package in a workspace snapshot.

    Args:
        packages: Map of package name → PackageInfo. Never modified.
        changes: Change records collected before the run.
        options: Propagation, range, group and prerelease settings.

    Returns:
        BumpResult with one decision per package whose version math
        succeeded, plus version-parse and ambiguous-group failures.
    """
    options = options or BumpOptions()

    graph = build_dependents(packages)
    group_index, conflicts = build_group_index(
        options.groups, packages, strict=False
    )

    state = seed_state(packages, changes)
    run_to_fixpoint(state, graph, group_index, options)
    return finalize(state, packages, graph, options, conflicts)
