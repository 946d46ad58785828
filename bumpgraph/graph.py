"""Dependency graph utilities.

Builds the reverse dependency index the bump engine walks: for each
package, which workspace packages depend on it and through which
manifest section. Iteration order is sorted so identical input always
yields identical output.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import NamedTuple

from .models import DependencyKind, PackageInfo

DependencyGraph = dict[str, list["Dependent"]]


class Dependent(NamedTuple):
    """A package that declares a dependency on another package."""

    name: str
    kind: DependencyKind


def build_dependents(packages: Mapping[str, PackageInfo]) -> DependencyGraph:
    """Build the reverse dependency index for a manifest snapshot.

    Dependencies on names outside the snapshot and self-dependencies are
    ignored. A dependent that lists the same package under several kinds
    appears once per kind.

    Args:
        packages: Map of package name → PackageInfo.

    Returns:
        Map of every package name → its dependents, sorted by
        (dependent name, kind).

    Example:
        If b depends on a and c dev-depends on a:
        build_dependents({a, b, c})["a"] → [("b", RUNTIME), ("c", DEV)]
    """
    dependents: DependencyGraph = {name: [] for name in sorted(packages)}

    for name, info in packages.items():
        for kind in DependencyKind:
            for dep in info.ranges(kind):
                # Only track internal deps, ignore external packages
                if dep == name or dep not in packages:
                    continue
                dependents[dep].append(Dependent(name, kind))

    kind_order = list(DependencyKind)
    for entries in dependents.values():
        entries.sort(key=lambda d: (d.name, kind_order.index(d.kind)))
    return dependents


def dependents_of(
    graph: DependencyGraph, name: str, *, propagating_only: bool = False
) -> list[str]:
    """Return the distinct names of packages that depend on `name`.

    Args:
        graph: Index from build_dependents().
        name: Package whose dependents to list.
        propagating_only: Skip edges (such as peer) that never escalate
            the dependent's severity.
    """
    seen: list[str] = []
    for dependent in graph.get(name, []):
        if propagating_only and not dependent.kind.propagates:
            continue
        if dependent.name not in seen:
            seen.append(dependent.name)
    return seen
