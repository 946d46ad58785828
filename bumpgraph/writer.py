"""Write bump decisions back to pyproject.toml files.

Only [project].version and the specifiers of rewritten internal
requirements change; tomlkit keeps everything else byte-for-byte.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any, cast

import tomlkit
from packaging.requirements import Requirement

from .models import BumpDecision, DependencyKind
from .toml import load_pyproject, save_pyproject
from .workspace import dep_canonical_name


def format_requirement(dep_str: str, new_range: str) -> str:
    """Swap the specifier of a requirement string for `new_range`.

    Extras are kept (sorted) and so is the environment marker. A range
    that is a bare version becomes an exact pin.

    Examples:
        format_requirement("pkg-a>=1.0", ">=1.1.0") → "pkg-a>=1.1.0"
        format_requirement("pkg-a[x]", "1.1.0") → "pkg-a[x]==1.1.0"
        format_requirement("pkg-a==1.0; python_version<'3.12'", "1.1.0")
            → "pkg-a==1.1.0; python_version < \"3.12\""
    """
    req = Requirement(dep_str)
    extras = "[" + ",".join(sorted(req.extras)) + "]" if req.extras else ""
    spec = f"=={new_range}" if new_range[:1].isdigit() else new_range
    marker = f"; {req.marker}" if req.marker else ""
    return f"{req.name}{extras}{spec}{marker}"


def _requirement_lists(
    doc: tomlkit.TOMLDocument, kind: DependencyKind
) -> Iterator[list]:
    """Yield the editable arrays that hold requirements of one kind.

    Mirrors get_dependency_strings(), so a rewrite lands in the section
    its dependency was discovered in.
    """
    project = cast(dict[str, Any], doc["project"])
    if kind is DependencyKind.RUNTIME:
        candidates = [project.get("dependencies")]
    elif kind is DependencyKind.DEV:
        candidates = list(cast(dict, doc.get("dependency-groups", {})).values())
    else:
        candidates = list(project.get("optional-dependencies", {}).values())

    for candidate in candidates:
        if isinstance(candidate, list):
            yield candidate


def _rewrite_requirements(entries: list, ranges: dict[str, str]) -> None:
    # Entries that are not strings are include-group tables
    for i, entry in enumerate(entries):
        if isinstance(entry, str):
            name = dep_canonical_name(str(entry))
            if name in ranges:
                entries[i] = format_requirement(str(entry), ranges[name])


def apply_decision(pyproject_path: Path, decision: BumpDecision) -> None:
    """Write one package's new version and range rewrites to its manifest."""
    doc = load_pyproject(pyproject_path)
    if decision.modified:
        cast(dict[str, Any], doc["project"])["version"] = decision.version

    for kind in DependencyKind:
        ranges = {
            r.dependency: r.new_range for r in decision.rewrites if r.kind is kind
        }
        if not ranges:
            continue
        for entries in _requirement_lists(doc, kind):
            _rewrite_requirements(entries, ranges)

    save_pyproject(pyproject_path, doc)
