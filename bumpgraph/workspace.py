"""Workspace discovery: build the manifest snapshot from a uv workspace."""

from __future__ import annotations

import glob
from pathlib import Path

import tomlkit
from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name

from .console import step
from .errors import WorkspaceError
from .models import DependencyKind, PackageInfo
from .toml import (
    get_dependency_strings,
    get_project_name,
    get_project_version,
    get_workspace_member_globs,
    load_pyproject,
)


def dep_canonical_name(dep_str: str) -> str:
    """Extract the canonical package name from a PEP 508 dependency string.

    Examples:
        "requests>=2.0" → "requests"
        "My_Package[extra]~=1.0" → "my-package"

    Raises:
        WorkspaceError: If the string is not a valid requirement.
    """
    return canonicalize_name(_parse_requirement(dep_str).name)


def _parse_requirement(dep_str: str) -> Requirement:
    try:
        return Requirement(dep_str)
    except InvalidRequirement as exc:
        raise WorkspaceError(f"Invalid dependency {dep_str!r}: {exc}") from exc


def discover_packages(
    root: Path, root_doc: tomlkit.TOMLDocument | None = None
) -> dict[str, PackageInfo]:
    """Scan the workspace and build the manifest snapshot.

    Reads [tool.uv.workspace].members from the root pyproject.toml to find
    package directories, then extracts name, version and internal deps
    (with their version specifiers) from each package's pyproject.toml.

    Args:
        root: Workspace root directory.
        root_doc: Already-parsed root pyproject.toml, if the caller has one.

    Returns:
        Map of package name to PackageInfo, sorted by name.

    Raises:
        WorkspaceError: If no packages are found or a manifest is invalid.
    """
    step("Discovering workspace packages")

    if root_doc is None:
        root_doc = load_pyproject(root / "pyproject.toml")
    member_globs = get_workspace_member_globs(root_doc)

    # Expand globs to find all package directories
    member_dirs: list[Path] = []
    for pattern in member_globs:
        for match in sorted(glob.glob(str(root / pattern))):
            p = Path(match)
            if (p / "pyproject.toml").exists() and p not in member_dirs:
                member_dirs.append(p)

    if not member_dirs:
        raise WorkspaceError("No packages found matching workspace members")

    # First pass: collect basic info from each package
    packages: dict[str, PackageInfo] = {}
    raw_deps: dict[str, dict[DependencyKind, list[str]]] = {}

    for d in member_dirs:
        doc = load_pyproject(d / "pyproject.toml")
        name = get_project_name(doc, d.name)
        if name in packages:
            raise WorkspaceError(
                f"Package {name} is defined twice: {packages[name].path} and "
                f"{d.relative_to(root).as_posix()}"
            )
        packages[name] = PackageInfo(
            name=name,
            path=d.relative_to(root).as_posix(),
            version=get_project_version(doc),
        )
        raw_deps[name] = get_dependency_strings(doc)

    # Second pass: keep only internal (workspace) deps, with their specifiers
    for name, by_kind in raw_deps.items():
        info = packages[name]
        for kind, dep_strs in by_kind.items():
            ranges = info.ranges(kind)
            for dep_str in dep_strs:
                req = _parse_requirement(dep_str)
                dep_name = canonicalize_name(req.name)
                if dep_name in packages and dep_name not in ranges:
                    ranges[dep_name] = str(req.specifier)

    packages = {name: packages[name] for name in sorted(packages)}

    # Print discovered packages for user feedback
    for name, info in packages.items():
        deps = sorted(
            set(info.dependencies)
            | set(info.dev_dependencies)
            | set(info.peer_dependencies)
        )
        suffix = f" → [{', '.join(deps)}]" if deps else ""
        print(f"  {name} {info.version} ({info.path}){suffix}")

    return packages
