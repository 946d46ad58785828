"""Bump pipeline: discover → read changes → compute → report → write.

This module connects the pure bump engine to a uv workspace on disk:
1. Discover all packages in the workspace
2. Read the pending change files
3. Resolve configured groups against package paths
4. Compute the bump decisions
5. Report them
6. Write versions and ranges to each pyproject.toml and delete the
   consumed change files (skipped on dry runs and when anything failed)
"""

from __future__ import annotations

from pathlib import Path

from .changefiles import delete_change_files, read_change_files
from .config import BumpConfig, load_config
from .console import report_result, step
from .engine import compute_bumps
from .groups import resolve_groups
from .models import BumpOptions, BumpResult, ChangeRecord, PackageGroup, PackageInfo
from .toml import load_pyproject
from .workspace import discover_packages
from .writer import apply_decision


def read_changes(
    root: Path, config: BumpConfig, packages: dict[str, PackageInfo]
) -> tuple[list[ChangeRecord], list[Path]]:
    """Read pending change files and report them.

    Changes for packages outside the workspace are skipped with a warning.

    Returns:
        Tuple of (change records, paths of every change file read).
    """
    step("Reading change files")

    entries = read_change_files(root / config.change_dir)
    if not entries:
        print("  No change files found")

    records: list[ChangeRecord] = []
    for path, record in entries:
        if record.package_name not in packages:
            print(
                f"  Warning: {record.package_name} is not in the workspace "
                f"({path.name})"
            )
            continue
        records.append(record)
        print(
            f"  {record.package_name}: {record.severity} "
            f"(dependents: {record.dependent_severity}) {path.name}"
        )

    paths = sorted({path for path, _ in entries})
    return records, paths


def report_groups(groups: list[PackageGroup]) -> None:
    if not groups:
        return
    step("Resolving groups")
    for group in groups:
        members = ", ".join(sorted(group.members)) or "<no members>"
        print(f"  {group.name}: {members}")


def write_results(
    root: Path, packages: dict[str, PackageInfo], result: BumpResult
) -> list[str]:
    """Write every decision that changes a manifest.

    Returns:
        Names of the packages whose pyproject.toml was rewritten.
    """
    step("Writing manifests")

    written: list[str] = []
    for name, decision in result.decisions.items():
        if not decision.modified and not decision.rewrites:
            continue
        apply_decision(root / packages[name].path / "pyproject.toml", decision)
        written.append(name)
        print(f"  {packages[name].path}/pyproject.toml")
    return written


def run_bump(
    root: Path,
    *,
    propagate: bool | None = None,
    rewrite_ranges: bool | None = None,
    prerelease_id: str | None = None,
    dry_run: bool = False,
    keep_change_files: bool = False,
) -> BumpResult:
    """Execute the full bump pipeline for the workspace at `root`.

    Options left as None fall back to [tool.bumpgraph] in the root
    pyproject.toml.

    Args:
        root: Workspace root directory.
        propagate: Escalate dependents of bumped packages.
        rewrite_ranges: Refresh dependents' ranges when not propagating.
        prerelease_id: Identifier for new prerelease suffixes.
        dry_run: Compute and report only; touch no files.
        keep_change_files: Leave consumed change files in place.

    Returns:
        The computed BumpResult. Nothing is written if it has failures.
    """
    root_doc = load_pyproject(root / "pyproject.toml")
    config = load_config(root_doc)

    packages = discover_packages(root, root_doc)
    records, change_paths = read_changes(root, config, packages)

    groups = resolve_groups(config.groups, packages)
    report_groups(groups)

    options = BumpOptions(
        propagate_to_dependencies=config.propagate if propagate is None else propagate,
        rewrite_dependent_ranges=(
            config.rewrite_dependent_ranges if rewrite_ranges is None else rewrite_ranges
        ),
        groups=groups,
        prerelease_id=config.prerelease_id if prerelease_id is None else prerelease_id,
        workspace_root=str(root),
    )

    step("Computing bumps")
    result = compute_bumps(packages, records, options)
    report_result(result)

    if dry_run or not result.ok:
        return result

    write_results(root, packages, result)
    if not keep_change_files:
        removed = delete_change_files(change_paths)
        if removed:
            step("Removing change files")
            for path in removed:
                print(f"  {path.relative_to(root).as_posix()}")

    return result
