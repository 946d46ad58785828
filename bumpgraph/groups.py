"""Package group resolution.

Groups force unrelated packages to version in lockstep. Membership is
configured as include/exclude glob patterns over package paths;
resolve_groups() turns those into concrete member sets, and
build_group_index() maps each package to the single group it belongs to.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from fnmatch import fnmatchcase

from .errors import AmbiguousGroupMembershipError
from .models import GroupConfig, PackageGroup, PackageInfo


def path_matches(path: str, pattern: str) -> bool:
    """Match a package path against a glob pattern.

    "*" and "?" never cross a "/", "**" matches any number of path
    segments (including none). Leading "./" and trailing "/" are ignored
    on both sides.

    Examples:
        path_matches("packages/pkg-1", "packages/*") → True
        path_matches("packages/grp/1", "packages/*") → False
        path_matches("packages/grp/1", "packages/**") → True
    """
    return _match_segments(_segments(path), _segments(pattern))


def _segments(value: str) -> list[str]:
    text = value.replace("\\", "/").strip()
    while text.startswith("./"):
        text = text[2:]
    return [s for s in text.strip("/").split("/") if s]


def _match_segments(parts: list[str], pattern: list[str]) -> bool:
    if not pattern:
        return not parts
    head, rest = pattern[0], pattern[1:]
    if head == "**":
        return any(_match_segments(parts[i:], rest) for i in range(len(parts) + 1))
    if not parts:
        return False
    return fnmatchcase(parts[0], head) and _match_segments(parts[1:], rest)


def resolve_group_members(
    config: GroupConfig, packages: Mapping[str, PackageInfo]
) -> frozenset[str]:
    """Return the names of packages whose path matches the group's globs.

    A package is a member when its path matches any include pattern and
    no exclude pattern.
    """
    members = set()
    for name, info in packages.items():
        if not any(path_matches(info.path, p) for p in config.include):
            continue
        if any(path_matches(info.path, p) for p in config.exclude):
            continue
        members.add(name)
    return frozenset(members)


def resolve_groups(
    configs: Iterable[GroupConfig], packages: Mapping[str, PackageInfo]
) -> list[PackageGroup]:
    """Resolve configured groups into PackageGroups with concrete members."""
    return [
        PackageGroup(name=config.name, members=resolve_group_members(config, packages))
        for config in configs
    ]


def build_group_index(
    groups: Iterable[PackageGroup],
    packages: Mapping[str, PackageInfo],
    *,
    strict: bool = True,
) -> tuple[dict[str, str], dict[str, list[str]]]:
    """Map each grouped package to its group.

    Members that are not in the snapshot are ignored. A package claimed
    by more than one group is never assigned to any of them.

    Args:
        groups: Groups with resolved membership.
        packages: The manifest snapshot.
        strict: Raise instead of returning conflicts.

    Returns:
        Tuple of (package name → group name, package name → sorted names
        of every group claiming it). The second map is empty unless some
        package is in several groups.

    Raises:
        AmbiguousGroupMembershipError: If strict and any package is in
            more than one group.
    """
    claims: dict[str, list[str]] = {}
    for group in groups:
        for member in sorted(group.members):
            if member in packages:
                claims.setdefault(member, []).append(group.name)

    index: dict[str, str] = {}
    conflicts: dict[str, list[str]] = {}
    for name in sorted(claims):
        group_names = sorted(set(claims[name]))
        if len(group_names) == 1:
            index[name] = group_names[0]
        else:
            conflicts[name] = group_names

    if strict and conflicts:
        raise AmbiguousGroupMembershipError(conflicts)
    return index, conflicts
