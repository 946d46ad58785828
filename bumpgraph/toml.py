"""pyproject.toml access.

Documents are parsed with tomlkit so that writing a new version or
specifier back leaves comments, ordering and quoting as the author had
them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from packaging.utils import canonicalize_name
from tomlkit.exceptions import ParseError
from tomlkit.items import Item

from .errors import WorkspaceError
from .models import DependencyKind


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Parse the manifest at `path` into an editable document.

    Raises:
        WorkspaceError: If the file does not exist or is not valid TOML.
    """
    try:
        return tomlkit.parse(path.read_text())
    except FileNotFoundError:
        raise WorkspaceError(f"No pyproject.toml found at {path}") from None
    except ParseError as exc:
        raise WorkspaceError(f"Invalid TOML in {path}: {exc}") from exc


def save_pyproject(path: Path, doc: tomlkit.TOMLDocument) -> None:
    path.write_text(tomlkit.dumps(doc))


def unwrap(value: Any) -> Any:
    """Turn a tomlkit item into the equivalent plain Python value."""
    return value.unwrap() if isinstance(value, Item) else value


def get_project_name(doc: tomlkit.TOMLDocument, fallback: str) -> str:
    """Return [project].name in PEP 503 form, or `fallback` in that form.

    Examples:
        "My_Package" → "my-package"
    """
    return canonicalize_name(str(doc.get("project", {}).get("name", fallback)))


def get_project_version(doc: tomlkit.TOMLDocument) -> str:
    """Return [project].version as written; "0.0.0" when unset."""
    return str(doc.get("project", {}).get("version", "0.0.0"))


def get_dependency_strings(
    doc: tomlkit.TOMLDocument,
) -> dict[DependencyKind, list[str]]:
    """Collect PEP 508 requirement strings, keyed by dependency kind.

    Kinds come from where a requirement is declared:

    - runtime: [project].dependencies
    - dev: every list under [dependency-groups] (PEP 735)
    - peer: every extra under [project].optional-dependencies

    `{include-group = ...}` entries in dependency groups are not
    requirements and are left out.
    """
    project = doc.get("project", {})
    found: dict[DependencyKind, list[str]] = {kind: [] for kind in DependencyKind}

    found[DependencyKind.RUNTIME] += [str(d) for d in project.get("dependencies", [])]
    for entries in doc.get("dependency-groups", {}).values():
        found[DependencyKind.DEV] += [str(d) for d in entries if isinstance(d, str)]
    for entries in project.get("optional-dependencies", {}).values():
        found[DependencyKind.PEER] += [str(d) for d in entries]
    return found


def get_workspace_member_globs(doc: tomlkit.TOMLDocument) -> list[str]:
    """Return the member patterns of the uv workspace, e.g. ["packages/*"].

    Raises:
        WorkspaceError: If the root manifest declares no members.
    """
    uv = doc.get("tool", {}).get("uv", {})
    members = uv.get("workspace", {}).get("members")
    if not members:
        raise WorkspaceError(
            "No [tool.uv.workspace] members defined in root pyproject.toml"
        )
    return [str(m) for m in members]


def get_tool_table(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Return [tool.bumpgraph] as a plain dict (empty if absent)."""
    return dict(unwrap(doc.get("tool", {}).get("bumpgraph", {})))
