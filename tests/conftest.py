"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
import tomlkit

from bumpgraph.models import PackageInfo

WorkspaceFactory = Callable[..., Path]


@pytest.fixture
def chain_packages() -> dict[str, PackageInfo]:
    """pkg-2 depends on pkg-1, pkg-3 dev-depends on pkg-2, pkg-4 peers pkg-3."""
    return {
        "pkg-1": PackageInfo(name="pkg-1", path="packages/pkg-1", version="1.0.0"),
        "pkg-2": PackageInfo(
            name="pkg-2",
            path="packages/pkg-2",
            version="1.0.0",
            dependencies={"pkg-1": "1.0.0"},
        ),
        "pkg-3": PackageInfo(
            name="pkg-3",
            path="packages/pkg-3",
            version="1.0.0",
            dev_dependencies={"pkg-2": "1.0.0"},
        ),
        "pkg-4": PackageInfo(
            name="pkg-4",
            path="packages/pkg-4",
            version="1.0.0",
            peer_dependencies={"pkg-3": "1.0.0"},
        ),
    }


@pytest.fixture
def tmp_pyproject(tmp_path: Path) -> Path:
    """Create a temporary pyproject.toml file."""
    content = """\
[project]
name = "test-package"
version = "1.0.0"
dependencies = [
    "requests>=2.0",
    "internal-dep>=1.0",
]

[project.optional-dependencies]
dev = ["pytest>=8.0", "another-internal==0.5.0"]

[dependency-groups]
test = ["pytest>=8.0", "group-internal~=0.1"]
"""
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(content)
    return pyproject


@pytest.fixture
def sample_toml_doc() -> tomlkit.TOMLDocument:
    """Create a sample TOML document."""
    content = """\
[project]
name = "my-package"
version = "2.0.0"
dependencies = ["click>=8.0", "pydantic>=2.0"]

[project.optional-dependencies]
docs = ["sphinx>=7.0"]

[dependency-groups]
test = ["hypothesis>=6.0", {include-group = "lint"}]
lint = ["ruff"]

[tool.uv.workspace]
members = ["packages/*", "libs/*"]

[tool.bumpgraph]
propagate = true
prerelease-id = "beta"

[[tool.bumpgraph.groups]]
name = "core"
include = "packages/core-*"
"""
    return tomlkit.parse(content)


def _toml_list(items: list[str]) -> str:
    return "[" + ", ".join(f'"{i}"' for i in items) + "]"


@pytest.fixture
def make_workspace(tmp_path: Path) -> WorkspaceFactory:
    """Factory writing a uv workspace to tmp_path.

    Each package is given as name → dict with optional keys "path",
    "version", "dependencies", "dev" and "peer" (lists of PEP 508 strings).
    """

    def _make(packages: dict[str, dict], tool: str = "") -> Path:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.uv.workspace]\nmembers = ["packages/*"]\n' + tool
        )
        for name, spec in packages.items():
            pkg_dir = tmp_path / spec.get("path", f"packages/{name}")
            pkg_dir.mkdir(parents=True)
            lines = [
                "[project]",
                f'name = "{name}"',
                f'version = "{spec.get("version", "1.0.0")}"',
                f"dependencies = {_toml_list(spec.get('dependencies', []))}",
            ]
            if spec.get("peer"):
                lines += ["", "[project.optional-dependencies]"]
                lines.append(f"peer = {_toml_list(spec['peer'])}")
            if spec.get("dev"):
                lines += ["", "[dependency-groups]"]
                lines.append(f"dev = {_toml_list(spec['dev'])}")
            (pkg_dir / "pyproject.toml").write_text("\n".join(lines) + "\n")
        return tmp_path

    return _make
