"""Tests for bumpgraph.workspace."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from bumpgraph.errors import WorkspaceError
from bumpgraph.workspace import dep_canonical_name, discover_packages


class TestDepCanonicalName:
    def test_simple_name(self) -> None:
        assert dep_canonical_name("requests") == "requests"

    def test_with_version_spec(self) -> None:
        assert dep_canonical_name("requests>=2.0,<3.0") == "requests"

    def test_with_extras(self) -> None:
        assert dep_canonical_name("requests[security]>=2.0") == "requests"

    def test_normalizes(self) -> None:
        assert dep_canonical_name("My_Package>=1.0") == "my-package"

    def test_invalid_raises(self) -> None:
        with pytest.raises(WorkspaceError, match="Invalid dependency"):
            dep_canonical_name("not a requirement!!")


@patch("bumpgraph.workspace.step")
class TestDiscoverPackages:
    def test_builds_snapshot(self, mock_step: MagicMock, make_workspace) -> None:
        root = make_workspace(
            {
                "pkg-1": {"version": "1.2.0"},
                "pkg-2": {"dependencies": ["pkg-1==1.2.0", "requests>=2"]},
                "pkg-3": {"dev": ["pkg-2>=1.0"], "peer": ["PKG_1"]},
            }
        )

        packages = discover_packages(root)

        assert list(packages) == ["pkg-1", "pkg-2", "pkg-3"]
        assert packages["pkg-1"].version == "1.2.0"
        assert packages["pkg-1"].path == "packages/pkg-1"
        assert packages["pkg-2"].dependencies == {"pkg-1": "==1.2.0"}
        assert packages["pkg-3"].dev_dependencies == {"pkg-2": ">=1.0"}
        assert packages["pkg-3"].peer_dependencies == {"pkg-1": ""}
        mock_step.assert_called_once_with("Discovering workspace packages")

    def test_first_requirement_wins(self, mock_step: MagicMock, make_workspace) -> None:
        root = make_workspace(
            {"a": {}, "b": {"dependencies": ["a>=1.0", "a[extra]==1.0.0"]}}
        )

        packages = discover_packages(root)

        assert packages["b"].dependencies == {"a": ">=1.0"}

    def test_no_members_found(self, mock_step: MagicMock, make_workspace) -> None:
        root = make_workspace({})
        with pytest.raises(WorkspaceError, match="No packages found"):
            discover_packages(root)

    def test_duplicate_names(self, mock_step: MagicMock, make_workspace) -> None:
        root = make_workspace({"a": {"path": "packages/one"}})
        (root / "packages" / "two").mkdir()
        (root / "packages" / "two" / "pyproject.toml").write_text(
            '[project]\nname = "a"\nversion = "1.0.0"\n'
        )
        with pytest.raises(WorkspaceError, match="defined twice"):
            discover_packages(root)
