"""Tool configuration from [tool.bumpgraph] in the root pyproject.toml.

Example:
    [tool.bumpgraph]
    propagate = true
    prerelease-id = "beta"

    [[tool.bumpgraph.groups]]
    name = "core"
    include = ["packages/core-*"]
    exclude = ["packages/core-docs"]
"""

from __future__ import annotations

import tomlkit
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import WorkspaceError
from .models import GroupConfig
from .toml import get_tool_table


class BumpConfig(BaseModel):
    """Settings read from [tool.bumpgraph]. CLI flags override them.

    Attributes:
        propagate: Escalate dependents of bumped packages.
        rewrite_dependent_ranges: Refresh dependents' ranges even when
            they are not bumped themselves.
        prerelease_id: Identifier for new prerelease suffixes.
        change_dir: Directory (relative to the root) holding change files.
        groups: Lockstep groups, by path globs.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    propagate: bool = False
    rewrite_dependent_ranges: bool = Field(
        default=True, alias="rewrite-dependent-ranges"
    )
    prerelease_id: str = Field(default="", alias="prerelease-id")
    change_dir: str = Field(default="change", alias="change-dir")
    groups: list[GroupConfig] = Field(default_factory=list)


def load_config(doc: tomlkit.TOMLDocument) -> BumpConfig:
    """Read and validate [tool.bumpgraph] from a parsed root pyproject.toml.

    Raises:
        WorkspaceError: If the table contains unknown or invalid settings.
    """
    try:
        return BumpConfig.model_validate(get_tool_table(doc))
    except ValidationError as exc:
        raise WorkspaceError(f"Invalid [tool.bumpgraph] configuration:\n{exc}") from exc
