"""CLI entry point for bumpgraph."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import click
from packaging.utils import canonicalize_name

from bumpgraph.changefiles import write_change_file
from bumpgraph.config import load_config
from bumpgraph.errors import BumpgraphError
from bumpgraph.models import ChangeMetadata, ChangeRecord
from bumpgraph.pipeline import run_bump
from bumpgraph.severity import Severity
from bumpgraph.toml import load_pyproject
from bumpgraph.workspace import discover_packages

SEVERITIES = [s.value for s in Severity]

root_option = click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Workspace root containing the uv workspace pyproject.toml.",
)


def bump_options(func):
    """Options shared by `plan` and `bump`."""
    func = click.option(
        "--prerelease-id",
        default=None,
        help="Identifier for new prerelease suffixes (e.g. beta).",
    )(func)
    func = click.option(
        "--rewrite-ranges/--no-rewrite-ranges",
        default=None,
        help="Refresh ranges of dependents that are not bumped themselves.",
    )(func)
    func = click.option(
        "--propagate/--no-propagate",
        default=None,
        help="Bump dependents of changed packages.",
    )(func)
    return root_option(func)


@click.group()
@click.version_option(package_name="bumpgraph")
def cli() -> None:
    """Monorepo version bumps driven by change files."""


@cli.command()
@bump_options
def plan(
    root: Path,
    propagate: bool | None,
    rewrite_ranges: bool | None,
    prerelease_id: str | None,
) -> None:
    """Show what `bump` would do without touching any file."""
    try:
        result = run_bump(
            root,
            propagate=propagate,
            rewrite_ranges=rewrite_ranges,
            prerelease_id=prerelease_id,
            dry_run=True,
        )
    except BumpgraphError as exc:
        raise click.ClickException(str(exc)) from exc

    if not result.ok:
        raise click.ClickException(
            f"{len(result.failures)} package(s) cannot be bumped"
        )


@cli.command()
@bump_options
@click.option(
    "--keep-change-files", is_flag=True, help="Do not delete consumed change files."
)
def bump(
    root: Path,
    propagate: bool | None,
    rewrite_ranges: bool | None,
    prerelease_id: str | None,
    keep_change_files: bool,
) -> None:
    """Bump versions and dependency ranges from the pending change files."""
    try:
        result = run_bump(
            root,
            propagate=propagate,
            rewrite_ranges=rewrite_ranges,
            prerelease_id=prerelease_id,
            keep_change_files=keep_change_files,
        )
    except BumpgraphError as exc:
        raise click.ClickException(str(exc)) from exc

    if not result.ok:
        raise click.ClickException(
            f"{len(result.failures)} package(s) cannot be bumped; no files were written"
        )
    click.echo(f"\nBumped {len(result.modified_packages)} package(s)")


@cli.command()
@root_option
@click.argument("package")
@click.option(
    "-t",
    "--type",
    "change_type",
    type=click.Choice(SEVERITIES),
    required=True,
    help="How much PACKAGE should be bumped.",
)
@click.option(
    "-d",
    "--dependent-type",
    type=click.Choice(SEVERITIES),
    default="patch",
    show_default=True,
    help="How much dependents should be bumped.",
)
@click.option("-m", "--message", required=True, help="Description of the change.")
@click.option("--email", default="", help="Author of the change.")
def change(
    root: Path,
    package: str,
    change_type: str,
    dependent_type: str,
    message: str,
    email: str,
) -> None:
    """Record a change to PACKAGE as a new change file."""
    try:
        root_doc = load_pyproject(root / "pyproject.toml")
        config = load_config(root_doc)
        packages = discover_packages(root, root_doc)
    except BumpgraphError as exc:
        raise click.ClickException(str(exc)) from exc

    if canonicalize_name(package) not in packages:
        raise click.ClickException(
            f"Unknown package {package!r}. Known packages: {', '.join(packages)}"
        )

    record = ChangeRecord(
        package_name=package,
        severity=change_type,
        dependent_severity=dependent_type,
        metadata=ChangeMetadata(
            comment=message, email=email, date=datetime.now(timezone.utc)
        ),
    )
    path = write_change_file(root / config.change_dir, record)
    click.echo(f"✓ Wrote {path.relative_to(root).as_posix()}")
