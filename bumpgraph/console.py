"""Console output helpers.

Progress goes to stdout as a banner per phase followed by indented
per-package lines; failures go to stderr.
"""

from __future__ import annotations

import sys

from .models import BumpResult


RULE = "─" * 60


def step(title: str) -> None:
    """Open a pipeline phase in the output, e.g. "Reading change files".

    The per-package lines that follow are indented by two spaces under
    the banner.
    """
    print(f"\n{RULE}\n{title}\n{RULE}")


def report_result(result: BumpResult) -> None:
    """Print the bumped packages, their range rewrites, and any failures."""
    modified = result.modified_packages
    if not modified:
        print("  No packages to bump")

    for name in modified:
        decision = result.decisions[name]
        notes = []
        if decision.is_newly_modified:
            notes.append("dependent")
        if decision.is_new_package:
            notes.append("new")
        extra = f" [{', '.join(notes)}]" if notes else ""
        print(
            f"  {name}: {decision.old_version} → {decision.version} "
            f"({decision.severity}){extra}"
        )

    for name, decision in result.decisions.items():
        for rewrite in decision.rewrites:
            print(
                f"  {name} {rewrite.kind} {rewrite.dependency}: "
                f"{rewrite.old_range or '<any>'} → {rewrite.new_range}"
            )

    for failure in result.failures:
        print(
            f"  ERROR {failure.package} ({failure.kind}): {failure.message}",
            file=sys.stderr,
        )
