"""Tests for bumpgraph.console."""

from __future__ import annotations

import pytest

from bumpgraph.console import RULE, report_result, step
from bumpgraph.models import (
    BumpDecision,
    BumpFailure,
    BumpResult,
    DependencyKind,
    FailureKind,
    RangeRewrite,
)
from bumpgraph.severity import Severity


class TestStep:
    def test_prints_banner(self, capsys: pytest.CaptureFixture[str]) -> None:
        step("Reading change files")

        assert capsys.readouterr().out == f"\n{RULE}\nReading change files\n{RULE}\n"


class TestReportResult:
    def test_reports_bumps_rewrites_and_failures(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        result = BumpResult(
            decisions={
                "a": BumpDecision(
                    name="a",
                    severity=Severity.MINOR,
                    old_version="1.0.0",
                    version="1.1.0",
                ),
                "b": BumpDecision(
                    name="b",
                    severity=Severity.PATCH,
                    old_version="2.0.0",
                    version="2.0.1",
                    is_newly_modified=True,
                    rewrites=[
                        RangeRewrite(
                            dependency="a",
                            kind=DependencyKind.RUNTIME,
                            old_range="^1.0.0",
                            new_range="^1.1.0",
                        )
                    ],
                ),
            },
            failures=[
                BumpFailure(
                    package="c",
                    kind=FailureKind.VERSION_PARSE,
                    message="Invalid version 'x'",
                )
            ],
        )

        report_result(result)

        captured = capsys.readouterr()
        assert "  a: 1.0.0 → 1.1.0 (minor)\n" in captured.out
        assert "  b: 2.0.0 → 2.0.1 (patch) [dependent]\n" in captured.out
        assert "  b runtime a: ^1.0.0 → ^1.1.0\n" in captured.out
        assert "ERROR c (version-parse): Invalid version 'x'" in captured.err

    def test_nothing_to_bump(self, capsys: pytest.CaptureFixture[str]) -> None:
        report_result(BumpResult())

        assert "No packages to bump" in capsys.readouterr().out
