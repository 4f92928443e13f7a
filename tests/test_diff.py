"""Diff entry and summary tests."""

from __future__ import annotations

from repo_contract.branch_protection import BranchProtectionDetail, BranchProtectionReport
from repo_contract.diff import (
    combine_summaries,
    diff_branch_protection,
    diff_required_files,
)
from repo_contract.required_files import RequiredFileCheck
from repo_contract.summary import Summary


def test_missing_files_become_missing_file_entries() -> None:
    report = diff_required_files(
        [
            RequiredFileCheck(path="README.md", exists=True, severity="error"),
            RequiredFileCheck(path="SECURITY.md", exists=False, severity="warning"),
        ]
    )

    assert report.to_dict() == {
        "diffs": [
            {
                "rule": "required_files",
                "path": "SECURITY.md",
                "type": "missing_file",
                "severity": "warning",
            }
        ],
        "summary": {"error": 0, "warning": 1, "info": 0},
    }


def test_branch_failures_become_value_and_array_diffs() -> None:
    reports = [
        BranchProtectionReport(
            target="main",
            details=[
                BranchProtectionDetail(
                    path="enforce_admins",
                    expected=True,
                    actual=False,
                    passed=False,
                    severity="warning",
                ),
                BranchProtectionDetail(
                    path="required_status_checks.checks",
                    expected=["build", "lint"],
                    actual=["build", "extra"],
                    passed=False,
                    severity="error",
                    missing=["lint"],
                    extra=["extra"],
                ),
                BranchProtectionDetail(
                    path="allow_deletions",
                    expected=False,
                    actual=False,
                    passed=True,
                    severity="warning",
                ),
            ],
        )
    ]

    entries = [entry.to_dict() for entry in diff_branch_protection(reports)]

    assert entries == [
        {
            "rule": "branch_protection",
            "path": "enforce_admins",
            "type": "value_mismatch",
            "target": "main",
            "expected": True,
            "actual": False,
        },
        {
            "rule": "branch_protection",
            "path": "required_status_checks.checks",
            "type": "array_diff",
            "target": "main",
            "expected": ["build", "lint"],
            "actual": ["build", "extra"],
            "missing": ["lint"],
            "extra": ["extra"],
        },
    ]


def test_combine_summaries_skips_missing_parts() -> None:
    total = combine_summaries(Summary(error=1), None, Summary(warning=2, info=1))

    assert total.to_dict() == {"error": 1, "warning": 2, "info": 1}
    assert total.has_failures()
    assert not Summary(warning=3).has_failures()
    assert Summary(warning=3).has_failures(strict=True)
