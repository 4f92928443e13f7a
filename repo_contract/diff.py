"""Diff entries and severity summaries across rule kinds."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from repo_contract.branch_protection import BranchProtectionReport, CheckValue
from repo_contract.contract import Severity
from repo_contract.required_files import RequiredFileCheck
from repo_contract.summary import Summary, summarize

RuleName = Literal["required_files", "branch_protection"]
DiffType = Literal["value_mismatch", "array_diff", "missing_file"]


@dataclass(slots=True)
class DiffEntry:
    """One difference between the contract and the repository."""

    rule: RuleName
    path: str
    diff_type: DiffType
    severity: Severity | None = None
    target: str | None = None
    expected: CheckValue | None = None
    actual: CheckValue | None = None
    missing: list[str] | None = None
    extra: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "rule": self.rule,
            "path": self.path,
            "type": self.diff_type,
        }
        optional = {
            "severity": self.severity,
            "target": self.target,
            "expected": self.expected,
            "actual": self.actual,
            "missing": self.missing,
            "extra": self.extra,
        }
        payload.update({key: value for key, value in optional.items() if value is not None})
        return payload


@dataclass(slots=True)
class DiffReport:
    diffs: list[DiffEntry] = field(default_factory=list)
    summary: Summary | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"diffs": [entry.to_dict() for entry in self.diffs]}
        if self.summary is not None:
            payload["summary"] = self.summary.to_dict()
        return payload


def diff_required_files(checks: list[RequiredFileCheck]) -> DiffReport:
    """Turn missing required files into ``missing_file`` entries."""
    diffs = [
        DiffEntry(
            rule="required_files",
            path=check.path,
            diff_type="missing_file",
            severity=check.severity,
        )
        for check in checks
        if not check.exists
    ]
    summary = summarize((check.exists, check.severity) for check in checks)
    return DiffReport(diffs=diffs, summary=summary)


def diff_branch_protection(reports: list[BranchProtectionReport]) -> list[DiffEntry]:
    """Turn failing branch protection verdicts into diff entries."""
    diffs: list[DiffEntry] = []
    for report in reports:
        for detail in report.failures:
            is_array = detail.missing is not None or detail.extra is not None
            diffs.append(
                DiffEntry(
                    rule="branch_protection",
                    path=detail.path,
                    diff_type="array_diff" if is_array else "value_mismatch",
                    target=report.target,
                    expected=detail.expected,
                    actual=detail.actual,
                    missing=detail.missing,
                    extra=detail.extra,
                )
            )
    return diffs


def combine_summaries(*summaries: Summary | None) -> Summary:
    total = Summary()
    for summary in summaries:
        if summary is not None:
            total.add(summary)
    return total
