"""Output rendering."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import click
import yaml

from repo_contract import __version__
from repo_contract.branch_protection import BranchProtectionReport, CheckValue
from repo_contract.contract import Severity
from repo_contract.diff import DiffEntry, DiffReport
from repo_contract.required_files import RequiredFilesReport
from repo_contract.summary import Summary
from repo_contract.validation import ValidationReport

_ICONS: dict[Severity, tuple[str, str]] = {
    "error": ("✗", "red"),
    "warning": ("⚠", "yellow"),
    "info": ("ℹ", "blue"),
}
_PASS = click.style("✓", fg="green")


def render_validate_human(reports: list[ValidationReport]) -> str:
    lines: list[str] = []
    errors = 0
    for report in reports:
        if report.valid:
            lines.append(f"{_PASS} {report.path}: Valid")
            continue
        lines.append(f"{_icon('error')} {report.path}: Invalid")
        for issue in report.errors:
            location = f" (at {issue.instance_path})" if issue.instance_path else ""
            lines.append(f"  - {issue.message}{location}")
        errors += len(report.errors)
    lines.append(f"Validated {len(reports)} files, {errors} errors")
    return "\n".join(lines)


def render_validate_json(reports: list[ValidationReport]) -> str:
    payload = {
        "valid": all(report.valid for report in reports),
        "files": [report.to_dict() for report in reports],
    }
    return json.dumps(payload, indent=2)


def render_check_human(
    branch_reports: list[BranchProtectionReport],
    files_report: RequiredFilesReport | None,
    summary: Summary,
) -> str:
    """Render every verdict, passing ones included, followed by the summary."""
    lines: list[str] = []
    for report in branch_reports:
        lines.append(click.style(f"Branch Protection [{report.target}]", bold=True))
        for detail in report.details:
            if detail.passed:
                lines.append(f"  {_PASS} {detail.path}: {format_value(detail.expected)}")
            else:
                lines.append(f"  {_icon(detail.severity)} {detail.path}: {detail.message}")
        lines.append("")

    if files_report is not None:
        lines.append(click.style("Required Files", bold=True))
        for check in files_report.checks:
            if check.exists:
                lines.append(f"  {_PASS} {check.path}: Found")
            else:
                lines.append(
                    f"  {_icon(check.severity)} {check.path}: Not found ({check.severity})"
                )

    lines.append(_summary_line(summary))
    return "\n".join(lines)


def build_check_payload(
    branch_reports: list[BranchProtectionReport],
    files_report: RequiredFilesReport | None,
    summary: Summary,
    *,
    valid: bool,
) -> dict[str, Any]:
    """Build the JSON payload for ``check``; only failing verdicts are listed."""
    results: list[dict[str, Any]] = [
        {
            "rule": "branch_protection",
            "target": report.target,
            "checks": [detail.to_check_dict() for detail in report.failures],
        }
        for report in branch_reports
    ]
    if files_report is not None:
        results.append(
            {
                "rule": "required_files",
                "checks": [check.to_dict() for check in files_report.checks],
            }
        )
    return {
        "valid": valid,
        "results": results,
        "summary": summary.to_dict(),
        "meta": _meta(),
    }


def render_check_json(
    branch_reports: list[BranchProtectionReport],
    files_report: RequiredFilesReport | None,
    summary: Summary,
    *,
    valid: bool,
) -> str:
    payload = build_check_payload(branch_reports, files_report, summary, valid=valid)
    return json.dumps(payload, indent=2)


def render_diff_human(report: DiffReport) -> str:
    """Group branch protection diffs by branch, then list missing files."""
    if not report.diffs:
        return "No differences found."

    branch_groups: dict[str, list[DiffEntry]] = {}
    missing_files: list[DiffEntry] = []
    for entry in report.diffs:
        if entry.rule == "branch_protection":
            branch_groups.setdefault(entry.target or "unknown", []).append(entry)
        else:
            missing_files.append(entry)

    lines: list[str] = []
    for target, entries in branch_groups.items():
        lines.append(click.style(f"Branch Protection [{target}]", bold=True))
        for entry in entries:
            if entry.diff_type == "array_diff":
                lines.append(f"  {entry.path}:")
                lines.extend(
                    click.style(f"    + {value} (missing)", fg="green")
                    for value in entry.missing or []
                )
                lines.extend(
                    click.style(f"    - {value} (extra)", fg="red") for value in entry.extra or []
                )
            else:
                lines.append(
                    f"  {entry.path}: expected {format_value(entry.expected)}, "
                    f"got {format_value(entry.actual)}"
                )
        lines.append("")

    if missing_files:
        lines.append(click.style("Required Files:", bold=True))
        for entry in missing_files:
            lines.append(f"  + {entry.path} (missing, severity: {entry.severity or 'error'})")
    return "\n".join(lines).rstrip("\n")


def render_diff_json(report: DiffReport) -> str:
    return json.dumps(report.to_dict(), indent=2)


def render_diff_yaml(report: DiffReport) -> str:
    return yaml.safe_dump(
        [entry.to_dict() for entry in report.diffs],
        sort_keys=False,
        allow_unicode=True,
    )


def format_value(value: CheckValue | None) -> str:
    if value is None:
        return "-"
    if isinstance(value, str):
        return value
    return json.dumps(value)


def _summary_line(summary: Summary) -> str:
    text = f"Summary: {summary.error} error, {summary.warning} warning, {summary.info} info"
    if summary.error:
        return click.style(text, fg="red", bold=True)
    if summary.warning:
        return click.style(text, fg="yellow", bold=True)
    return click.style(text, fg="green", bold=True)


def _icon(severity: Severity) -> str:
    icon, color = _ICONS[severity]
    return click.style(icon, fg=color)


def _meta() -> dict[str, Any]:
    return {
        "generated_at": datetime.now(tz=UTC)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z"),
        "version": __version__,
    }
