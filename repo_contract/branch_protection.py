"""Branch protection evaluation against an expected rule set."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from repo_contract.contract import (
    BranchProtection,
    BranchProtectionRules,
    Severity,
    StatusCheck,
)
from repo_contract.globbing import compile_glob
from repo_contract.summary import Summary, summarize

logger = logging.getLogger(__name__)

CheckValue = bool | int | str | list[str]

MISSING_PROTECTION_PATH = "branch_protection"
MISSING_PROTECTION_MESSAGE = "Branch protection is not enabled"


class RepositoryStateProvider(Protocol):
    """Source of live branch and protection state for a repository."""

    def list_branches(self, repo: str) -> list[str]:
        """Return every branch name of ``repo``."""

    def get_branch_protection(self, repo: str, branch: str) -> BranchProtectionRules | None:
        """Return the branch's protection, or None when it has none."""


@dataclass(slots=True)
class BranchProtectionDetail:
    """Verdict for one branch protection field or field group."""

    path: str
    expected: CheckValue
    actual: CheckValue
    passed: bool
    severity: Severity
    message: str = ""
    missing: list[str] | None = None
    extra: list[str] | None = None

    def to_check_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "expected": self.expected,
            "actual": self.actual,
            "severity": self.severity,
            "message": self.message,
        }


@dataclass(slots=True)
class BranchProtectionReport:
    """All verdicts for one evaluated branch."""

    target: str
    details: list[BranchProtectionDetail] = field(default_factory=list)

    @property
    def failures(self) -> list[BranchProtectionDetail]:
        return [detail for detail in self.details if not detail.passed]


def check_branch_protection(
    provider: RepositoryStateProvider,
    repo: str,
    config: BranchProtection,
) -> list[BranchProtectionReport]:
    """Evaluate every live branch of ``repo`` that matches the configured patterns.

    Branches are fetched and evaluated one at a time; any provider error
    aborts the run.
    """
    branches = provider.list_branches(repo)
    targets = match_branch_patterns(config.branches, branches)
    logger.info("Evaluating %d of %d branches in %s", len(targets), len(branches), repo)

    reports: list[BranchProtectionReport] = []
    for target in targets:
        protection = provider.get_branch_protection(repo, target)
        if protection is None:
            logger.info("Branch %s has no protection configured", target)
            details = [missing_branch_protection_detail()]
        else:
            details = evaluate_branch_protection(config.rules, protection)
        reports.append(BranchProtectionReport(target=target, details=details))
    return reports


def match_branch_patterns(patterns: tuple[str, ...] | list[str], branches: list[str]) -> list[str]:
    """Return the branches matching any pattern, in live-branch order."""
    if not patterns:
        return []
    compiled = [compile_glob(pattern) for pattern in patterns]
    return [branch for branch in branches if any(glob.match(branch) for glob in compiled)]


def missing_branch_protection_detail() -> BranchProtectionDetail:
    return BranchProtectionDetail(
        path=MISSING_PROTECTION_PATH,
        expected=True,
        actual=False,
        passed=False,
        severity="error",
        message=MISSING_PROTECTION_MESSAGE,
    )


def evaluate_branch_protection(
    expected: BranchProtectionRules,
    actual: BranchProtectionRules,
) -> list[BranchProtectionDetail]:
    """Compare expected and observed rules field by field."""
    details: list[BranchProtectionDetail] = []

    reviews_expected = expected.required_pull_request_reviews
    reviews_actual = actual.required_pull_request_reviews
    details.append(
        _enabled_detail(
            "required_pull_request_reviews.enabled",
            reviews_expected.enabled,
            reviews_actual.enabled,
        )
    )
    if reviews_expected.enabled:
        expected_count = reviews_expected.required_approving_review_count
        actual_count = reviews_actual.required_approving_review_count
        details.append(
            _detail(
                "required_pull_request_reviews.required_approving_review_count",
                expected_count,
                actual_count,
                passed=actual_count >= expected_count,
                severity="error",
                message=(
                    f"required_approving_review_count: expected {expected_count}, "
                    f"got {actual_count}"
                ),
            )
        )
        for name in (
            "dismiss_stale_reviews",
            "require_code_owner_reviews",
            "require_last_push_approval",
        ):
            details.append(
                _equality_detail(
                    f"required_pull_request_reviews.{name}",
                    getattr(reviews_expected, name),
                    getattr(reviews_actual, name),
                    label=name,
                )
            )

    status_expected = expected.required_status_checks
    status_actual = actual.required_status_checks
    details.append(
        _enabled_detail(
            "required_status_checks.enabled",
            status_expected.enabled,
            status_actual.enabled,
        )
    )
    if status_expected.enabled:
        details.append(
            _equality_detail(
                "required_status_checks.strict",
                status_expected.strict,
                status_actual.strict,
            )
        )
        if status_expected.checks:
            details.append(_status_checks_detail(status_expected.checks, status_actual.checks))

    for name in (
        "enforce_admins",
        "required_linear_history",
        "allow_force_pushes",
        "allow_deletions",
        "required_conversation_resolution",
        "required_signatures",
    ):
        details.append(_equality_detail(name, getattr(expected, name), getattr(actual, name)))

    return details


def missing_status_checks(
    expected: tuple[StatusCheck, ...] | list[StatusCheck],
    actual: tuple[StatusCheck, ...] | list[StatusCheck],
) -> list[str]:
    """Contexts of expected checks with no compatible entry on the actual side.

    An expected ``app_id`` must be matched exactly; an expected check without
    one accepts any app.
    """
    return [check.context for check in expected if not _has_status_check(check, actual)]


def extra_status_checks(
    expected: tuple[StatusCheck, ...] | list[StatusCheck],
    actual: tuple[StatusCheck, ...] | list[StatusCheck],
) -> list[str]:
    """Contexts of actual checks not named anywhere in ``expected``."""
    expected_contexts = {check.context for check in expected}
    return [check.context for check in actual if check.context not in expected_contexts]


def summarize_branch_protection(reports: list[BranchProtectionReport]) -> Summary:
    return summarize(
        (detail.passed, detail.severity) for report in reports for detail in report.details
    )


def _has_status_check(
    expected: StatusCheck, actual: tuple[StatusCheck, ...] | list[StatusCheck]
) -> bool:
    return any(
        check.context == expected.context
        and (expected.app_id is None or check.app_id == expected.app_id)
        for check in actual
    )


def _status_checks_detail(
    expected: tuple[StatusCheck, ...],
    actual: tuple[StatusCheck, ...],
) -> BranchProtectionDetail:
    missing = missing_status_checks(expected, actual)
    extra = extra_status_checks(expected, actual)
    passed = not missing and not extra

    if passed:
        message = ""
    elif missing and extra:
        message = (
            f"Missing required status check: {', '.join(missing)} (extra: {', '.join(extra)})"
        )
    elif missing:
        message = f"Missing required status check: {', '.join(missing)}"
    else:
        message = f"Unexpected status checks: {', '.join(extra)}"

    return BranchProtectionDetail(
        path="required_status_checks.checks",
        expected=[check.context for check in expected],
        actual=[check.context for check in actual],
        passed=passed,
        severity="error" if missing else "warning",
        message=message,
        missing=missing,
        extra=extra,
    )


def _enabled_detail(path: str, expected: bool, actual: bool) -> BranchProtectionDetail:
    # turning a required group off is an error; anything else is a warning
    severity: Severity = "error" if expected and not actual else "warning"
    return _detail(
        path,
        expected,
        actual,
        passed=expected == actual,
        severity=severity,
        message=f"{path}: expected {_fmt(expected)}, got {_fmt(actual)}",
    )


def _equality_detail(
    path: str, expected: bool, actual: bool, *, label: str | None = None
) -> BranchProtectionDetail:
    return _detail(
        path,
        expected,
        actual,
        passed=expected == actual,
        severity="warning",
        message=f"{label or path}: expected {_fmt(expected)}, got {_fmt(actual)}",
    )


def _detail(
    path: str,
    expected: CheckValue,
    actual: CheckValue,
    *,
    passed: bool,
    severity: Severity,
    message: str,
) -> BranchProtectionDetail:
    return BranchProtectionDetail(
        path=path,
        expected=expected,
        actual=actual,
        passed=passed,
        severity=severity,
        message="" if passed else message,
    )


def _fmt(value: CheckValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
