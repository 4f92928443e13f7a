"""Contract data model and profile merge."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Literal

from repo_contract.errors import InvalidConfigError

Severity = Literal["error", "warning", "info"]
SEVERITIES: tuple[Severity, ...] = ("error", "warning", "info")

DEFAULT_BRANCHES = ("main",)
MAX_REVIEW_COUNT = 255


@dataclass(frozen=True, slots=True)
class StatusCheck:
    """A required status check, optionally bound to a GitHub App."""

    context: str
    app_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"context": self.context}
        if self.app_id is not None:
            payload["app_id"] = self.app_id
        return payload


@dataclass(frozen=True, slots=True)
class RequiredPullRequestReviews:
    """Expected pull request review settings."""

    enabled: bool = True
    required_approving_review_count: int = 1
    dismiss_stale_reviews: bool = True
    require_code_owner_reviews: bool = False
    require_last_push_approval: bool = False

    @classmethod
    def disabled(cls) -> RequiredPullRequestReviews:
        """Shape used when the remote side has no review settings at all."""
        return cls(
            enabled=False,
            required_approving_review_count=0,
            dismiss_stale_reviews=False,
            require_code_owner_reviews=False,
            require_last_push_approval=False,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "required_approving_review_count": self.required_approving_review_count,
            "dismiss_stale_reviews": self.dismiss_stale_reviews,
            "require_code_owner_reviews": self.require_code_owner_reviews,
            "require_last_push_approval": self.require_last_push_approval,
        }


@dataclass(frozen=True, slots=True)
class RequiredStatusChecks:
    """Expected required status check settings."""

    enabled: bool = True
    strict: bool = True
    checks: tuple[StatusCheck, ...] = ()

    @classmethod
    def disabled(cls) -> RequiredStatusChecks:
        """Shape used when the remote side has no status check settings."""
        return cls(enabled=False, strict=False, checks=())

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "strict": self.strict,
            "checks": [check.to_dict() for check in self.checks],
        }


@dataclass(frozen=True, slots=True)
class BranchProtectionRules:
    """Full set of branch protection settings, expected or observed."""

    required_pull_request_reviews: RequiredPullRequestReviews = field(
        default_factory=RequiredPullRequestReviews
    )
    required_status_checks: RequiredStatusChecks = field(default_factory=RequiredStatusChecks)
    enforce_admins: bool = False
    required_linear_history: bool = False
    allow_force_pushes: bool = False
    allow_deletions: bool = False
    required_conversation_resolution: bool = False
    required_signatures: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "required_pull_request_reviews": self.required_pull_request_reviews.to_dict(),
            "required_status_checks": self.required_status_checks.to_dict(),
            "enforce_admins": self.enforce_admins,
            "required_linear_history": self.required_linear_history,
            "allow_force_pushes": self.allow_force_pushes,
            "allow_deletions": self.allow_deletions,
            "required_conversation_resolution": self.required_conversation_resolution,
            "required_signatures": self.required_signatures,
        }


@dataclass(frozen=True, slots=True)
class BranchProtection:
    """Branch patterns to evaluate and the rules they must satisfy."""

    branches: tuple[str, ...] = DEFAULT_BRANCHES
    rules: BranchProtectionRules = field(default_factory=BranchProtectionRules)


@dataclass(frozen=True, slots=True)
class RequiredFile:
    """A file (or file pattern) the repository must contain.

    Exactly one of ``path`` or ``pattern`` should be set; this is checked when
    the rule is evaluated, not here.
    """

    path: str | None = None
    pattern: str | None = None
    description: str | None = None
    alternatives: tuple[str, ...] = ()
    severity: Severity = "error"
    case_insensitive: bool = False

    @property
    def label(self) -> str:
        return self.path or self.pattern or ""


@dataclass(frozen=True, slots=True)
class Contract:
    """A parsed contract document."""

    version: str
    profile: str | None = None
    language: str | None = None
    branch_protection: BranchProtection | None = None
    required_files: tuple[RequiredFile, ...] = ()
    metadata: Any = None

    def merge_profile(self, profile: Contract) -> Contract:
        """Layer ``profile`` on top of this contract.

        Required files are concatenated (base first, duplicates kept); branch
        protection and metadata are replaced wholesale when the profile sets
        them. Everything else comes from the base.
        """
        return replace(
            self,
            required_files=self.required_files + profile.required_files,
            branch_protection=(
                profile.branch_protection
                if profile.branch_protection is not None
                else self.branch_protection
            ),
            metadata=profile.metadata if profile.metadata is not None else self.metadata,
        )


def merge(base: Contract, profile: Contract) -> Contract:
    """Return ``base`` with ``profile`` merged on top."""
    return base.merge_profile(profile)


def contract_from_mapping(mapping: Any) -> Contract:
    """Build a ``Contract`` from a parsed YAML/JSON document."""
    if not isinstance(mapping, dict):
        raise InvalidConfigError("contract document must be a mapping")

    version = mapping.get("version")
    if version is None:
        raise InvalidConfigError("version is required")
    if not isinstance(version, str):
        raise InvalidConfigError("version must be a string (quote numeric versions)")

    raw_protection = mapping.get("branch_protection")
    return Contract(
        version=version,
        profile=_as_optional_str(mapping.get("profile"), "profile"),
        language=_as_optional_str(mapping.get("language"), "language"),
        branch_protection=(
            None if raw_protection is None else _parse_branch_protection(raw_protection)
        ),
        required_files=tuple(
            _parse_required_file(item, f"required_files[{index}]")
            for index, item in enumerate(_as_list(mapping.get("required_files"), "required_files"))
        ),
        metadata=mapping.get("metadata"),
    )


def _parse_branch_protection(value: Any) -> BranchProtection:
    table = _as_table(value, "branch_protection")
    raw_branches = table.get("branches")
    branches = (
        DEFAULT_BRANCHES
        if raw_branches is None
        else tuple(_as_str_list(raw_branches, "branch_protection.branches"))
    )
    return BranchProtection(
        branches=branches,
        rules=parse_branch_protection_rules(table.get("rules"), "branch_protection.rules"),
    )


def parse_branch_protection_rules(value: Any, field_name: str = "rules") -> BranchProtectionRules:
    """Parse expected rules, applying the expected-side defaults."""
    table = _as_table(value, field_name)
    reviews = _as_table(
        table.get("required_pull_request_reviews"),
        f"{field_name}.required_pull_request_reviews",
    )
    status = _as_table(table.get("required_status_checks"), f"{field_name}.required_status_checks")
    reviews_name = f"{field_name}.required_pull_request_reviews"
    status_name = f"{field_name}.required_status_checks"

    return BranchProtectionRules(
        required_pull_request_reviews=RequiredPullRequestReviews(
            enabled=_as_bool(reviews.get("enabled", True), f"{reviews_name}.enabled"),
            required_approving_review_count=_as_review_count(
                reviews.get("required_approving_review_count", 1),
                f"{reviews_name}.required_approving_review_count",
            ),
            dismiss_stale_reviews=_as_bool(
                reviews.get("dismiss_stale_reviews", True), f"{reviews_name}.dismiss_stale_reviews"
            ),
            require_code_owner_reviews=_as_bool(
                reviews.get("require_code_owner_reviews", False),
                f"{reviews_name}.require_code_owner_reviews",
            ),
            require_last_push_approval=_as_bool(
                reviews.get("require_last_push_approval", False),
                f"{reviews_name}.require_last_push_approval",
            ),
        ),
        required_status_checks=RequiredStatusChecks(
            enabled=_as_bool(status.get("enabled", True), f"{status_name}.enabled"),
            strict=_as_bool(status.get("strict", True), f"{status_name}.strict"),
            checks=tuple(
                _parse_status_check(item, f"{status_name}.checks[{index}]")
                for index, item in enumerate(
                    _as_list(status.get("checks"), f"{status_name}.checks")
                )
            ),
        ),
        enforce_admins=_as_bool(table.get("enforce_admins", False), f"{field_name}.enforce_admins"),
        required_linear_history=_as_bool(
            table.get("required_linear_history", False), f"{field_name}.required_linear_history"
        ),
        allow_force_pushes=_as_bool(
            table.get("allow_force_pushes", False), f"{field_name}.allow_force_pushes"
        ),
        allow_deletions=_as_bool(
            table.get("allow_deletions", False), f"{field_name}.allow_deletions"
        ),
        required_conversation_resolution=_as_bool(
            table.get("required_conversation_resolution", False),
            f"{field_name}.required_conversation_resolution",
        ),
        required_signatures=_as_bool(
            table.get("required_signatures", False), f"{field_name}.required_signatures"
        ),
    )


def _parse_status_check(value: Any, field_name: str) -> StatusCheck:
    if isinstance(value, str):
        return StatusCheck(context=value)
    table = _as_table(value, field_name)
    context = table.get("context")
    if not isinstance(context, str):
        raise InvalidConfigError(f"{field_name}.context must be a string")
    app_id = table.get("app_id")
    valid_app_id = isinstance(app_id, int) and not isinstance(app_id, bool) and app_id >= 0
    if app_id is not None and not valid_app_id:
        raise InvalidConfigError(f"{field_name}.app_id must be a non-negative integer")
    return StatusCheck(context=context, app_id=app_id)


def _parse_required_file(value: Any, field_name: str) -> RequiredFile:
    table = _as_table(value, field_name)
    return RequiredFile(
        path=_as_optional_str(table.get("path"), f"{field_name}.path"),
        pattern=_as_optional_str(table.get("pattern"), f"{field_name}.pattern"),
        description=_as_optional_str(table.get("description"), f"{field_name}.description"),
        alternatives=tuple(_as_str_list(table.get("alternatives"), f"{field_name}.alternatives")),
        severity=as_severity(table.get("severity", "error"), f"{field_name}.severity"),
        case_insensitive=_as_bool(
            table.get("case_insensitive", False), f"{field_name}.case_insensitive"
        ),
    )


def as_severity(raw: Any, field_name: str = "severity") -> Severity:
    if not isinstance(raw, str) or raw.lower() not in SEVERITIES:
        raise InvalidConfigError(f"{field_name} must be one of: {', '.join(SEVERITIES)}")
    return raw.lower()  # type: ignore[return-value]


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidConfigError(f"{field_name} must be a mapping")
    return value


def _as_list(value: Any, field_name: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidConfigError(f"{field_name} must be a list")
    return value


def _as_str_list(value: Any, field_name: str) -> list[str]:
    items = _as_list(value, field_name)
    if not all(isinstance(item, str) for item in items):
        raise InvalidConfigError(f"{field_name} must be a list of strings")
    return items


def _as_optional_str(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidConfigError(f"{field_name} must be a string")
    return value


def _as_bool(raw: Any, field_name: str) -> bool:
    if not isinstance(raw, bool):
        raise InvalidConfigError(f"{field_name} must be a boolean")
    return raw


def _as_review_count(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise InvalidConfigError(f"{field_name} must be an integer")
    if not 0 <= raw <= MAX_REVIEW_COUNT:
        raise InvalidConfigError(f"{field_name} must be between 0 and {MAX_REVIEW_COUNT}")
    return raw
