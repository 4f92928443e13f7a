"""Contract parsing and profile merge tests."""

from __future__ import annotations

import pytest

from repo_contract.contract import (
    BranchProtection,
    Contract,
    RequiredFile,
    StatusCheck,
    contract_from_mapping,
    merge,
    parse_branch_protection_rules,
)
from repo_contract.errors import InvalidConfigError


def test_expected_rules_defaults() -> None:
    rules = parse_branch_protection_rules(None)

    reviews = rules.required_pull_request_reviews
    assert reviews.enabled is True
    assert reviews.required_approving_review_count == 1
    assert reviews.dismiss_stale_reviews is True
    assert reviews.require_code_owner_reviews is False
    assert reviews.require_last_push_approval is False
    assert rules.required_status_checks.enabled is True
    assert rules.required_status_checks.strict is True
    assert rules.required_status_checks.checks == ()
    assert rules.enforce_admins is False
    assert rules.allow_force_pushes is False


def test_branch_protection_without_branches_defaults_to_main() -> None:
    contract = contract_from_mapping({"version": "1.0", "branch_protection": {"rules": {}}})

    assert contract.branch_protection is not None
    assert contract.branch_protection.branches == ("main",)


def test_status_checks_accept_strings_and_objects() -> None:
    rules = parse_branch_protection_rules(
        {
            "required_status_checks": {
                "checks": ["lint", {"context": "build", "app_id": 15368}],
            }
        }
    )

    assert rules.required_status_checks.checks == (
        StatusCheck("lint"),
        StatusCheck("build", app_id=15368),
    )


def test_required_file_fields_are_parsed() -> None:
    contract = contract_from_mapping(
        {
            "version": "1.0",
            "required_files": [
                {
                    "path": "LICENSE",
                    "alternatives": ["LICENSE.md"],
                    "severity": "warning",
                    "case_insensitive": True,
                    "description": "license text",
                },
                {"pattern": r"\.github/workflows/.+\.ya?ml$"},
            ],
        }
    )

    assert contract.version == "1.0"
    first, second = contract.required_files
    assert first.path == "LICENSE"
    assert first.alternatives == ("LICENSE.md",)
    assert first.severity == "warning"
    assert first.case_insensitive is True
    assert second.pattern is not None
    assert second.severity == "error"


@pytest.mark.parametrize(
    ("mapping", "message"),
    [
        ([], "contract document must be a mapping"),
        ({}, "version is required"),
        ({"version": 1.10}, "version must be a string"),
        ({"version": "1", "required_files": [{"path": "A", "severity": "fatal"}]}, "severity"),
        (
            {
                "version": "1",
                "branch_protection": {
                    "rules": {
                        "required_pull_request_reviews": {"required_approving_review_count": 256}
                    }
                },
            },
            "between 0 and 255",
        ),
        (
            {
                "version": "1",
                "branch_protection": {
                    "rules": {
                        "required_status_checks": {"checks": [{"context": "x", "app_id": -1}]}
                    }
                },
            },
            "app_id",
        ),
        ({"version": "1", "branch_protection": {"rules": {"enforce_admins": "yes"}}}, "boolean"),
    ],
)
def test_invalid_documents_raise(mapping: object, message: str) -> None:
    with pytest.raises(InvalidConfigError, match=message):
        contract_from_mapping(mapping)


def test_merge_concatenates_files_and_replaces_branch_protection() -> None:
    base = Contract(
        version="1.0",
        profile="rust",
        branch_protection=BranchProtection(branches=("main",)),
        required_files=(RequiredFile(path="README.md"),),
        metadata={"team": "core"},
    )
    profile = Contract(
        version="2.0",
        language="rust",
        branch_protection=BranchProtection(branches=("release/*",)),
        required_files=(RequiredFile(path="Cargo.toml"), RequiredFile(path="README.md")),
    )

    merged = merge(base, profile)

    assert merged.version == "1.0"
    assert merged.profile == "rust"
    assert merged.language is None
    assert [item.path for item in merged.required_files] == [
        "README.md",
        "Cargo.toml",
        "README.md",
    ]
    assert merged.branch_protection is not None
    assert merged.branch_protection.branches == ("release/*",)
    assert merged.metadata == {"team": "core"}


def test_merge_keeps_base_branch_protection_when_profile_has_none() -> None:
    base = Contract(version="1.0", branch_protection=BranchProtection(branches=("main",)))
    merged = base.merge_profile(Contract(version="1.0", metadata=["x"]))

    assert merged.branch_protection == base.branch_protection
    assert merged.metadata == ["x"]
