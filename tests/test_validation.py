"""Schema validation tests."""

from __future__ import annotations

import json
from pathlib import Path

from repo_contract.schema import CONTRACT_SCHEMA, SCHEMA_ID, schema_json
from repo_contract.validation import validate_contract_file, validate_document
from tests.helpers_git import write_file


def test_valid_document_passes() -> None:
    report = validate_document(
        {
            "$schema": SCHEMA_ID,
            "version": "1.0",
            "branch_protection": {
                "branches": ["main"],
                "rules": {
                    "required_status_checks": {
                        "checks": ["lint", {"context": "build", "app_id": 1}],
                    }
                },
            },
            "required_files": [{"path": "README.md"}, {"pattern": "^docs/"}],
        },
        path="contract.yml",
    )

    assert report.valid
    assert report.to_dict() == {"path": "contract.yml", "valid": True, "errors": []}


def test_errors_carry_instance_paths() -> None:
    report = validate_document(
        {
            "version": "1.0",
            "required_files": [{"path": "README.md", "severity": "fatal"}],
            "unknown": True,
        },
        path="contract.yml",
    )

    assert not report.valid
    paths = [issue.instance_path for issue in report.errors]
    assert "" in paths
    assert "/required_files/0/severity" in paths


def test_required_file_needs_exactly_one_of_path_or_pattern() -> None:
    both = validate_document(
        {"version": "1", "required_files": [{"path": "a", "pattern": "b"}]}, path="c.yml"
    )
    neither = validate_document({"version": "1", "required_files": [{}]}, path="c.yml")

    assert not both.valid
    assert not neither.valid


def test_yaml_syntax_error_is_an_issue(tmp_path: Path) -> None:
    write_file(tmp_path, "contract.yml", "version: [\n")

    report = validate_contract_file(tmp_path / "contract.yml")

    assert not report.valid
    assert len(report.errors) == 1
    assert "invalid YAML" in report.errors[0].message


def test_schema_json_round_trips() -> None:
    assert json.loads(schema_json()) == CONTRACT_SCHEMA


def test_numeric_version_is_rejected() -> None:
    report = validate_document({"version": 1.1}, path="contract.yml")

    assert not report.valid
    assert [issue.instance_path for issue in report.errors] == ["/version"]
