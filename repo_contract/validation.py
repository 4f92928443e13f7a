"""Schema validation of contract documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema

from repo_contract.errors import InvalidConfigError
from repo_contract.loader import load_document
from repo_contract.schema import CONTRACT_SCHEMA


@dataclass(slots=True)
class ValidationIssue:
    message: str
    instance_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"message": self.message}
        if self.instance_path is not None:
            payload["instance_path"] = self.instance_path
        return payload


@dataclass(slots=True)
class ValidationReport:
    """Validation result for one contract file."""

    path: str
    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "valid": self.valid,
            "errors": [issue.to_dict() for issue in self.errors],
        }


def validate_contract_file(path: Path) -> ValidationReport:
    """Validate a contract file against the bundled schema.

    YAML syntax errors are reported as a single issue rather than raised.
    """
    try:
        document = load_document(path)
    except InvalidConfigError as exc:
        return ValidationReport(path=str(path), valid=False, errors=[ValidationIssue(str(exc))])
    return validate_document(document, path=str(path))


def validate_document(document: Any, *, path: str) -> ValidationReport:
    validator = jsonschema.Draft202012Validator(CONTRACT_SCHEMA)
    errors = sorted(
        validator.iter_errors(document),
        key=lambda item: [str(part) for part in item.absolute_path],
    )
    issues = [
        ValidationIssue(message=error.message, instance_path=_json_pointer(error.absolute_path))
        for error in errors
    ]
    return ValidationReport(path=path, valid=not issues, errors=issues)


def _json_pointer(parts: Any) -> str:
    return "".join(f"/{part}" for part in parts)
