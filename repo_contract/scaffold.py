"""Starter contract generation for ``repo-contract init``."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from repo_contract.contract import Severity
from repo_contract.errors import AlreadyExistsError
from repo_contract.loader import profile_path_for
from repo_contract.schema import SCHEMA_ID

CONTRACT_VERSION = "1.0"

DEFAULT_REQUIRED_FILES: tuple[tuple[str, Severity | None], ...] = (
    ("README.md", None),
    ("LICENSE", None),
    (".gitignore", None),
    ("AGENTS.md", "info"),
)

FROM_REPO_CANDIDATES: tuple[tuple[str, Severity | None], ...] = (
    ("README.md", None),
    ("LICENSE", None),
    ("CONTRIBUTING.md", "warning"),
    ("CHANGELOG.md", "warning"),
    ("SECURITY.md", "warning"),
    (".gitignore", None),
    ("AGENTS.md", "info"),
)

PROFILE_REQUIRED_FILES: dict[str, tuple[tuple[str, Severity | None], ...]] = {
    "rust": (
        ("Cargo.toml", None),
        ("src/main.rs", "warning"),
        ("rust-toolchain.toml", "warning"),
    ),
    "python": (
        ("pyproject.toml", None),
        ("tests", "warning"),
        (".python-version", "info"),
    ),
}


@dataclass(slots=True)
class InitOutcome:
    created: list[Path] = field(default_factory=list)


def init_contract_files(
    root: Path,
    *,
    output_path: Path,
    profile: str | None = None,
    from_repo: bool = False,
    force: bool = False,
) -> InitOutcome:
    """Write a starter contract and, when requested, a profile next to it."""
    outcome = InitOutcome()
    if not output_path.is_absolute():
        output_path = root / output_path
    candidates = _existing(root, FROM_REPO_CANDIDATES) if from_repo else DEFAULT_REQUIRED_FILES

    document: dict[str, Any] = {"$schema": SCHEMA_ID, "version": CONTRACT_VERSION}
    if profile is not None:
        document["profile"] = profile
    if candidates:
        document["required_files"] = _required_files(candidates)
    _write_yaml(output_path, document, force=force)
    outcome.created.append(output_path)

    if profile is not None:
        profile_document: dict[str, Any] = {
            "$schema": SCHEMA_ID,
            "version": CONTRACT_VERSION,
            "language": profile,
        }
        profile_files = PROFILE_REQUIRED_FILES.get(profile, ())
        if profile_files:
            profile_document["required_files"] = _required_files(profile_files)
        profile_path = profile_path_for(output_path, profile)
        _write_yaml(profile_path, profile_document, force=force)
        outcome.created.append(profile_path)

    return outcome


def _existing(
    root: Path, candidates: tuple[tuple[str, Severity | None], ...]
) -> tuple[tuple[str, Severity | None], ...]:
    return tuple(item for item in candidates if (root / item[0]).exists())


def _required_files(items: tuple[tuple[str, Severity | None], ...]) -> list[dict[str, str]]:
    entries: list[dict[str, str]] = []
    for path, severity in items:
        entry = {"path": path}
        if severity is not None:
            entry["severity"] = severity
        entries.append(entry)
    return entries


def _write_yaml(path: Path, document: dict[str, Any], *, force: bool) -> None:
    if path.exists() and not force:
        raise AlreadyExistsError(str(path))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
