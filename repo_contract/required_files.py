"""Required-file rule evaluation."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from repo_contract.contract import RequiredFile, Severity
from repo_contract.errors import InvalidConfigError
from repo_contract.files import list_files, normalize_path
from repo_contract.globbing import compile_glob, looks_like_glob
from repo_contract.summary import Summary, summarize

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RequiredFileCheck:
    """Outcome of one required-file rule."""

    path: str
    exists: bool
    severity: Severity
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "path": self.path,
            "exists": self.exists,
            "severity": self.severity,
        }
        if self.description is not None:
            payload["description"] = self.description
        return payload


@dataclass(slots=True)
class RequiredFilesReport:
    """All required-file outcomes for one run."""

    checks: list[RequiredFileCheck] = field(default_factory=list)
    summary: Summary = field(default_factory=Summary)


@dataclass(frozen=True, slots=True)
class FileIndex:
    """Known files under a root, with a lowercase view for case-insensitive lookups."""

    root: Path
    files: tuple[str, ...]
    lowercase: frozenset[str]

    @classmethod
    def from_paths(cls, root: Path, files: list[str]) -> FileIndex:
        normalized = tuple(normalize_path(path) for path in files)
        return cls(
            root=root,
            files=normalized,
            lowercase=frozenset(path.lower() for path in normalized),
        )

    @classmethod
    def scan(cls, root: Path) -> FileIndex:
        return cls.from_paths(root, list_files(root))


def check_required_files(
    root: Path,
    required_files: tuple[RequiredFile, ...] | list[RequiredFile],
    *,
    files: list[str] | None = None,
) -> RequiredFilesReport:
    """Evaluate every rule against the files under ``root``."""
    index = FileIndex.from_paths(root, files) if files is not None else FileIndex.scan(root)
    logger.debug("Indexed %d files under %s", len(index.files), root)

    checks = [evaluate_required_file(rule, index) for rule in required_files]
    summary = summarize((check.exists, check.severity) for check in checks)
    return RequiredFilesReport(checks=checks, summary=summary)


def evaluate_required_file(rule: RequiredFile, index: FileIndex) -> RequiredFileCheck:
    """Evaluate a single rule.

    A ``path`` rule passes when the path or any alternative exists; a
    ``pattern`` rule passes when the regular expression matches any known
    path. A rule with neither is a configuration error.
    """
    if rule.path is not None:
        candidates = (rule.path, *rule.alternatives)
        exists = any(
            _path_exists(candidate, index, case_insensitive=rule.case_insensitive)
            for candidate in candidates
        )
        label = rule.path
    elif rule.pattern is not None:
        exists = _match_regex(rule.pattern, index.files, case_insensitive=rule.case_insensitive)
        label = rule.pattern
    else:
        raise InvalidConfigError("required_files entry must include path or pattern")

    if not exists:
        logger.info("Required file not found: %s (%s)", label, rule.severity)
    return RequiredFileCheck(
        path=label,
        exists=exists,
        severity=rule.severity,
        description=rule.description,
    )


def _path_exists(candidate: str, index: FileIndex, *, case_insensitive: bool) -> bool:
    normalized = normalize_path(candidate)
    if looks_like_glob(normalized):
        glob = compile_glob(normalized, case_insensitive=case_insensitive)
        return any(glob.match(path) for path in index.files)
    if case_insensitive:
        return normalized.lower() in index.lowercase
    return (index.root / candidate).exists()


def _match_regex(pattern: str, files: tuple[str, ...], *, case_insensitive: bool) -> bool:
    flags = re.IGNORECASE if case_insensitive else 0
    try:
        compiled = re.compile(pattern, flags)
    except re.error as exc:
        raise InvalidConfigError(f"invalid pattern {pattern!r}: {exc}") from exc
    return any(compiled.search(path) for path in files)
