"""Helpers for synthetic repositories used in tests."""

from __future__ import annotations

import subprocess
from pathlib import Path


def init_repo(tmp_path: Path, origin: str | None = None) -> Path:
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    if origin is not None:
        git(repo, "remote", "add", "origin", origin)
    return repo


def git(repo: Path, *args: str) -> str:
    completed = subprocess.run(
        ["git", *args],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
    )
    return completed.stdout


def write_file(repo: Path, rel_path: str, content: str = "") -> None:
    target = repo / rel_path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
