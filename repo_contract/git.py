"""Git subprocess helpers."""

from __future__ import annotations

from pathlib import Path
from subprocess import CalledProcessError, run

from repo_contract.errors import ContractError


class GitError(ContractError):
    """Raised when git command execution fails."""


def get_remote_url(repo: Path, remote: str = "origin") -> str:
    """Return the configured URL of ``remote``."""
    url = _run_git(repo, ["config", "--get", f"remote.{remote}.url"]).strip()
    if not url:
        raise GitError(f"git remote.{remote}.url is not set")
    return url


def _run_git(repo: Path, args: list[str]) -> str:
    try:
        completed = run(
            ["git", *args],
            cwd=repo,
            check=True,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as exc:
        raise GitError("git executable not found") from exc
    except CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        raise GitError(stderr or f"git {' '.join(args)} failed") from exc

    return completed.stdout
