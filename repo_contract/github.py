"""GitHub REST API access for branch protection state."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from repo_contract import __version__
from repo_contract.contract import (
    BranchProtectionRules,
    RequiredPullRequestReviews,
    RequiredStatusChecks,
    StatusCheck,
)
from repo_contract.errors import GitHubApiError, InvalidConfigError
from repo_contract.git import get_remote_url

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
PAGE_SIZE = 100

_TOGGLE_FIELDS = (
    "enforce_admins",
    "required_linear_history",
    "allow_force_pushes",
    "allow_deletions",
    "required_conversation_resolution",
    "required_signatures",
)


class GithubClient:
    """Read-only client for branch and branch protection endpoints."""

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": f"repo-contract/{__version__}",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    def __enter__(self) -> GithubClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def list_branches(self, repo: str) -> list[str]:
        """Return every branch name, following pagination links."""
        names: list[str] = []
        url: str | None = f"/repos/{repo}/branches?per_page={PAGE_SIZE}"
        while url is not None:
            response = self._get(url)
            if response is None:
                raise GitHubApiError(f"repository not found: {repo}")
            payload = _json(response)
            if not isinstance(payload, list):
                raise GitHubApiError("unexpected branches payload")
            for item in payload:
                if not isinstance(item, dict) or not isinstance(item.get("name"), str):
                    raise GitHubApiError("unexpected branches payload")
                names.append(item["name"])
            url = response.links.get("next", {}).get("url")
        logger.debug("Listed %d branches for %s", len(names), repo)
        return names

    def get_branch_protection(self, repo: str, branch: str) -> BranchProtectionRules | None:
        """Return the branch's protection, or None when GitHub answers 404."""
        response = self._get(f"/repos/{repo}/branches/{quote(branch, safe='')}/protection")
        if response is None:
            return None
        payload = _json(response)
        if not isinstance(payload, dict):
            raise GitHubApiError("unexpected branch protection payload")
        return convert_protection_rules(payload)

    def _get(self, url: str) -> httpx.Response | None:
        logger.debug("GET %s", url)
        try:
            response = self._client.get(url)
        except httpx.HTTPError as exc:
            raise GitHubApiError(str(exc)) from exc
        if response.status_code == 404:
            return None
        if not response.is_success:
            raise GitHubApiError(f"status code {response.status_code}")
        return response


def convert_protection_rules(payload: dict[str, Any]) -> BranchProtectionRules:
    """Convert a GitHub protection response into ``BranchProtectionRules``.

    Groups missing from the response take the disabled shape, the opposite
    of the defaults used for expected rules.
    """
    toggles = {name: _enabled_flag(payload.get(name)) for name in _TOGGLE_FIELDS}
    return BranchProtectionRules(
        required_pull_request_reviews=_convert_reviews(
            payload.get("required_pull_request_reviews")
        ),
        required_status_checks=_convert_status_checks(payload.get("required_status_checks")),
        **toggles,
    )


def _convert_reviews(value: Any) -> RequiredPullRequestReviews:
    if value is None:
        return RequiredPullRequestReviews.disabled()
    if not isinstance(value, dict):
        raise GitHubApiError("unexpected pull request reviews payload")
    count = value.get("required_approving_review_count", 0)
    if isinstance(count, bool) or not isinstance(count, int):
        raise GitHubApiError("unexpected pull request reviews payload")
    return RequiredPullRequestReviews(
        enabled=True,
        required_approving_review_count=count,
        dismiss_stale_reviews=_payload_flag(value, "dismiss_stale_reviews"),
        require_code_owner_reviews=_payload_flag(value, "require_code_owner_reviews"),
        require_last_push_approval=_payload_flag(value, "require_last_push_approval"),
    )


def _convert_status_checks(value: Any) -> RequiredStatusChecks:
    if value is None:
        return RequiredStatusChecks.disabled()
    if not isinstance(value, dict):
        raise GitHubApiError("unexpected status checks payload")
    contexts = value.get("contexts") or []
    items = value.get("checks") or []
    if not isinstance(contexts, list) or not isinstance(items, list):
        raise GitHubApiError("unexpected status checks payload")

    checks: list[StatusCheck] = []
    for context in contexts:
        if not isinstance(context, str):
            raise GitHubApiError("unexpected status checks payload")
        checks.append(StatusCheck(context=context))
    for item in items:
        if not isinstance(item, dict) or not isinstance(item.get("context"), str):
            raise GitHubApiError("unexpected status checks payload")
        app_id = item.get("app_id")
        if app_id is not None and (isinstance(app_id, bool) or not isinstance(app_id, int)):
            raise GitHubApiError("unexpected status checks payload")
        checks.append(StatusCheck(context=item["context"], app_id=app_id))
    return RequiredStatusChecks(
        enabled=True,
        strict=_payload_flag(value, "strict"),
        checks=tuple(checks),
    )


def _payload_flag(value: dict[str, Any], name: str) -> bool:
    flag = value.get(name, False)
    if not isinstance(flag, bool):
        raise GitHubApiError(f"unexpected {name} value in payload")
    return flag


def _enabled_flag(value: Any) -> bool:
    if isinstance(value, dict):
        return bool(value.get("enabled", False))
    return False


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise GitHubApiError(f"invalid JSON response: {exc}") from exc


def resolve_repository(remote: str | None, *, env_repository: str | None, cwd: Path) -> str:
    """Resolve ``owner/repo`` from a flag, GITHUB_REPOSITORY, or the git origin."""
    if remote is not None:
        normalized = normalize_repository(remote)
        if normalized is None:
            raise InvalidConfigError(f"invalid remote repository: {remote}")
        return normalized
    if env_repository and env_repository.strip():
        return env_repository.strip()

    url = get_remote_url(cwd)
    normalized = normalize_repository(url)
    if normalized is None:
        raise InvalidConfigError(f"invalid remote repository: {url}")
    return normalized


def normalize_repository(value: str) -> str | None:
    """Reduce a GitHub URL or ``owner/repo`` string to ``owner/repo``."""
    trimmed = value.strip().removesuffix(".git")
    for prefix in ("git@github.com:", "ssh://git@github.com/"):
        if trimmed.startswith(prefix):
            return _take_owner_repo(trimmed[len(prefix) :])
    marker = "github.com/"
    if marker in trimmed:
        return _take_owner_repo(trimmed[trimmed.index(marker) + len(marker) :])
    return _take_owner_repo(trimmed)


def _take_owner_repo(value: str) -> str | None:
    parts = value.split("/")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return None
    return f"{parts[0]}/{parts[1]}"
