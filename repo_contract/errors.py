"""Exception types raised by repo-contract."""

from __future__ import annotations


class ContractError(RuntimeError):
    """Base class for contract loading and evaluation failures."""


class InvalidConfigError(ContractError):
    """Raised when a contract or CLI configuration is malformed."""

    def __str__(self) -> str:
        return f"Invalid configuration: {super().__str__()}"


class ProfileNotFoundError(ContractError):
    """Raised when a contract names a profile file that does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Profile file not found: {path}")
        self.path = path


class GitHubApiError(ContractError):
    """Raised when the GitHub API call fails with anything but 404."""

    def __str__(self) -> str:
        return f"GitHub API error: {super().__str__()}"


class AlreadyExistsError(ContractError):
    """Raised when a scaffold target already exists."""

    def __init__(self, path: str) -> None:
        super().__init__(f"File already exists: {path}")
        self.path = path
