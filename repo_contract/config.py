"""CLI configuration loading for repo-contract."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from repo_contract.errors import InvalidConfigError

CONFIG_FILENAMES = (".contract.toml",)
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("repo_contract", "repo-contract")

DEFAULT_CONTRACT_PATH = Path("contract.yml")
KNOWN_RULES = ("required_files", "branch_protection")
TRUE_VALUES = {"1", "true", "yes"}


@dataclass(slots=True)
class GithubConfig:
    """GitHub access settings."""

    token: str | None = None
    api_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        # never echo the token itself
        return {"token_set": self.token is not None, "api_url": self.api_url}


@dataclass(slots=True)
class CliConfig:
    """CLI defaults resolved from the config file and environment."""

    config_path: Path | None = None
    format: str | None = None
    strict: bool | None = None
    check_rules: list[str] | None = None
    github: GithubConfig = field(default_factory=GithubConfig)
    env_strict: bool = False
    env_repository: str | None = None
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "config_path": str(self.config_path) if self.config_path is not None else None,
            "format": self.format,
            "strict": self.strict,
            "check_rules": list(self.check_rules) if self.check_rules is not None else None,
            "github": self.github.to_dict(),
            "env_strict": self.env_strict,
            "env_repository": self.env_repository,
            "source": self.source,
        }

    def contract_path(self, *candidates: Path | None) -> Path:
        """First explicit path wins, then the configured one, then ``contract.yml``."""
        for candidate in candidates:
            if candidate is not None:
                return candidate
        return self.config_path or DEFAULT_CONTRACT_PATH

    def resolve_strict(self, flag: bool | None) -> bool:
        if self.env_strict:
            return True
        if flag is not None:
            return flag
        return bool(self.strict)

    def resolve_rules(self, raw: str | None) -> list[str]:
        """Parse a comma-separated rule list, falling back to config and defaults."""
        if raw is not None:
            names = [item.strip() for item in raw.split(",")]
        elif self.check_rules is not None:
            names = [item.strip() for item in self.check_rules]
        else:
            names = list(KNOWN_RULES)
        unknown = [name for name in names if name not in KNOWN_RULES]
        if unknown:
            raise InvalidConfigError(f"unknown rule: {', '.join(unknown)}")
        return names


def load_cli_config(
    directory: Path,
    *,
    environ: Mapping[str, str] | None = None,
) -> CliConfig:
    """Load ``.contract.toml`` (or ``pyproject.toml``) and apply environment overrides."""
    env = os.environ if environ is None else environ
    config = _load_file_config(directory.resolve())

    token = env.get("GITHUB_TOKEN", "").strip()
    if token:
        config.github.token = token
    api_url = env.get("GITHUB_API_URL", "").strip()
    if api_url:
        config.github.api_url = api_url
    config.env_strict = env.get("CONTRACT_STRICT", "").strip().lower() in TRUE_VALUES
    repository = env.get("GITHUB_REPOSITORY", "").strip()
    config.env_repository = repository or None
    return config


def _load_file_config(directory: Path) -> CliConfig:
    for filename in CONFIG_FILENAMES:
        resolved = directory / filename
        if resolved.exists():
            mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
            return _from_mapping(mapping, source=str(resolved))

    pyproject_path = directory / PYPROJECT_FILENAME
    if pyproject_path.exists():
        mapping = _extract_config_mapping(_load_toml(pyproject_path), source_path=pyproject_path)
        if mapping:
            return _from_mapping(mapping, source=str(pyproject_path))

    return CliConfig()


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise InvalidConfigError(f"invalid TOML in {path}: {exc}") from exc
    return loaded


def _extract_config_mapping(loaded: dict[str, Any], *, source_path: Path) -> dict[str, Any]:
    if source_path.name == PYPROJECT_FILENAME:
        section = _find_pyproject_tool_section(loaded)
        return section if section is not None else {}
    return loaded


def _find_pyproject_tool_section(loaded: dict[str, Any]) -> dict[str, Any] | None:
    tool = loaded.get("tool")
    if not isinstance(tool, dict):
        return None
    for key in PYPROJECT_TOOL_KEYS:
        section = tool.get(key)
        if isinstance(section, dict):
            return section
    return None


def _from_mapping(mapping: dict[str, Any], *, source: str) -> CliConfig:
    default = _as_table(mapping.get("default"), "default")
    check = _as_table(mapping.get("check"), "check")
    github = _as_table(mapping.get("github"), "github")

    raw_path = default.get("config")
    raw_format = default.get("format")
    raw_strict = default.get("strict")
    if raw_strict is not None and not isinstance(raw_strict, bool):
        raise InvalidConfigError("default.strict must be a boolean")
    raw_rules = check.get("rules")

    return CliConfig(
        config_path=Path(_as_str(raw_path, "default.config")) if raw_path is not None else None,
        format=_as_str(raw_format, "default.format").lower() if raw_format is not None else None,
        strict=raw_strict,
        check_rules=_as_str_list(raw_rules, "check.rules") if raw_rules is not None else None,
        github=GithubConfig(
            token=_as_optional_str(github.get("token"), "github.token"),
            api_url=_as_optional_str(github.get("api_url"), "github.api_url"),
        ),
        source=source,
    )


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidConfigError(f"{field_name} must be a table")
    return value


def _as_str_list(value: Any, field_name: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise InvalidConfigError(f"{field_name} must be a list of strings")
    return list(value)


def _as_str(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise InvalidConfigError(f"{field_name} must be a string")
    return value


def _as_optional_str(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    return _as_str(value, field_name)
