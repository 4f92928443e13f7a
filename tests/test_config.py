"""CLI configuration loading tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from repo_contract.config import load_cli_config
from repo_contract.errors import InvalidConfigError


def test_dot_file_is_preferred_over_pyproject(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        "\n".join(
            [
                "[tool.repo_contract.default]",
                'format = "human"',
            ]
        ),
        encoding="utf-8",
    )
    (tmp_path / ".contract.toml").write_text(
        "\n".join(
            [
                "[default]",
                'config = "contracts/repo.yml"',
                'format = "JSON"',
                "strict = true",
                "",
                "[check]",
                'rules = ["required_files"]',
                "",
                "[github]",
                'api_url = "https://ghe.example.com/api/v3"',
            ]
        ),
        encoding="utf-8",
    )

    config = load_cli_config(tmp_path, environ={})

    assert config.source == str(tmp_path.resolve() / ".contract.toml")
    assert config.contract_path() == Path("contracts/repo.yml")
    assert config.format == "json"
    assert config.resolve_strict(None) is True
    assert config.resolve_rules(None) == ["required_files"]
    assert config.github.api_url == "https://ghe.example.com/api/v3"


def test_pyproject_tool_section_is_used(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        "\n".join(
            [
                '[tool.repo-contract.default]',
                'format = "json"',
            ]
        ),
        encoding="utf-8",
    )

    config = load_cli_config(tmp_path, environ={})

    assert config.format == "json"
    assert config.source is not None and config.source.endswith("pyproject.toml")


def test_defaults_without_any_file(tmp_path: Path) -> None:
    config = load_cli_config(tmp_path, environ={})

    assert config.source is None
    assert config.contract_path() == Path("contract.yml")
    assert config.contract_path(None, Path("other.yml")) == Path("other.yml")
    assert config.resolve_strict(None) is False
    assert config.resolve_rules(None) == ["required_files", "branch_protection"]


def test_environment_overrides(tmp_path: Path) -> None:
    (tmp_path / ".contract.toml").write_text(
        '[github]\ntoken = "from-file"\n',
        encoding="utf-8",
    )

    config = load_cli_config(
        tmp_path,
        environ={
            "GITHUB_TOKEN": "from-env",
            "CONTRACT_STRICT": "yes",
            "GITHUB_REPOSITORY": "acme/widget",
        },
    )

    assert config.github.token == "from-env"
    assert config.resolve_strict(False) is True
    assert config.env_repository == "acme/widget"
    assert config.to_dict()["github"] == {"token_set": True, "api_url": None}


def test_unknown_rule_is_rejected(tmp_path: Path) -> None:
    config = load_cli_config(tmp_path, environ={})

    with pytest.raises(InvalidConfigError, match="unknown rule: labels"):
        config.resolve_rules("required_files,labels")


def test_invalid_toml_is_reported(tmp_path: Path) -> None:
    (tmp_path / ".contract.toml").write_text("[default\n", encoding="utf-8")

    with pytest.raises(InvalidConfigError, match="invalid TOML"):
        load_cli_config(tmp_path, environ={})


def test_non_boolean_strict_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".contract.toml").write_text('[default]\nstrict = "yes"\n', encoding="utf-8")

    with pytest.raises(InvalidConfigError, match="default.strict"):
        load_cli_config(tmp_path, environ={})
