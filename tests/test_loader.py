"""Contract loading and profile resolution tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from repo_contract.errors import InvalidConfigError, ProfileNotFoundError
from repo_contract.loader import load_contract, profile_path_for
from tests.helpers_git import write_file


def test_profile_is_merged_from_sibling_file(tmp_path: Path) -> None:
    write_file(
        tmp_path,
        "contract.yml",
        "version: '1.0'\nprofile: rust\nrequired_files:\n  - path: README.md\n",
    )
    write_file(
        tmp_path,
        "contract.rust.yml",
        "\n".join(
            [
                "version: '1.0'",
                "branch_protection:",
                "  branches: [main]",
                "required_files:",
                "  - path: Cargo.toml",
                "",
            ]
        ),
    )

    loaded = load_contract(tmp_path / "contract.yml")

    assert loaded.profile_path == tmp_path / "contract.rust.yml"
    assert [item.path for item in loaded.contract.required_files] == ["README.md", "Cargo.toml"]
    assert loaded.contract.branch_protection is not None


def test_profile_can_be_skipped(tmp_path: Path) -> None:
    write_file(tmp_path, "contract.yml", "version: '1.0'\nprofile: go\n")

    loaded = load_contract(tmp_path / "contract.yml", include_profile=False)

    assert loaded.profile_path is None
    assert loaded.contract.profile == "go"


def test_missing_profile_file_raises(tmp_path: Path) -> None:
    write_file(tmp_path, "contract.yml", "version: '1.0'\nprofile: go\n")

    with pytest.raises(ProfileNotFoundError) as excinfo:
        load_contract(tmp_path / "contract.yml")

    assert excinfo.value.path == str(tmp_path / "contract.go.yml")


def test_invalid_yaml_raises_invalid_config(tmp_path: Path) -> None:
    write_file(tmp_path, "contract.yml", "version: [unclosed\n")

    with pytest.raises(InvalidConfigError, match="invalid YAML"):
        load_contract(tmp_path / "contract.yml")


def test_json_documents_load(tmp_path: Path) -> None:
    write_file(tmp_path, "contract.json", '{"version": "1.0", "required_files": []}')

    loaded = load_contract(tmp_path / "contract.json")

    assert loaded.contract.version == "1.0"
    assert loaded.contract.required_files == ()


def test_profile_path_for() -> None:
    assert profile_path_for(Path("conf/contract.yml"), "python") == Path(
        "conf/contract.python.yml"
    )
