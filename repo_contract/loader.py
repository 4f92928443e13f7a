"""Contract document loading and profile resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from repo_contract.contract import Contract, contract_from_mapping
from repo_contract.errors import InvalidConfigError, ProfileNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LoadedContract:
    """A contract together with the files it was read from."""

    base_path: Path
    contract: Contract
    profile_path: Path | None = None


def load_contract(config_path: Path, *, include_profile: bool = True) -> LoadedContract:
    """Load ``config_path`` and, if it names a profile, merge that profile in."""
    base = contract_from_mapping(load_document(config_path))
    if not include_profile or base.profile is None:
        return LoadedContract(base_path=config_path, contract=base)

    profile_path = profile_path_for(config_path, base.profile)
    if not profile_path.exists():
        raise ProfileNotFoundError(str(profile_path))
    logger.info("Merging profile %s from %s", base.profile, profile_path)
    profile = contract_from_mapping(load_document(profile_path))
    return LoadedContract(
        base_path=config_path,
        contract=base.merge_profile(profile),
        profile_path=profile_path,
    )


def load_document(path: Path) -> Any:
    """Parse a YAML (or JSON) document."""
    logger.debug("Reading contract document %s", path)
    text = path.read_text(encoding="utf-8")
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise InvalidConfigError(f"invalid YAML in {path}: {exc}") from exc


def profile_path_for(base_path: Path, profile: str) -> Path:
    """Profiles live next to the base contract as ``contract.<profile>.yml``."""
    return base_path.parent / f"contract.{profile}.yml"
