"""Filesystem listing for required-file checks."""

from __future__ import annotations

import os
from pathlib import Path

IGNORED_ROOT_DIRS = frozenset({".git", ".hg", ".svn", "target"})


def list_files(root: Path) -> list[str]:
    """Return root-relative, forward-slash paths of every file under ``root``.

    VCS metadata and build-output directories at the top level are skipped.
    """
    paths: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        if current == root:
            dirnames[:] = [name for name in dirnames if name not in IGNORED_ROOT_DIRS]
        dirnames.sort()
        for filename in sorted(filenames):
            relative = (current / filename).relative_to(root)
            paths.append(normalize_path(relative.as_posix()))
    return paths


def normalize_path(path: str) -> str:
    return path.replace("\\", "/")
