"""Traversal pruning rules for the project scanner."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

NODE_MODULES = "node_modules"

# Hidden directories that may still hold projects.
ALLOWED_HIDDEN = frozenset({".cargo"})

EXCLUDED_DIRS = frozenset({
    # version control
    ".git",
    ".svn",
    ".hg",
    # build output
    "target",
    "build",
    "dist",
    "out",
    # language caches and virtual environments
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".tox",
    "venv",
    ".venv",
    "env",
    ".env",
    # scratch
    "temp",
    "tmp",
})


def should_descend(path: Path, skip: Iterable[str] = ()) -> bool:
    """Return True if the walker should classify and enter *path*.

    A directory is pruned when it sits inside (or is) a ``node_modules``
    tree, when any skip pattern occurs in any of its path components,
    when it is hidden (except ``.cargo``), or when its name is one of
    :data:`EXCLUDED_DIRS`.
    """
    parts = path.parts
    if NODE_MODULES in parts:
        return False

    for pattern in skip:
        if pattern and any(pattern in part for part in parts):
            return False

    name = path.name
    if name.startswith(".") and name not in ALLOWED_HIDDEN:
        return False

    return name not in EXCLUDED_DIRS
