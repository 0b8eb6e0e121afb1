"""Project dataclasses."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from pathlib import Path


class ProjectType(enum.Enum):
    """Supported ecosystems.

    Declaration order is the classification priority: when a directory
    satisfies several marker sets, the first member listed here wins.
    """

    RUST = "rust"
    NODE = "node"
    PYTHON = "python"
    GO = "go"

    @property
    def icon(self) -> str:
        return _ICONS[self]

    @property
    def label(self) -> str:
        """Human-readable ecosystem name, e.g. 'Node.js'."""
        return _LABELS[self]

    @property
    def priority(self) -> int:
        return list(ProjectType).index(self)


_ICONS = {
    ProjectType.RUST: "🦀",
    ProjectType.NODE: "📦",
    ProjectType.PYTHON: "🐍",
    ProjectType.GO: "🐹",
}

_LABELS = {
    ProjectType.RUST: "Rust",
    ProjectType.NODE: "Node.js",
    ProjectType.PYTHON: "Python",
    ProjectType.GO: "Go",
}


@dataclass(frozen=True, slots=True)
class BuildArtifacts:
    """A cleanable build directory and its size in bytes.

    ``size`` is 0 until the scanner's sizing pass fills it in.
    """

    path: Path
    size: int = 0


@dataclass(frozen=True, slots=True)
class Project:
    """A detected development project with a cleanable build directory.

    Instances are immutable. The scanner first creates an unsized project
    (``build_arts.size == 0``) and then derives the sized one through
    :meth:`with_size`.
    """

    kind: ProjectType
    root_path: Path
    build_arts: BuildArtifacts
    name: str | None = None

    @property
    def size(self) -> int:
        return self.build_arts.size

    @property
    def display_name(self) -> str:
        """Project name, falling back to the root directory name."""
        return self.name or self.root_path.name or str(self.root_path)

    def with_size(self, size: int) -> Project:
        """Return a copy of this project with its build size set."""
        return replace(self, build_arts=replace(self.build_arts, size=size))

    def __str__(self) -> str:
        if self.name:
            return f"{self.kind.icon} {self.name} ({self.root_path})"
        return f"{self.kind.icon} {self.root_path}"
