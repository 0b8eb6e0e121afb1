"""Cleaning result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from devsweep.models.project import Project


@dataclass(frozen=True, slots=True)
class PreservedExecutable:
    """An executable copied out of a build directory before removal."""

    source: Path
    destination: Path


@dataclass(frozen=True, slots=True)
class Cleaned:
    """A project whose build directory was removed."""

    project: Project
    bytes_freed: int
    preserved: tuple[PreservedExecutable, ...] = ()


@dataclass(frozen=True, slots=True)
class Failed:
    """A project whose build directory could not be cleaned."""

    project: Project
    reason: str


CleanOutcome = Union[Cleaned, Failed]


@dataclass(slots=True)
class CleanResult:
    """Aggregated result of cleaning a batch of projects."""

    total_bytes_freed: int = 0
    succeeded_count: int = 0
    failed: list[tuple[Path, str]] = field(default_factory=list)
    estimated_bytes: int = 0
    preserved: list[PreservedExecutable] = field(default_factory=list)
    outcomes: list[CleanOutcome] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def difference(self) -> int:
        """Actual bytes freed minus the scan-time estimate."""
        return self.total_bytes_freed - self.estimated_bytes
