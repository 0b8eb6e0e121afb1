"""Scan result dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from devsweep.models.project import Project


@dataclass(slots=True)
class ScanResult:
    """Sized projects found below a root plus non-fatal diagnostics."""

    root: Path
    projects: list[Project] = field(default_factory=list)
    diagnostics: list[str] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(p.size for p in self.projects)
