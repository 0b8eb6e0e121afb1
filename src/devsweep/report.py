"""Plain-dict views of scan and clean results for JSON output."""

from __future__ import annotations

from typing import Any, Sequence

from devsweep.models.clean_result import CleanResult
from devsweep.models.project import Project, ProjectType


def project_to_dict(project: Project) -> dict[str, Any]:
    return {
        "name": project.name,
        "type": project.kind.value,
        "root_path": str(project.root_path),
        "build_path": str(project.build_arts.path),
        "size_bytes": project.size,
    }


def summarize(projects: Sequence[Project]) -> dict[str, Any]:
    """Per-ecosystem counts and sizes plus the overall total."""
    per_type: dict[str, dict[str, int]] = {}
    for kind in ProjectType:
        members = [p for p in projects if p.kind is kind]
        if members:
            per_type[kind.value] = {"count": len(members), "size_bytes": sum(p.size for p in members)}
    return {
        "project_count": len(projects),
        "total_bytes": sum(p.size for p in projects),
        "per_type": per_type,
    }


def scan_report(projects: Sequence[Project], diagnostics: Sequence[str] = ()) -> dict[str, Any]:
    return {
        "projects": [project_to_dict(p) for p in projects],
        "summary": summarize(projects),
        "diagnostics": list(diagnostics),
    }


def clean_report(result: CleanResult) -> dict[str, Any]:
    return {
        "succeeded": result.succeeded_count,
        "failed": result.failed_count,
        "total_bytes_freed": result.total_bytes_freed,
        "estimated_bytes": result.estimated_bytes,
        "difference_bytes": result.difference,
        "failures": [{"path": str(path), "reason": reason} for path, reason in result.failed],
        "preserved_executables": [
            {"source": str(p.source), "destination": str(p.destination)} for p in result.preserved
        ],
    }
