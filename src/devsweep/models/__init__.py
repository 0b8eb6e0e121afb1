"""devsweep data models."""

from devsweep.models.project import BuildArtifacts, Project, ProjectType
from devsweep.models.scan_result import ScanResult
from devsweep.models.clean_result import (
    Cleaned,
    CleanOutcome,
    CleanResult,
    Failed,
    PreservedExecutable,
)

__all__ = [
    "BuildArtifacts",
    "CleanOutcome",
    "CleanResult",
    "Cleaned",
    "Failed",
    "PreservedExecutable",
    "Project",
    "ProjectType",
    "ScanResult",
]
