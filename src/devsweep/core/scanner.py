"""Directory scanning: pruned walk, classification and parallel sizing."""

from __future__ import annotations

import enum
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterable

from devsweep.config import ScanOptions
from devsweep.core.classifier import Detection, classify
from devsweep.core.pruner import should_descend
from devsweep.errors import ScanError
from devsweep.models.project import BuildArtifacts, Project, ProjectType
from devsweep.models.scan_result import ScanResult
from devsweep.utils import dir_size, worker_count

log = logging.getLogger(__name__)


class ScanPhase(enum.Enum):
    IDLE = "idle"
    WALKING = "walking"
    SIZING = "sizing"
    DONE = "done"


ScanProgressCallback = Callable[[ScanPhase, str], None]  # (phase, status_message)


class Scanner:
    """Finds development projects below a root directory.

    A scan walks the tree top-down, pruning excluded subtrees before they
    are entered, classifies every kept directory on a thread pool, then
    sizes each detected build directory on the same pool.  Projects whose
    build directory turns out to be empty are dropped.
    """

    def __init__(self, options: ScanOptions | None = None, kinds: Iterable[ProjectType] | None = None) -> None:
        self.options = options or ScanOptions()
        self.kinds = list(kinds) if kinds is not None else None
        self.phase = ScanPhase.IDLE

    def scan(self, root: Path | str, on_progress: ScanProgressCallback | None = None) -> ScanResult:
        """Scan *root* for projects with non-empty build directories.

        Raises:
            ScanError: If *root* does not exist or cannot be read.
        """
        root = Path(root)
        self._check_root(root)
        diagnostics: list[str] = []

        self._enter(ScanPhase.WALKING, f"Scanning {root}", on_progress)
        directories = self._walk(root, diagnostics)
        log.info("Walked %d directories below %s", len(directories), root)

        with ThreadPoolExecutor(max_workers=worker_count(self.options.threads)) as executor:
            detected: list[Project] = []
            for directory, (detection, errors) in zip(directories, executor.map(self._classify, directories)):
                diagnostics.extend(errors)
                if detection is None:
                    continue
                diagnostics.extend(detection.warnings)
                detected.append(
                    Project(
                        kind=detection.kind,
                        root_path=directory,
                        build_arts=BuildArtifacts(path=directory / detection.build_dir),
                        name=detection.name,
                    )
                )

            self._enter(ScanPhase.SIZING, f"Measuring {len(detected)} build directories", on_progress)
            sized = list(executor.map(_with_measured_size, detected))

        projects = [p for p in sized if p.size > 0]
        log.info("Found %d projects (%d with empty build directories dropped)",
                 len(projects), len(sized) - len(projects))
        for message in diagnostics:
            log.debug("%s", message)

        self._enter(ScanPhase.DONE, f"Found {len(projects)} projects", on_progress)
        return ScanResult(root=root, projects=projects, diagnostics=diagnostics)

    def _enter(self, phase: ScanPhase, message: str, on_progress: ScanProgressCallback | None) -> None:
        self.phase = phase
        if on_progress:
            on_progress(phase, message)

    @staticmethod
    def _check_root(root: Path) -> None:
        if not root.exists():
            raise ScanError(f"Directory does not exist: {root}")
        if not root.is_dir():
            raise ScanError(f"Not a directory: {root}")
        try:
            with os.scandir(root):
                pass
        except OSError as e:
            raise ScanError(f"Cannot read directory {root}: {e}") from e

    def _walk(self, root: Path, diagnostics: list[str]) -> list[Path]:
        """Return *root* and every directory below it that survives pruning."""
        kept: list[Path] = []

        def on_error(error: OSError) -> None:
            diagnostics.append(f"Cannot read {error.filename}: {error.strerror}")

        for dirpath, dirnames, _filenames in os.walk(root, onerror=on_error):
            current = Path(dirpath)
            kept.append(current)
            # Prune in place so excluded subtrees are never entered.
            dirnames[:] = [
                name for name in dirnames
                if should_descend(current / name, self.options.skip)
            ]
        return kept

    def _classify(self, directory: Path) -> tuple[Detection | None, list[str]]:
        errors: list[str] = []
        return classify(directory, self.kinds, errors), errors


def _with_measured_size(project: Project) -> Project:
    return project.with_size(dir_size(project.build_arts.path))
