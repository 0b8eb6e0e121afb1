"""Build directory removal with per-project failure isolation."""

from __future__ import annotations

import logging
import shutil
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Sequence

from devsweep.config import ExecutionOptions
from devsweep.core.executables import preserve_executables
from devsweep.core.trash import move_to_trash
from devsweep.errors import TrashError
from devsweep.models.clean_result import Cleaned, CleanOutcome, CleanResult, Failed
from devsweep.models.project import Project
from devsweep.utils import dir_size, worker_count

log = logging.getLogger(__name__)

CleanProgressCallback = Callable[[CleanOutcome], None]


def clean_project(project: Project, *, keep_executables: bool = False, use_trash: bool = True) -> CleanOutcome:
    """Clean one project's build directory.

    The directory is measured again first since it may have changed since
    the scan.  When *keep_executables* is set, executables are copied out
    before anything is removed; if any copy fails the directory is left
    in place and the project is reported as failed.
    """
    build_dir = project.build_arts.path
    if not build_dir.exists():
        log.debug("Build directory already gone: %s", build_dir)
        return Cleaned(project=project, bytes_freed=0)

    actual_size = dir_size(build_dir)

    preserved = ()
    if keep_executables:
        report = preserve_executables(project)
        if report.errors:
            return Failed(project=project, reason="; ".join(report.errors))
        preserved = tuple(report.preserved)

    try:
        if use_trash:
            move_to_trash(build_dir)
        else:
            shutil.rmtree(build_dir)
    except (OSError, TrashError) as e:
        return Failed(project=project, reason=str(e))

    log.info("Cleaned %s (%d bytes)", build_dir, actual_size)
    return Cleaned(project=project, bytes_freed=actual_size, preserved=preserved)


class Cleaner:
    """Cleans a batch of projects concurrently.

    Each project is handled on its own worker.  A failure is recorded
    against that project only and never stops the rest of the batch.
    """

    def __init__(self, options: ExecutionOptions | None = None, threads: int = 0) -> None:
        self.options = options or ExecutionOptions()
        self.threads = threads

    def clean(
        self,
        projects: Sequence[Project],
        on_progress: CleanProgressCallback | None = None,
    ) -> CleanResult:
        """Clean every project in *projects* and aggregate the outcomes."""
        result = CleanResult(estimated_bytes=sum(p.size for p in projects))
        if not projects:
            return result

        lock = threading.Lock()

        def _clean(project: Project) -> None:
            try:
                outcome = clean_project(
                    project,
                    keep_executables=self.options.keep_executables,
                    use_trash=self.options.use_trash,
                )
            except Exception as e:
                log.exception("Unexpected error while cleaning %s", project.build_arts.path)
                outcome = Failed(project=project, reason=f"Unexpected error: {e}")

            with lock:
                result.outcomes.append(outcome)
                if isinstance(outcome, Cleaned):
                    result.total_bytes_freed += outcome.bytes_freed
                    result.succeeded_count += 1
                    result.preserved.extend(outcome.preserved)
                else:
                    result.failed.append((project.build_arts.path, outcome.reason))
                    log.warning("Failed to clean %s: %s", project.build_arts.path, outcome.reason)

            if on_progress:
                on_progress(outcome)

        max_workers = min(worker_count(self.threads), len(projects))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(_clean, project) for project in projects]
            for future in futures:
                future.result()

        log.info(
            "Cleaned %d of %d projects, freed %d bytes",
            result.succeeded_count, len(projects), result.total_bytes_freed,
        )
        return result
