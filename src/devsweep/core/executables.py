"""Copy compiled executables out of build directories before removal."""

from __future__ import annotations

import logging
import os
import shutil
import stat
from dataclasses import dataclass, field
from pathlib import Path

from devsweep.models.clean_result import PreservedExecutable
from devsweep.models.project import Project, ProjectType

log = logging.getLogger(__name__)

RUST_PROFILES = ("release", "debug")

# Build metadata that carries the executable bit but is not a program.
RUST_EXCLUDED_EXTENSIONS = frozenset({".d", ".rmeta", ".rlib", ".a", ".so", ".dylib", ".dll", ".pdb"})

PYTHON_EXTENSION_SUFFIXES = frozenset({".so", ".pyd"})


@dataclass(slots=True)
class PreservationReport:
    """Copies made for one project, plus one message per file that failed."""

    preserved: list[PreservedExecutable] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def is_executable(path: Path, mode: int) -> bool:
    """POSIX: any execute bit set.  Windows: an ``.exe`` file."""
    if os.name == "nt":
        return path.suffix.lower() == ".exe"
    return bool(mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))


def preserve_executables(project: Project) -> PreservationReport:
    """Copy a project's build outputs to ``<root>/bin`` before cleaning.

    - Rust: executables from ``target/release`` and ``target/debug`` go to
      ``bin/<profile>/``.
    - Python: wheels from ``dist/`` and C extensions from ``build/`` go to
      ``bin/``.
    - Node and Go: nothing, their build directories hold dependencies.

    Existing destination files are overwritten.  A failed copy is reported
    and does not stop the remaining ones.
    """
    report = PreservationReport()
    match project.kind:
        case ProjectType.RUST:
            _preserve_rust(project, report)
        case ProjectType.PYTHON:
            _preserve_python(project, report)
        case ProjectType.NODE | ProjectType.GO:
            pass

    if report.preserved:
        log.info("Preserved %d executables from %s", len(report.preserved), project.root_path)
    return report


def find_rust_executables(profile_dir: Path) -> list[Path]:
    """Executables directly inside a cargo profile directory, sorted by name."""
    found: list[Path] = []
    try:
        entries = sorted(profile_dir.iterdir())
    except OSError as e:
        log.debug("Cannot read %s: %s", profile_dir, e)
        return found

    for path in entries:
        if path.suffix.lower() in RUST_EXCLUDED_EXTENSIONS:
            continue
        try:
            st = path.lstat()
        except OSError:
            continue
        if stat.S_ISREG(st.st_mode) and is_executable(path, st.st_mode):
            found.append(path)
    return found


def _preserve_rust(project: Project, report: PreservationReport) -> None:
    bin_dir = project.root_path / "bin"
    for profile in RUST_PROFILES:
        profile_dir = project.build_arts.path / profile
        if not profile_dir.is_dir():
            continue
        for exe in find_rust_executables(profile_dir):
            _copy(exe, bin_dir / profile, report)


def _preserve_python(project: Project, report: PreservationReport) -> None:
    bin_dir = project.root_path / "bin"

    dist_dir = project.root_path / "dist"
    if dist_dir.is_dir():
        try:
            wheels = sorted(p for p in dist_dir.iterdir() if p.suffix == ".whl" and p.is_file())
        except OSError as e:
            report.errors.append(f"Cannot read {dist_dir}: {e}")
            wheels = []
        for wheel in wheels:
            _copy(wheel, bin_dir, report)

    build_dir = project.root_path / "build"
    if build_dir.is_dir():
        for dirpath, _dirnames, filenames in os.walk(build_dir):
            for filename in sorted(filenames):
                path = Path(dirpath) / filename
                if path.suffix in PYTHON_EXTENSION_SUFFIXES and path.is_file():
                    _copy(path, bin_dir, report)


def _copy(source: Path, dest_dir: Path, report: PreservationReport) -> None:
    destination = dest_dir / source.name
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)
    except OSError as e:
        log.warning("Failed to copy %s to %s: %s", source, destination, e)
        report.errors.append(f"Failed to copy {source} to {destination}: {e}")
        return
    report.preserved.append(PreservedExecutable(source=source, destination=destination))
