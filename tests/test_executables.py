"""Tests for preserving executables before cleaning."""

from __future__ import annotations

import os

import pytest

from conftest import write_file
from devsweep.core.executables import find_rust_executables, preserve_executables
from devsweep.models.project import BuildArtifacts, Project, ProjectType

pytestmark = pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")


def project_for(root, kind, build_dir):
    return Project(kind=kind, root_path=root, build_arts=BuildArtifacts(path=root / build_dir, size=1))


@pytest.fixture
def rust_project(tmp_path):
    root = tmp_path / "cli-tool"
    release = root / "target" / "release"
    write_file(release / "cli-tool", content=b"\x7fELF-release", mode=0o755)
    write_file(release / "libcli_tool.rlib", 100, mode=0o755)
    write_file(release / "cli-tool.d", 10, mode=0o755)
    write_file(release / "notes.txt", 10, mode=0o644)
    write_file(release / "deps" / "cli_tool-abc123", 10, mode=0o755)
    write_file(root / "target" / "debug" / "cli-tool", content=b"\x7fELF-debug", mode=0o755)
    return project_for(root, ProjectType.RUST, "target")


class TestRust:
    def test_find_skips_metadata_and_subdirs(self, rust_project):
        found = find_rust_executables(rust_project.build_arts.path / "release")
        assert [p.name for p in found] == ["cli-tool"]

    def test_copies_per_profile(self, rust_project):
        report = preserve_executables(rust_project)
        root = rust_project.root_path

        assert report.errors == []
        assert len(report.preserved) == 2
        assert (root / "bin" / "release" / "cli-tool").read_bytes() == b"\x7fELF-release"
        assert (root / "bin" / "debug" / "cli-tool").read_bytes() == b"\x7fELF-debug"
        assert not (root / "bin" / "release" / "libcli_tool.rlib").exists()

    def test_rerun_is_idempotent(self, rust_project):
        preserve_executables(rust_project)
        report = preserve_executables(rust_project)
        assert report.errors == []
        assert sorted(p.name for p in (rust_project.root_path / "bin" / "release").iterdir()) == ["cli-tool"]

    def test_copy_failure_is_reported(self, rust_project):
        # A file where the bin directory should be makes every copy fail.
        write_file(rust_project.root_path / "bin", 1)
        report = preserve_executables(rust_project)
        assert report.preserved == []
        assert len(report.errors) == 2

    def test_no_profiles(self, tmp_path):
        root = tmp_path / "fresh"
        (root / "target").mkdir(parents=True)
        report = preserve_executables(project_for(root, ProjectType.RUST, "target"))
        assert report.preserved == [] and report.errors == []
        assert not (root / "bin").exists()


class TestPython:
    def test_wheels_and_extensions(self, tmp_path):
        root = tmp_path / "ext"
        write_file(root / "dist" / "ext-1.0-cp312-linux_x86_64.whl", 100)
        write_file(root / "dist" / "ext-1.0.tar.gz", 100)
        write_file(root / "build" / "lib.linux" / "ext" / "_speedups.so", 50)
        write_file(root / "build" / "lib.linux" / "ext" / "__init__.py", 5)

        report = preserve_executables(project_for(root, ProjectType.PYTHON, "build"))

        assert report.errors == []
        assert sorted(p.name for p in (root / "bin").iterdir()) == [
            "_speedups.so",
            "ext-1.0-cp312-linux_x86_64.whl",
        ]


@pytest.mark.parametrize(("kind", "build_dir"), [(ProjectType.NODE, "node_modules"), (ProjectType.GO, "vendor")])
def test_dependency_dirs_are_noop(tmp_path, kind, build_dir):
    write_file(tmp_path / build_dir / "tool", 10, mode=0o755)
    report = preserve_executables(project_for(tmp_path, kind, build_dir))
    assert report.preserved == [] and report.errors == []
    assert not (tmp_path / "bin").exists()
