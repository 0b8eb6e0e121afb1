"""Shared test fixtures."""

from __future__ import annotations

import os
from pathlib import Path

import pytest


def write_file(path: Path, size: int = 0, content: bytes | None = None, mode: int | None = None) -> Path:
    """Create *path* (and its parents) with *size* bytes or the given content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content if content is not None else b"x" * size)
    if mode is not None:
        os.chmod(path, mode)
    return path


@pytest.fixture(autouse=True)
def isolate_xdg(tmp_path, monkeypatch):
    """Redirect config and trash directories into the test's temp dir."""
    config_home = tmp_path / "xdg_config"
    data_home = tmp_path / "xdg_data"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setenv("XDG_DATA_HOME", str(data_home))
    return config_home, data_home


@pytest.fixture
def workspace(tmp_path):
    """A directory holding one Rust project (500 KB) and one Node project (300 KB)."""
    root = tmp_path / "workspace"

    rust = root / "rust-app"
    write_file(rust / "Cargo.toml", content=b'[package]\nname = "rust-app"\nversion = "0.1.0"\n')
    write_file(rust / "src" / "main.rs", content=b"fn main() {}\n")
    write_file(rust / "target" / "debug" / "rust-app", 300_000, mode=0o755)
    write_file(rust / "target" / "debug" / "deps" / "librust_app.rlib", 200_000)

    node = root / "web-ui"
    write_file(node / "package.json", content=b'{"name": "web-ui", "version": "1.0.0"}')
    write_file(node / "node_modules" / "left-pad" / "index.js", 100_000)
    write_file(node / "node_modules" / "react" / "index.js", 200_000)

    return root
