"""Project classification by marker files.

Each ecosystem has a detector that inspects a single directory and
returns a :class:`Detection` when the directory is the root of a project
with a cleanable build directory.  Detectors are evaluated in the fixed
order of :data:`DETECTORS` and the first match wins, so a directory that
holds both ``Cargo.toml``/``target`` and ``package.json``/``node_modules``
is always classified as Rust.
"""

from __future__ import annotations

import configparser
import json
import logging
import re
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from devsweep.models.project import ProjectType
from devsweep.utils import dir_size

log = logging.getLogger(__name__)

PYTHON_MARKER_FILES = (
    "requirements.txt",
    "setup.py",
    "pyproject.toml",
    "setup.cfg",
    "Pipfile",
    "Pipfile.lock",
    "poetry.lock",
    "uv.lock",
    "pdm.lock",
)

# Enumeration order breaks ties between equally sized directories.
PYTHON_CACHE_DIRS = (
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".ruff_cache",
    ".tox",
    ".nox",
    ".eggs",
    "venv",
    ".venv",
    "build",
    "dist",
)

_CARGO_NAME_RE = re.compile(r"""^name\s*=\s*["']([^"']+)["']""")
_SETUP_PY_NAME_RE = re.compile(r"""\bname\s*=\s*["']([^"']+)["']""")
_GO_MODULE_RE = re.compile(r"^module\s+(\S+)")


@dataclass(frozen=True, slots=True)
class Detection:
    """Outcome of a successful classification.

    ``build_dir`` is relative to the classified directory.  ``warnings``
    holds soft problems met while extracting the name (unreadable or
    malformed metadata); they never veto the detection.
    """

    kind: ProjectType
    build_dir: Path
    name: str | None = None
    warnings: tuple[str, ...] = ()


Detector = Callable[[Path], Detection | None]


def _read_text(path: Path, warnings: list[str]) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        warnings.append(f"Error reading {path}: {e}")
        return None


def detect_rust(directory: Path) -> Detection | None:
    """``Cargo.toml`` and ``target/`` → Rust project, build dir ``target``."""
    cargo_toml = directory / "Cargo.toml"
    if not (cargo_toml.is_file() and (directory / "target").is_dir()):
        return None

    warnings: list[str] = []
    name = None
    content = _read_text(cargo_toml, warnings)
    if content is not None:
        for line in content.splitlines():
            match = _CARGO_NAME_RE.match(line.strip())
            if match:
                name = match.group(1)
                break
    return Detection(ProjectType.RUST, Path("target"), name, tuple(warnings))


def detect_node(directory: Path) -> Detection | None:
    """``package.json`` and ``node_modules/`` → Node project."""
    package_json = directory / "package.json"
    if not (package_json.is_file() and (directory / "node_modules").is_dir()):
        return None

    warnings: list[str] = []
    name = None
    content = _read_text(package_json, warnings)
    if content is not None:
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            warnings.append(f"Error parsing {package_json}: {e}")
        else:
            if isinstance(data, dict) and isinstance(data.get("name"), str):
                name = data["name"]
    return Detection(ProjectType.NODE, Path("node_modules"), name, tuple(warnings))


def detect_python(directory: Path) -> Detection | None:
    """Any Python config/lock file plus a cache or venv directory.

    The largest present cache directory becomes the build directory.
    """
    if not any((directory / marker).is_file() for marker in PYTHON_MARKER_FILES):
        return None

    present = [name for name in PYTHON_CACHE_DIRS if (directory / name).is_dir()]
    if not present:
        return None

    # max() keeps the first of equal keys, i.e. enumeration order wins ties.
    largest = max(present, key=lambda name: dir_size(directory / name))

    warnings: list[str] = []
    name = _python_project_name(directory, warnings) or directory.name or None
    return Detection(ProjectType.PYTHON, Path(largest), name, tuple(warnings))


def _python_project_name(directory: Path, warnings: list[str]) -> str | None:
    """Try pyproject.toml, then setup.py, then setup.cfg."""
    pyproject = directory / "pyproject.toml"
    if pyproject.is_file():
        content = _read_text(pyproject, warnings)
        if content is not None:
            try:
                data = tomllib.loads(content)
            except tomllib.TOMLDecodeError as e:
                warnings.append(f"Error parsing {pyproject}: {e}")
            else:
                name = _table_name(data, ("project",), pyproject, warnings) or _table_name(
                    data, ("tool", "poetry"), pyproject, warnings
                )
                if name:
                    return name

    setup_py = directory / "setup.py"
    if setup_py.is_file():
        content = _read_text(setup_py, warnings)
        if content is not None:
            match = _SETUP_PY_NAME_RE.search(content)
            if match:
                return match.group(1)

    setup_cfg = directory / "setup.cfg"
    if setup_cfg.is_file():
        parser = configparser.ConfigParser(interpolation=None)
        try:
            parser.read(setup_cfg, encoding="utf-8")
        except (configparser.Error, OSError, UnicodeDecodeError) as e:
            warnings.append(f"Error parsing {setup_cfg}: {e}")
        else:
            name = parser.get("metadata", "name", fallback="").strip()
            if name:
                return name

    return None


def _table_name(data: dict, keys: tuple[str, ...], source: Path, warnings: list[str]) -> str | None:
    """Read ``name`` from the nested TOML table at *keys*, tolerating a wrong shape."""
    node = data
    for key in keys:
        if key not in node:
            return None
        node = node[key]
        if not isinstance(node, dict):
            warnings.append(f"Error parsing {source}: [{'.'.join(keys)}] is not a table")
            return None
    name = node.get("name")
    if name is None:
        return None
    if not isinstance(name, str) or not name:
        warnings.append(f"Error parsing {source}: {'.'.join(keys)}.name is not a string")
        return None
    return name


def detect_go(directory: Path) -> Detection | None:
    """``go.mod`` and ``vendor/`` → Go project, named after the module path tail."""
    go_mod = directory / "go.mod"
    if not (go_mod.is_file() and (directory / "vendor").is_dir()):
        return None

    warnings: list[str] = []
    name = None
    content = _read_text(go_mod, warnings)
    if content is not None:
        for line in content.splitlines():
            match = _GO_MODULE_RE.match(line.strip())
            if match:
                name = match.group(1).strip('"').rstrip("/").rsplit("/", 1)[-1] or None
                break
    return Detection(ProjectType.GO, Path("vendor"), name, tuple(warnings))


DETECTORS: tuple[tuple[ProjectType, Detector], ...] = (
    (ProjectType.RUST, detect_rust),
    (ProjectType.NODE, detect_node),
    (ProjectType.PYTHON, detect_python),
    (ProjectType.GO, detect_go),
)


def classify(
    directory: Path,
    kinds: Iterable[ProjectType] | None = None,
    errors: list[str] | None = None,
) -> Detection | None:
    """Classify *directory* as the root of a project, or return None.

    Args:
        directory: Candidate project root.
        kinds: Ecosystems to consider.  None means all of them.
        errors: If given, receives one message per directory that could
            not be inspected.
    """
    allowed = set(kinds) if kinds is not None else None
    for kind, detector in DETECTORS:
        if allowed is not None and kind not in allowed:
            continue
        try:
            detection = detector(directory)
        except OSError as e:
            log.debug("Cannot classify %s as %s: %s", directory, kind.value, e)
            if errors is not None:
                errors.append(f"Cannot read {directory} while checking for a {kind.label} project: {e}")
            continue
        if detection is not None:
            return detection
    return None
