"""JSON-backed configuration and resolved run options.

Values are layered: an explicit CLI flag wins over the configuration
file, which wins over the built-in default.  The file lives at
``$XDG_CONFIG_HOME/devsweep/config.json``::

    {
      "project_type": "rust",
      "dir": "~/Projects",
      "filtering": {"keep_size": "50MB", "keep_days": 7, "sort": "size", "reverse": false},
      "scanning": {"threads": 4, "verbose": true, "skip": ["archive"]},
      "execution": {"keep_executables": true, "use_trash": true}
    }
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from devsweep.errors import ConfigError
from devsweep.models.project import ProjectType
from devsweep.utils import parse_size, xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "devsweep"
_SETTINGS_FILE = "config.json"

PROJECT_TYPE_CHOICES = ("all", *(kind.value for kind in ProjectType))
SORT_CHOICES = ("size", "age", "name", "type")


@dataclass(slots=True)
class ScanOptions:
    """How the directory tree is walked."""

    threads: int = 0
    verbose: bool = False
    skip: list[str] = field(default_factory=list)


@dataclass(slots=True)
class FilterOptions:
    """Which scanned projects are kept, and in what order."""

    keep_size: str = "0"
    keep_days: int = 0
    sort: str = "size"
    reverse: bool = False


@dataclass(slots=True)
class ExecutionOptions:
    """How the selected projects are cleaned."""

    dry_run: bool = False
    interactive: bool = False
    keep_executables: bool = False
    use_trash: bool = True


class Settings:
    """Read-only settings backed by a JSON file.

    Uses dot-notation keys for nested access:
        settings.get("filtering.keep_size")  # reads data["filtering"]["keep_size"]
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or default_config_path()
        self._data: dict[str, Any] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def _load(self) -> None:
        """Load settings from disk; a missing file means no settings."""
        if not self._path.exists():
            log.debug("No config file at %s", self._path)
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            raise ConfigError(f"Failed to load config file at {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file at {self._path} must contain a JSON object")
        self._data = data
        log.debug("Loaded config from %s", self._path)


def default_config_path() -> Path:
    return xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE


def expand_tilde(path: str | Path) -> Path:
    """Expand a leading ``~`` to the user's home directory."""
    return Path(os.path.expanduser(str(path)))


def _layer(cli_value: Any, settings: Settings, key: str, default: Any) -> Any:
    if cli_value is not None:
        return cli_value
    value = settings.get(key)
    return default if value is None else value


def _check_type(value: Any, expected: type | tuple[type, ...], key: str) -> Any:
    types = expected if isinstance(expected, tuple) else (expected,)
    # bool is an int subclass; reject it where a number is expected.
    if not isinstance(value, types) or (isinstance(value, bool) and bool not in types):
        raise ConfigError(f"Config value '{key}' has the wrong type: {value!r}")
    return value


def resolve_dir(cli_dir: str | None, settings: Settings) -> Path:
    """Directory to scan: CLI argument, then config ``dir``, then cwd."""
    return expand_tilde(_check_type(_layer(cli_dir, settings, "dir", "."), str, "dir"))


def resolve_project_type(cli_type: str | None, settings: Settings) -> list[ProjectType] | None:
    """Ecosystems to scan; None means all."""
    value = _check_type(_layer(cli_type, settings, "project_type", "all"), str, "project_type").lower()
    if value not in PROJECT_TYPE_CHOICES:
        raise ConfigError(f"Unknown project type {value!r}; expected one of {', '.join(PROJECT_TYPE_CHOICES)}")
    return None if value == "all" else [ProjectType(value)]


def resolve_scan_options(
    settings: Settings,
    *,
    threads: int | None = None,
    verbose: bool | None = None,
    skip: list[str] | None = None,
) -> ScanOptions:
    skip_value = skip if skip else settings.get("scanning.skip", [])
    skip_value = _check_type(skip_value, list, "scanning.skip")
    return ScanOptions(
        threads=_check_type(_layer(threads, settings, "scanning.threads", 0), int, "scanning.threads"),
        verbose=_check_type(_layer(verbose, settings, "scanning.verbose", False), bool, "scanning.verbose"),
        skip=[str(s) for s in skip_value],
    )


def resolve_filter_options(
    settings: Settings,
    *,
    keep_size: str | None = None,
    keep_days: int | None = None,
    sort: str | None = None,
    reverse: bool | None = None,
) -> FilterOptions:
    """Filtering and ordering options.

    Raises:
        ConfigError: If a configured value has the wrong type or is unknown.
        SizeParseError: If the size threshold is not a valid size.
    """
    size = _layer(keep_size, settings, "filtering.keep_size", "0")
    sort_value = _check_type(_layer(sort, settings, "filtering.sort", "size"), str, "filtering.sort")
    if sort_value not in SORT_CHOICES:
        raise ConfigError(f"Unknown sort key {sort_value!r}; expected one of {', '.join(SORT_CHOICES)}")
    days = _check_type(_layer(keep_days, settings, "filtering.keep_days", 0), int, "filtering.keep_days")
    if days < 0:
        raise ConfigError(f"filtering.keep_days cannot be negative: {days}")
    keep_size_text = str(_check_type(size, (str, int), "filtering.keep_size"))
    # Fail on a bad threshold before any filesystem work.
    parse_size(keep_size_text)
    return FilterOptions(
        keep_size=keep_size_text,
        keep_days=days,
        sort=sort_value,
        reverse=_check_type(_layer(reverse, settings, "filtering.reverse", False), bool, "filtering.reverse"),
    )


def resolve_execution_options(
    settings: Settings,
    *,
    dry_run: bool | None = None,
    interactive: bool | None = None,
    keep_executables: bool | None = None,
    use_trash: bool | None = None,
) -> ExecutionOptions:
    def flag(value: bool | None, key: str, default: bool) -> bool:
        return _check_type(_layer(value, settings, f"execution.{key}", default), bool, f"execution.{key}")

    return ExecutionOptions(
        dry_run=flag(dry_run, "dry_run", False),
        interactive=flag(interactive, "interactive", False),
        keep_executables=flag(keep_executables, "keep_executables", False),
        use_trash=flag(use_trash, "use_trash", True),
    )
