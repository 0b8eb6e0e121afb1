"""Shared utility functions."""

from __future__ import annotations

import logging
import os
import re
import subprocess
import time
from pathlib import Path

from devsweep.errors import SizeParseError

log = logging.getLogger(__name__)

_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d*)?|\.\d+)\s*([a-z]*)\s*$", re.IGNORECASE)

# Unit multipliers keyed by lower-cased suffix.
_SIZE_UNITS = {
    "": 1,
    "b": 1,
    "k": 1000,
    "kb": 1000,
    "m": 1000**2,
    "mb": 1000**2,
    "g": 1000**3,
    "gb": 1000**3,
    "t": 1000**4,
    "tb": 1000**4,
    "kib": 1024,
    "mib": 1024**2,
    "gib": 1024**3,
    "tib": 1024**4,
}


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def xdg_data_home() -> Path:
    """Return XDG_DATA_HOME, defaulting to ~/.local/share."""
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def worker_count(threads: int) -> int:
    """Resolve a configured pool size; 0 means one worker per CPU."""
    return threads if threads > 0 else (os.cpu_count() or 1)


def dir_size(path: Path | str) -> int:
    """Calculate the total size of all regular files below *path*.

    Uses GNU ``find`` (C-speed walk) when available, falling back to
    ``os.scandir`` on systems without it.  Unreadable entries, broken
    links and files that disappear mid-walk count as zero.  A missing
    path has size 0.
    """
    if not os.path.lexists(path):
        return 0
    try:
        return _dir_size_find(str(path))
    except Exception:
        return _dir_size_scandir(path)


def _dir_size_find(path_str: str) -> int:
    """Walk a directory tree using GNU find (pure C, no Python per-file overhead)."""
    proc = subprocess.run(
        ["find", path_str, "-type", "f", "-printf", "%s\n"],
        capture_output=True, timeout=60,
    )
    if proc.returncode != 0 and not proc.stdout:
        # Non-GNU find rejects -printf; permission errors still print sizes.
        if b"printf" in proc.stderr:
            raise RuntimeError(proc.stderr.decode(errors="replace"))
    total = 0
    for line in proc.stdout.split(b"\n"):
        if line:
            total += int(line)
    return total


def _dir_size_scandir(path: Path | str) -> int:
    """Walk a directory tree using os.scandir (pure Python fallback)."""
    try:
        if os.path.isfile(path) and not os.path.islink(path):
            return os.stat(path).st_size
    except OSError:
        return 0

    total = 0
    stack: list[Path | str] = [path]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                        elif entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                    except OSError:
                        pass
        except OSError:
            pass
    return total


def parse_size(size_str: str | int) -> int:
    """Parse a human-readable size such as ``"400KB"`` or ``"1.5GiB"`` into bytes.

    Decimal units (KB, MB, GB, TB) are powers of 1000, binary units
    (KiB, MiB, GiB, TiB) powers of 1024.  Plain numbers are bytes.

    Raises:
        SizeParseError: If the string is not a valid size.
    """
    if isinstance(size_str, int):
        if size_str < 0:
            raise SizeParseError(f"Size cannot be negative: {size_str}")
        return size_str

    match = _SIZE_RE.match(size_str.replace(",", "").replace("_", ""))
    if match is None:
        raise SizeParseError(f"Invalid size: {size_str!r}")

    number, unit = match.groups()
    multiplier = _SIZE_UNITS.get(unit.lower())
    if multiplier is None:
        raise SizeParseError(f"Unknown size unit {unit!r} in {size_str!r}")

    if "." in number:
        whole, _, frac = number.partition(".")
        if len(frac) > 9:
            raise SizeParseError(f"Too many decimal places: {size_str!r}")
        scale = 10 ** len(frac)
        return (int(whole or 0) * scale + int(frac or 0)) * multiplier // scale
    return int(number) * multiplier


def bytes_to_human(size_bytes: int) -> str:
    """Convert byte count to a human-readable string (decimal units)."""
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    if size_bytes == 0:
        return "0 B"

    units = ("B", "KB", "MB", "GB", "TB")
    value = float(size_bytes)
    for unit in units[:-1]:
        if abs(value) < 1000:
            return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1000
    return f"{value:.1f} {units[-1]}"


def format_relative_time(timestamp: float) -> str:
    """Format a POSIX timestamp as relative time ('2 hours ago')."""
    seconds = int(time.time() - timestamp)

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        m = seconds // 60
        return f"{m} minute{'s' if m != 1 else ''} ago"
    if seconds < 86400:
        h = seconds // 3600
        return f"{h} hour{'s' if h != 1 else ''} ago"
    d = seconds // 86400
    if d < 30:
        return f"{d} day{'s' if d != 1 else ''} ago"
    mo = d // 30
    if mo < 12:
        return f"{mo} month{'s' if mo != 1 else ''} ago"
    y = d // 365
    return f"{y} year{'s' if y != 1 else ''} ago"


def format_elapsed(seconds: float) -> str:
    """Format an elapsed time as a human-readable string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds) // 60
    secs = seconds - minutes * 60
    return f"{minutes}m {secs:.0f}s"
