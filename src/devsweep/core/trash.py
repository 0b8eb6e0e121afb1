"""Recoverable removal through the desktop trash.

On Linux and other XDG systems this follows the FreeDesktop.org trash
layout in ``$XDG_DATA_HOME/Trash``: the item is moved to ``files/`` and a
matching ``info/<name>.trashinfo`` records where it came from, so file
managers can restore it.  On macOS items are moved to ``~/.Trash``.
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
import sys
import threading
from datetime import datetime
from itertools import count
from pathlib import Path
from urllib.parse import quote

from devsweep.errors import TrashError
from devsweep.utils import xdg_data_home

log = logging.getLogger(__name__)

_macos_lock = threading.Lock()


def trash_dir() -> Path:
    """The user's home trash directory for the current platform."""
    if sys.platform == "darwin":
        return Path.home() / ".Trash"
    return xdg_data_home() / "Trash"


def move_to_trash(path: Path) -> Path:
    """Move *path* into the trash and return its new location.

    Raises:
        TrashError: If the platform has no supported trash or the move fails.
    """
    path = Path(os.path.abspath(path))
    if not os.path.lexists(path):
        raise TrashError(f"Cannot trash {path}: no such file or directory")

    if sys.platform == "darwin":
        return _move_to_macos_trash(path)
    if os.name == "nt":
        raise TrashError("Moving to the trash is not supported on this platform; use permanent deletion")
    return _move_to_xdg_trash(path)


def _candidate_names(name: str):
    yield name
    for n in count(2):
        yield f"{name}.{n}"


def _move_to_xdg_trash(path: Path) -> Path:
    trash = trash_dir()
    files_dir = trash / "files"
    info_dir = trash / "info"
    try:
        files_dir.mkdir(parents=True, exist_ok=True)
        info_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise TrashError(f"Cannot create trash directory {trash}: {e}") from e

    info_body = (
        "[Trash Info]\n"
        f"Path={quote(str(path), safe='/')}\n"
        f"DeletionDate={datetime.now().strftime('%Y-%m-%dT%H:%M:%S')}\n"
    )

    for candidate in _candidate_names(path.name):
        info_path = info_dir / f"{candidate}.trashinfo"
        # Creating the info file exclusively reserves the name across threads and processes.
        try:
            fd = os.open(info_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600)
        except FileExistsError:
            continue
        except OSError as e:
            raise TrashError(f"Cannot write {info_path}: {e}") from e

        destination = files_dir / candidate
        if os.path.lexists(destination):
            os.close(fd)
            info_path.unlink(missing_ok=True)
            continue

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(info_body)
            _move_into_trash(path, destination)
        except OSError as e:
            info_path.unlink(missing_ok=True)
            raise TrashError(f"Failed to move {path} to the trash: {e}") from e

        log.debug("Trashed %s as %s", path, destination)
        return destination

    raise AssertionError("unreachable")


def _move_into_trash(path: Path, destination: Path) -> None:
    """Rename *path* to *destination*, copying when they are on different devices.

    If the copy fails the partial copy is removed and the source is left
    alone.  Once the copy is complete the trashed item stays restorable
    even if removing the source then fails; that failure is raised as
    :class:`TrashError` so the info file is kept.
    """
    try:
        os.rename(path, destination)
        return
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise

    log.debug("%s is on another device, copying into the trash", path)
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.copytree(path, destination, symlinks=True)
        else:
            shutil.copy2(path, destination, follow_symlinks=False)
    except OSError:
        if destination.is_dir() and not destination.is_symlink():
            shutil.rmtree(destination, ignore_errors=True)
        elif os.path.lexists(destination):
            destination.unlink(missing_ok=True)
        raise

    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as e:
        raise TrashError(
            f"Copied {path} to the trash as {destination} but could not remove the original: {e}"
        ) from e


def _move_to_macos_trash(path: Path) -> Path:
    trash = trash_dir()
    with _macos_lock:
        destination = next(
            trash / candidate
            for candidate in _candidate_names(path.name)
            if not os.path.lexists(trash / candidate)
        )
        try:
            shutil.move(str(path), str(destination))
        except OSError as e:
            raise TrashError(f"Failed to move {path} to the trash: {e}") from e
    log.debug("Trashed %s as %s", path, destination)
    return destination
