"""Project filtering by size and age, and ordering for display."""

from __future__ import annotations

import enum
import logging
import os
import time
from typing import Iterable

from devsweep.models.project import Project
from devsweep.utils import parse_size

log = logging.getLogger(__name__)

_SECONDS_PER_DAY = 86400


class SortKey(enum.Enum):
    SIZE = "size"
    AGE = "age"
    NAME = "name"
    TYPE = "type"


def build_mtime(project: Project) -> float | None:
    """Last-modified time of the project's build directory, or None if unreadable."""
    try:
        return os.stat(project.build_arts.path).st_mtime
    except OSError as e:
        log.debug("Cannot read modification time of %s: %s", project.build_arts.path, e)
        return None


def meets_size_criteria(project: Project, min_size: int) -> bool:
    return project.size >= min_size


def meets_time_criteria(project: Project, keep_days: int, now: float | None = None) -> bool:
    """True if the build directory was last modified at least *keep_days* ago.

    A zero *keep_days* disables the check.  Projects whose modification
    time cannot be read are kept.
    """
    if keep_days == 0:
        return True

    mtime = build_mtime(project)
    if mtime is None:
        return True

    cutoff = (time.time() if now is None else now) - keep_days * _SECONDS_PER_DAY
    return mtime <= cutoff


def filter_projects(
    projects: Iterable[Project],
    keep_size: str | int = "0",
    keep_days: int = 0,
    now: float | None = None,
) -> list[Project]:
    """Drop projects smaller than *keep_size* or built within the last *keep_days* days.

    Raises:
        SizeParseError: If *keep_size* is not a valid size string.
    """
    min_size = parse_size(keep_size)
    kept = [
        p for p in projects
        if meets_size_criteria(p, min_size) and meets_time_criteria(p, keep_days, now)
    ]
    log.debug("Filter kept %d projects (min size %d bytes, min age %d days)", len(kept), min_size, keep_days)
    return kept


def sort_projects(
    projects: Iterable[Project],
    key: SortKey | str = SortKey.SIZE,
    reverse: bool = False,
) -> list[Project]:
    """Return *projects* in display order.

    SIZE puts the largest first, AGE the oldest build first (unreadable
    times last), NAME sorts case-insensitively by display name and TYPE
    groups by ecosystem priority with the largest first inside a group.
    The sort is stable; *reverse* flips the final order.
    """
    key = SortKey(key)
    items = list(projects)

    match key:
        case SortKey.SIZE:
            items.sort(key=lambda p: -p.size)
        case SortKey.NAME:
            items.sort(key=lambda p: p.display_name.casefold())
        case SortKey.TYPE:
            items.sort(key=lambda p: (p.kind.priority, -p.size))
        case SortKey.AGE:
            mtimes = {id(p): build_mtime(p) for p in items}
            items.sort(key=lambda p: (mtimes[id(p)] is None, mtimes[id(p)] or 0.0))

    if reverse:
        items.reverse()
    return items
