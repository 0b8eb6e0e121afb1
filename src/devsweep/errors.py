"""Exceptions raised by devsweep."""

from __future__ import annotations


class DevSweepError(Exception):
    """Base class for all devsweep errors."""


class ScanError(DevSweepError):
    """Raised when the scan root cannot be read."""


class SizeParseError(DevSweepError, ValueError):
    """Raised when a size threshold string is not understood."""


class TrashError(DevSweepError):
    """Raised when a path cannot be moved to the trash."""


class ConfigError(DevSweepError):
    """Raised when the configuration file exists but is malformed."""
