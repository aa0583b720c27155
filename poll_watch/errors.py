"""Exception types raised or delivered by Poll Watch."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from poll_watch.files import WatchedFile


class WatchError(Exception):
    """Base class for all Poll Watch errors."""


class InvalidFileError(WatchError):
    """A file could not be registered because it is missing or unreadable."""

    def __init__(self, path: str | Path, reason: str = "invalid file"):
        super().__init__(f"{reason}: {path}")
        self.path = Path(path)


class InvalidDurationError(WatchError, ValueError):
    """The poll interval is zero or negative."""

    def __init__(self, value: object):
        super().__init__(f"invalid duration: {value!r}")
        self.value = value


class ScanError(WatchError):
    """A watched file could not be opened or read during a scan.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, file: WatchedFile, cause: BaseException):
        super().__init__(f"failed to scan {file.path}: {cause}")
        self.file = file
        self.__cause__ = cause


class ChannelClosed(WatchError):
    """The delivery channel was closed."""
