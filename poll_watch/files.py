"""Watched-file descriptors and the change events that carry them."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from poll_watch.errors import InvalidFileError
from poll_watch.readers import Reader, read_file

logger = logging.getLogger(__name__)


class WatchedFile:
    """A single file under watch.

    The file is read once at construction so the stored snapshot already
    matches what is on disk; the first scan after registration therefore
    reports nothing unless the file really changed.

    Parameters
    ----------
    path : str or Path
        File to watch.  Kept as given (relative paths are not resolved).
    reader : callable, optional
        Turns an open binary handle into a snapshot.  Defaults to
        :func:`poll_watch.readers.read_file`.
    tag : str
        Free-form caller label.  Not unique, never inspected.
    """

    def __init__(
        self,
        path: str | Path,
        reader: Reader | None = None,
        tag: str = "",
    ):
        self._path = Path(path)
        try:
            self._path.stat()
        except OSError as exc:
            raise InvalidFileError(self._path) from exc

        self._reader: Reader = reader or read_file
        self._tag = tag
        try:
            self._snapshot = self.read_snapshot()
        except OSError as exc:
            raise InvalidFileError(self._path, "unreadable file") from exc
        logger.debug(
            "Created watch for %s (%d byte snapshot)", self._path, len(self._snapshot)
        )

    def __repr__(self) -> str:
        return f"WatchedFile({str(self._path)!r}, tag={self._tag!r})"

    @property
    def path(self) -> Path:
        return self._path

    @property
    def reader(self) -> Reader:
        return self._reader

    @property
    def snapshot(self) -> bytes:
        """Return the most recently observed snapshot."""
        return self._snapshot

    # ---- tag ----

    @property
    def tag(self) -> str:
        return self._tag

    @tag.setter
    def tag(self, value: str) -> None:
        self._tag = value

    def set_tag(self, tag: str) -> None:
        self._tag = tag

    def get_tag(self) -> str:
        return self._tag

    # ---- scanning ----

    def read_snapshot(self) -> bytes:
        """Open the file and run the reader over it.

        Errors from ``open`` or the reader propagate unchanged.
        """
        with open(self._path, "rb") as fh:
            return self._reader(fh)

    def update_snapshot(self, data: bytes) -> None:
        """Replace the stored snapshot.  Only the scanner calls this."""
        self._snapshot = data


@dataclass(frozen=True)
class Event:
    """Files whose snapshot changed during one scan pass."""

    files: tuple[WatchedFile, ...]

    def __post_init__(self) -> None:
        if not self.files:
            raise ValueError("An Event must contain at least one file")

    def __len__(self) -> int:
        return len(self.files)

    def __iter__(self) -> Iterator[WatchedFile]:
        return iter(self.files)

    @property
    def paths(self) -> list[Path]:
        return [f.path for f in self.files]
