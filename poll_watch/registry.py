"""Registry of watched files."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from poll_watch.files import WatchedFile

logger = logging.getLogger(__name__)

FileFilter = Callable[[WatchedFile], bool]


class FileRegistry:
    """Thread-safe, unordered collection of :class:`WatchedFile` objects.

    Membership is by identity: the same path may be registered more than
    once as independent watches.
    """

    def __init__(self) -> None:
        self._files: list[WatchedFile] = []
        self._lock = threading.Lock()

    def add(self, file: WatchedFile) -> None:
        with self._lock:
            self._files.append(file)
        logger.debug("Registered %s", file.path)

    def remove(self, file: WatchedFile) -> None:
        """Remove *file* if present; unknown files are ignored."""
        with self._lock:
            for idx, f in enumerate(self._files):
                if f is file:
                    del self._files[idx]
                    logger.debug("Unregistered %s", file.path)
                    return

    def find(self, predicate: FileFilter) -> list[WatchedFile]:
        """Return every registered file for which *predicate* is true."""
        return [f for f in self.snapshot() if predicate(f)]

    def snapshot(self) -> list[WatchedFile]:
        """Return a copy of the current membership."""
        with self._lock:
            return list(self._files)

    def __contains__(self, file: object) -> bool:
        with self._lock:
            return any(f is file for f in self._files)

    def __len__(self) -> int:
        with self._lock:
            return len(self._files)
