"""Configuration management for Poll Watch.

Stores and retrieves settings from a JSON config file in the
platform-appropriate application data directory.
"""

from __future__ import annotations

import json
import logging
import math
import threading
from pathlib import Path
from typing import Any

from poll_watch.errors import InvalidFileError
from poll_watch.files import WatchedFile
from poll_watch.platform_utils import (
    get_config_dir as _platform_config_dir,
)
from poll_watch.platform_utils import (
    get_log_path as _platform_log_path,
)
from poll_watch.readers import READERS, get_reader
from poll_watch.watcher import DEFAULT_POLL_INTERVAL, Watcher

logger = logging.getLogger(__name__)

DEFAULT_READER = "raw"

DEFAULT_CONFIG: dict[str, Any] = {
    "poll_interval_seconds": DEFAULT_POLL_INTERVAL,
    # Each entry: {"path": "...", "reader": "raw" | "md5" | "sha256", "tag": "..."}
    "files": [],
    "log_level": "INFO",
    # ---- log rotation ----
    "max_log_size_mb": 10,  # rotate log when it exceeds this size
    "log_backup_count": 3,  # number of rotated log files to keep
}


def get_config_dir() -> Path:
    """Return the platform-appropriate application config directory."""
    return _platform_config_dir()


def get_config_path() -> Path:
    """Return the path to the configuration file."""
    return get_config_dir() / "config.json"


def get_log_path() -> Path:
    """Return the path to the log file."""
    return _platform_log_path()


def _normalise_entry(entry: Any) -> dict[str, str] | None:
    """Coerce a stored file entry into ``{"path", "reader", "tag"}``."""
    if isinstance(entry, str):
        entry = {"path": entry}
    if not isinstance(entry, dict) or not str(entry.get("path", "")).strip():
        return None
    reader = str(entry.get("reader") or DEFAULT_READER).lower()
    if reader not in READERS:
        logger.warning(
            "Unknown reader %r for %s; using %s.", reader, entry["path"], DEFAULT_READER
        )
        reader = DEFAULT_READER
    return {
        "path": str(entry["path"]).strip(),
        "reader": reader,
        "tag": str(entry.get("tag") or ""),
    }


class Config:
    """Configuration manager backed by a JSON file."""

    def __init__(self, path: Path | None = None):
        """Load config from *path*, falling back to the platform default."""
        self._path = path or get_config_path()
        self._data: dict[str, Any] = dict(DEFAULT_CONFIG)
        self.load()

    @property
    def path(self) -> Path:
        return self._path

    # ---- persistence ----

    def load(self) -> None:
        """Load configuration from disk, applying defaults for missing keys."""
        if self._path.exists():
            try:
                with open(self._path, encoding="utf-8") as fh:
                    stored = json.load(fh)
                if not isinstance(stored, dict):
                    raise ValueError(
                        f"expected a JSON object, got {type(stored).__name__}"
                    )
                # Merge stored values over defaults so new keys get defaults
                self._data = {**DEFAULT_CONFIG, **stored}
                logger.info("Configuration loaded from %s", self._path)
            except (ValueError, OSError) as exc:
                logger.warning("Could not read config (%s); using defaults.", exc)
                self._data = dict(DEFAULT_CONFIG)
        else:
            self._data = dict(DEFAULT_CONFIG)
            self.save()
            logger.info("Created default configuration at %s", self._path)

    def save(self) -> None:
        """Persist the current configuration to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "w", encoding="utf-8") as fh:
                json.dump(self._data, fh, indent=2)
            logger.info("Configuration saved.")
        except OSError as exc:
            logger.error("Failed to save configuration: %s", exc)

    # ---- accessors ----

    @property
    def poll_interval(self) -> float:
        """Return the poll interval in seconds."""
        try:
            value = float(self._data["poll_interval_seconds"])
        except (TypeError, ValueError):
            return DEFAULT_POLL_INTERVAL
        if not math.isfinite(value) or not 0 < value <= threading.TIMEOUT_MAX:
            return DEFAULT_POLL_INTERVAL
        return value

    @poll_interval.setter
    def poll_interval(self, value: float) -> None:
        """Set the poll interval (minimum 0.01 s)."""
        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"Poll interval must be finite, got {value!r}")
        self._data["poll_interval_seconds"] = max(0.01, value)

    @property
    def files(self) -> list[dict[str, str]]:
        """Return the configured file entries, normalised."""
        entries = [_normalise_entry(e) for e in self._data.get("files", [])]
        return [e for e in entries if e is not None]

    @files.setter
    def files(self, value: list[dict[str, str]]) -> None:
        entries = [_normalise_entry(e) for e in value]
        self._data["files"] = [e for e in entries if e is not None]

    def add_file(self, path: str, reader: str = DEFAULT_READER, tag: str = "") -> None:
        """Append a file entry."""
        self.files = [*self.files, {"path": path, "reader": reader, "tag": tag}]

    @property
    def log_level(self) -> str:
        """Return the current logging level name."""
        return self._data.get("log_level", "INFO")

    @log_level.setter
    def log_level(self, value: str) -> None:
        """Set the logging level name."""
        self._data["log_level"] = value

    # ---- log rotation ----

    @property
    def max_log_size_mb(self) -> int:
        """Return the maximum log file size in MB before rotation."""
        return int(self._data.get("max_log_size_mb", 10))

    @max_log_size_mb.setter
    def max_log_size_mb(self, value: int) -> None:
        """Set the maximum log file size in MB (minimum 1)."""
        self._data["max_log_size_mb"] = max(1, int(value))

    @property
    def log_backup_count(self) -> int:
        """Return the number of rotated log backups to keep."""
        return int(self._data.get("log_backup_count", 3))

    @log_backup_count.setter
    def log_backup_count(self, value: int) -> None:
        """Set the number of rotated log backups to keep."""
        self._data["log_backup_count"] = max(0, int(value))

    # ---- convenience ----

    def is_configured(self) -> bool:
        """Return True when at least one file is configured."""
        return bool(self.files)

    def build_watcher(self) -> Watcher:
        """Create an idle :class:`Watcher` with every configured file registered.

        Entries whose file cannot be registered are logged and skipped.
        """
        watcher = Watcher(poll_interval=self.poll_interval)
        for entry in self.files:
            try:
                watched = WatchedFile(
                    entry["path"], reader=get_reader(entry["reader"]), tag=entry["tag"]
                )
            except InvalidFileError as exc:
                logger.error("Skipping %s: %s", entry["path"], exc)
                continue
            watcher.add_file(watched)
        return watcher
