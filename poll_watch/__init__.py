"""Poll Watch: polling-based change detection for individual files.

Keeps a registry of files, re-reads each one on a fixed interval through a
pluggable reader (raw bytes or a content digest) and hands batched change
notifications to the caller.
"""

from poll_watch.errors import (
    ChannelClosed,
    InvalidDurationError,
    InvalidFileError,
    ScanError,
    WatchError,
)
from poll_watch.files import Event, WatchedFile
from poll_watch.readers import md5_checksum, read_file, sha256_checksum
from poll_watch.watcher import DEFAULT_POLL_INTERVAL, Watcher, WatcherState

__version__ = "1.0.0"
__app_name__ = "Poll Watch"

__all__ = [
    "DEFAULT_POLL_INTERVAL",
    "ChannelClosed",
    "Event",
    "InvalidDurationError",
    "InvalidFileError",
    "ScanError",
    "WatchError",
    "WatchedFile",
    "Watcher",
    "WatcherState",
    "md5_checksum",
    "read_file",
    "sha256_checksum",
]
