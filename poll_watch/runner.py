"""
Headless runner for Poll Watch.

Runs the watcher in the foreground, logging every change batch and
every read error, until SIGINT/SIGTERM:

    python -m poll_watch                     Watch the files in the config
    python -m poll_watch a.txt b.txt         Also watch a.txt and b.txt
    python -m poll_watch --config my.json    Use another config file
"""

from __future__ import annotations

import logging
import logging.handlers
import signal
import sys
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TypeVar

from poll_watch import __app_name__, __version__
from poll_watch.channel import Channel
from poll_watch.config import Config, get_log_path
from poll_watch.errors import InvalidFileError, ScanError
from poll_watch.files import Event, WatchedFile
from poll_watch.watcher import Watcher

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(cfg: Config, log_path: Path | None = None) -> None:
    """Configure rotating file log and stderr handler."""
    log_path = log_path or get_log_path()
    level = getattr(logging, cfg.log_level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    fmt = logging.Formatter(_LOG_FORMAT)

    # Rotating file handler
    max_bytes = cfg.max_log_size_mb * 1024 * 1024
    fh = logging.handlers.RotatingFileHandler(
        str(log_path),
        maxBytes=max_bytes,
        backupCount=cfg.log_backup_count,
        encoding="utf-8",
    )
    fh.setLevel(level)
    fh.setFormatter(fmt)
    root_logger.addHandler(fh)

    sh = logging.StreamHandler(sys.stderr)
    sh.setLevel(level)
    sh.setFormatter(fmt)
    root_logger.addHandler(sh)


def log_event(event: Event) -> None:
    for f in event:
        if f.tag:
            logger.info("Changed: %s [%s]", f.path, f.tag)
        else:
            logger.info("Changed: %s", f.path)


def log_error(err: ScanError) -> None:
    logger.warning("Scan error: %s", err)


def _drain(channel: Channel[T], callback: Callable[[T], None]) -> threading.Thread:
    """Consume *channel* on a daemon thread until it is closed."""

    def _consume() -> None:
        for item in channel:
            try:
                callback(item)
            except Exception:
                logger.exception("Error in %s callback", channel.name)

    thread = threading.Thread(
        target=_consume, daemon=True, name=f"Drain-{channel.name}"
    )
    thread.start()
    return thread


def run(
    watcher: Watcher,
    stop: threading.Event,
    on_event: Callable[[Event], None] = log_event,
    on_error: Callable[[ScanError], None] = log_error,
) -> None:
    """Run *watcher* until *stop* is set, then shut it down."""
    events, errors = watcher.start()
    consumers = [_drain(events, on_event), _drain(errors, on_error)]
    try:
        while not stop.wait(timeout=1):
            pass
    finally:
        watcher.stop()
        for thread in consumers:
            thread.join(timeout=5)


def _show_help() -> None:
    print(f"{__app_name__} {__version__}")
    print()
    print("Usage:")
    print("  python -m poll_watch [--config PATH] [FILE ...]")
    print()
    print("Watches the files listed in the config plus any FILE given, and")
    print("logs every change until interrupted (Ctrl-C).")


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``poll-watch`` command.  Returns an exit code."""
    args = list(sys.argv[1:] if argv is None else argv)
    if any(a in ("-h", "--help") for a in args):
        _show_help()
        return 0

    config_path: Path | None = None
    if "--config" in args:
        idx = args.index("--config")
        if idx + 1 >= len(args):
            print("ERROR: --config requires a path.")
            return 2
        config_path = Path(args[idx + 1])
        del args[idx : idx + 2]

    cfg = Config(config_path)
    setup_logging(cfg)
    logger.info("%s %s starting.", __app_name__, __version__)

    watcher = cfg.build_watcher()
    for name in args:
        try:
            watcher.add_file(WatchedFile(name))
        except InvalidFileError as exc:
            logger.error("Skipping %s: %s", name, exc)

    if not watcher.files:
        logger.error("Nothing to watch: no readable files configured or given.")
        return 1

    stop = threading.Event()

    def _handler(sig, frame):
        stop.set()

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)

    print(f"{__app_name__} running (press Ctrl-C to stop)…")
    run(watcher, stop)
    print(f"{__app_name__} stopped.")
    return 0
