"""Polling watcher for Poll Watch.

Re-reads every registered file on a fixed interval, compares the result
with the stored snapshot and delivers one batched :class:`Event` per tick
in which something changed.  Read failures are delivered separately on
the error channel and never stop the loop.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from datetime import timedelta
from enum import Enum

from watchdog.utils import BaseThread

from poll_watch.channel import Channel
from poll_watch.errors import ChannelClosed, InvalidDurationError, ScanError
from poll_watch.files import Event, WatchedFile
from poll_watch.registry import FileFilter, FileRegistry

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 10.0  # seconds

_JOIN_TIMEOUT = 5.0


class WatcherState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


class _ScanThread(BaseThread):
    """Background thread that drives one scan per tick.

    ``stopped_event`` doubles as the tick timer: waiting on it with the
    time left until the next tick returns early as soon as stop is
    requested.
    """

    def __init__(self, watcher: Watcher, interval: float):
        super().__init__()
        self.name = "PollWatcher"
        self._watcher = watcher
        self._interval = interval

    def run(self) -> None:
        next_tick = time.monotonic() + self._interval
        while self.should_keep_running():
            delay = max(0.0, next_tick - time.monotonic())
            if self.stopped_event.wait(timeout=delay):
                break

            started = time.monotonic()
            try:
                self._watcher._publish_changes()
            except ChannelClosed:
                break
            now = time.monotonic()
            logger.debug("Scan finished in %.3fs", now - started)

            # Fixed-rate ticks; ticks missed while scanning or blocked are dropped
            next_tick += self._interval
            if next_tick <= now:
                missed = int((now - next_tick) // self._interval) + 1
                next_tick += missed * self._interval
        logger.debug("Scan thread exiting.")


class Watcher:
    """Watches a registry of files by polling.

    Usage:
        watcher = Watcher(poll_interval=5)
        watcher.add_file(WatchedFile("settings.json", tag="config"))
        events, errors = watcher.start()
        for event in events:
            ...
        watcher.stop()

    Delivery is unbuffered: the scan thread blocks until the consumer takes
    each event or error, so both channels must be drained.  ``start`` and
    ``stop`` are one-shot; a stopped watcher cannot be restarted.
    """

    def __init__(self, poll_interval: float | timedelta = DEFAULT_POLL_INTERVAL):
        """Create an idle watcher.  *poll_interval* is in seconds."""
        seconds = (
            poll_interval.total_seconds()
            if isinstance(poll_interval, timedelta)
            else float(poll_interval)
        )
        # Must be usable as a wait timeout
        if not math.isfinite(seconds) or not 0 < seconds <= threading.TIMEOUT_MAX:
            raise InvalidDurationError(poll_interval)
        self._poll_interval = seconds
        self._registry = FileRegistry()
        self._state = WatcherState.IDLE
        self._state_lock = threading.Lock()
        self._thread: _ScanThread | None = None
        self._events: Channel[Event] | None = None
        self._errors: Channel[ScanError] | None = None

    # ---- lifecycle ----

    def start(self) -> tuple[Channel[Event], Channel[ScanError]]:
        """Begin polling and return the ``(events, errors)`` channels."""
        with self._state_lock:
            if self._state is not WatcherState.IDLE:
                raise RuntimeError(
                    f"Cannot start a watcher that is {self._state.value}"
                )
            self._events = Channel("events")
            self._errors = Channel("errors")
            self._thread = _ScanThread(self, self._poll_interval)
            self._state = WatcherState.RUNNING
        self._thread.start()
        logger.info(
            "Watching %d file(s) (interval=%.3gs)",
            len(self._registry),
            self._poll_interval,
        )
        return self._events, self._errors

    def stop(self) -> None:
        """Stop polling, close both channels and release the scan thread."""
        with self._state_lock:
            if self._state is not WatcherState.RUNNING:
                raise RuntimeError(
                    f"Cannot stop a watcher that is {self._state.value}"
                )
            self._state = WatcherState.STOPPED
        thread, events, errors = self._thread, self._events, self._errors
        if thread is None or events is None or errors is None:
            raise RuntimeError("Watcher is running without a scan thread")

        thread.stop()
        errors.close()
        events.close()
        if thread is not threading.current_thread():
            thread.join(timeout=_JOIN_TIMEOUT)
            if thread.is_alive():
                logger.warning("Scan thread did not exit within %.0fs", _JOIN_TIMEOUT)
        logger.info("Watcher stopped.")

    @property
    def state(self) -> WatcherState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is WatcherState.RUNNING

    @property
    def poll_interval(self) -> float:
        """Return the poll interval in seconds."""
        return self._poll_interval

    @property
    def events(self) -> Channel[Event] | None:
        """Return the event channel, or None before :meth:`start`."""
        return self._events

    @property
    def errors(self) -> Channel[ScanError] | None:
        """Return the error channel, or None before :meth:`start`."""
        return self._errors

    # ---- registry ----

    def add_file(self, file: WatchedFile) -> None:
        self._registry.add(file)

    def remove_file(self, file: WatchedFile) -> None:
        self._registry.remove(file)

    def find(self, predicate: FileFilter) -> list[WatchedFile]:
        return self._registry.find(predicate)

    @property
    def files(self) -> list[WatchedFile]:
        return self._registry.snapshot()

    # ---- scanning ----

    def scan_once(self) -> tuple[Event | None, list[ScanError]]:
        """Scan every registered file once without delivering anything.

        Changed files get their stored snapshot replaced by the new value.
        A file that fails to read keeps its old snapshot and produces a
        :class:`ScanError` instead.
        """
        changed: list[WatchedFile] = []
        errors: list[ScanError] = []
        for f in self._registry.snapshot():
            try:
                data = f.read_snapshot()
            except Exception as exc:
                logger.warning("Could not read %s: %s", f.path, exc)
                errors.append(ScanError(f, exc))
                continue
            if data != f.snapshot:
                f.update_snapshot(data)
                changed.append(f)

        event = Event(tuple(changed)) if changed else None
        return event, errors

    def _publish_changes(self) -> None:
        """Run one scan and hand its results to the consumer."""
        events, error_channel = self._events, self._errors
        if events is None or error_channel is None:
            raise RuntimeError("Watcher has not been started")
        event, errors = self.scan_once()

        # Files removed while the scan was in flight are not reported
        for err in errors:
            if err.file in self._registry:
                error_channel.send(err)

        if event is None:
            return
        files = tuple(f for f in event.files if f in self._registry)
        if not files:
            return
        logger.info(
            "Detected changes in %d file(s): %s",
            len(files),
            ", ".join(str(f.path) for f in files),
        )
        events.send(Event(files))
