"""Shared fixtures for Poll Watch tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from poll_watch.watcher import Watcher, WatcherState


@pytest.fixture
def make_file(tmp_path: Path):
    """Write *content* to ``tmp_path / name`` and return the path."""

    def _make(name: str, content: bytes | str = b"") -> Path:
        path = tmp_path / name
        data = content.encode() if isinstance(content, str) else content
        path.write_bytes(data)
        return path

    return _make


@pytest.fixture
def watcher() -> Iterator[Watcher]:
    """A fast-polling watcher that is stopped after the test if still running."""
    w = Watcher(poll_interval=0.05)
    yield w
    if w.state is WatcherState.RUNNING:
        w.stop()
