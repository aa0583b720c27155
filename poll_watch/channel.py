"""Unbuffered delivery channel between the scan thread and its consumer.

``send`` does not return until a consumer has taken the item, so a slow
consumer slows the scanner down instead of letting events pile up.
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Iterator
from typing import Generic, TypeVar

from poll_watch.errors import ChannelClosed

T = TypeVar("T")


class Channel(Generic[T]):
    """Rendezvous channel: one item in flight, handed over synchronously."""

    def __init__(self, name: str = "channel"):
        self.name = name
        self._cond = threading.Condition()
        self._item: T | None = None
        self._pending = False
        self._closed = False
        # Handoff counters; a sender is done once _received reaches its ticket
        self._sent = 0
        self._received = 0

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Channel {self.name} ({state})>"

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def send(self, item: T) -> None:
        """Offer *item* and block until a consumer receives it.

        Raises :class:`ChannelClosed` if the channel is closed before the
        item is taken.
        """
        with self._cond:
            # Wait for any earlier sender to finish its handoff
            while self._pending and not self._closed:
                self._cond.wait()
            if self._closed:
                raise ChannelClosed(f"{self.name} is closed")

            self._item = item
            self._pending = True
            self._sent += 1
            ticket = self._sent
            self._cond.notify_all()

            while self._received < ticket and not self._closed:
                self._cond.wait()
            if self._received < ticket:
                # Closed before anyone took it
                self._pending = False
                self._item = None
                raise ChannelClosed(f"{self.name} closed during send")

    def receive(self, timeout: float | None = None) -> T:
        """Take the next item, blocking up to *timeout* seconds.

        Raises :class:`queue.Empty` on timeout and :class:`ChannelClosed`
        once the channel is closed with nothing left to take.
        """
        with self._cond:
            ready = self._cond.wait_for(
                lambda: self._pending or self._closed, timeout=timeout
            )
            if not ready:
                raise queue.Empty
            if not self._pending:
                raise ChannelClosed(f"{self.name} is closed")
            item = self._item
            self._item = None
            self._pending = False
            self._received += 1
            self._cond.notify_all()
            return item  # type: ignore[return-value]

    def close(self) -> None:
        """Close the channel and wake every waiting sender and receiver."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[T]:
        """Yield received items until the channel is closed."""
        while True:
            try:
                yield self.receive()
            except ChannelClosed:
                return
