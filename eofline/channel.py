"""Many-producer, single-consumer conduit for pipeline outcomes."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from queue import Queue

from .errors import ChannelClosed
from .types import Outcome

_CLOSED = object()


class OutcomeChannel:
    """Unbounded queue of outcomes with explicit close.

    Producers call ``send`` from any thread and never block. The single
    consumer iterates the channel; iteration stops after ``close`` once every
    outcome sent before it has been yielded.
    """

    def __init__(self) -> None:
        self._queue: Queue[object] = Queue()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def send(self, outcome: Outcome) -> None:
        """Enqueue one outcome; raises ``ChannelClosed`` after ``close``."""
        with self._lock:
            if self._closed:
                raise ChannelClosed("outcome sent on closed channel")
            self._queue.put(outcome)

    def close(self) -> None:
        """Mark the end of the stream. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[Outcome]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield item  # type: ignore[misc]


__all__ = ["OutcomeChannel"]
