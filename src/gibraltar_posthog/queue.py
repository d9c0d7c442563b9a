"""Closable FIFO queue between the client and the delivery worker."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator

from .errors import QueueClosedError
from .events import CaptureEvent


# Marks the end of the stream once adding is complete
_COMPLETED = object()


class EventQueue:
    """
    Unbounded asyncio queue with a "complete adding" state.

    Producers call add() without blocking. The single consumer iterates
    consume(), which keeps yielding events left in the queue after
    complete_adding() and only stops once it is closed and empty.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._adding_completed = False
        self._drained = False

    def add(self, event: CaptureEvent) -> None:
        """Add an event (non-blocking)."""
        if self._adding_completed:
            raise QueueClosedError("Queue has been marked as complete for adding")
        self._queue.put_nowait(event)

    def complete_adding(self) -> None:
        """Stop accepting events; the consumer exits after draining."""
        if self._adding_completed:
            return
        self._adding_completed = True
        self._queue.put_nowait(_COMPLETED)

    @property
    def is_adding_completed(self) -> bool:
        return self._adding_completed

    def __len__(self) -> int:
        count = self._queue.qsize()
        if self._adding_completed and not self._drained:
            count -= 1
        return count

    async def consume(self) -> AsyncIterator[CaptureEvent]:
        """Yield events in FIFO order until the queue is closed and empty."""
        while True:
            item = await self._queue.get()
            if item is _COMPLETED:
                self._drained = True
                return
            yield item
