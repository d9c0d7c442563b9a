"""Tests for the closable event queue."""

import asyncio

import pytest

from gibraltar_posthog.errors import QueueClosedError
from gibraltar_posthog.events import CaptureEvent
from gibraltar_posthog.queue import EventQueue


def make_event(name: str) -> CaptureEvent:
    return CaptureEvent.create(name, "phc_key", "user-1")


async def collect(queue: EventQueue) -> list[str]:
    return [event.name async for event in queue.consume()]


class TestEventQueue:
    @pytest.mark.asyncio
    async def test_drains_in_order_after_complete(self):
        queue = EventQueue()
        for name in ("a", "b", "c"):
            queue.add(make_event(name))
        queue.complete_adding()

        assert len(queue) == 3
        assert await collect(queue) == ["a", "b", "c"]
        assert len(queue) == 0

    @pytest.mark.asyncio
    async def test_add_after_complete_raises(self):
        queue = EventQueue()
        queue.complete_adding()

        assert queue.is_adding_completed
        with pytest.raises(QueueClosedError):
            queue.add(make_event("late"))

    @pytest.mark.asyncio
    async def test_complete_is_idempotent(self):
        queue = EventQueue()
        queue.add(make_event("a"))
        queue.complete_adding()
        queue.complete_adding()

        assert len(queue) == 1
        assert await collect(queue) == ["a"]

    @pytest.mark.asyncio
    async def test_consumer_waits_for_events(self):
        queue = EventQueue()
        consumer = asyncio.create_task(collect(queue))

        await asyncio.sleep(0.01)
        assert not consumer.done()

        queue.add(make_event("a"))
        await asyncio.sleep(0.01)
        assert not consumer.done()

        queue.add(make_event("b"))
        queue.complete_adding()

        assert await asyncio.wait_for(consumer, timeout=1.0) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_closed_and_empty_stops_immediately(self):
        queue = EventQueue()
        queue.complete_adding()

        assert await asyncio.wait_for(collect(queue), timeout=1.0) == []
