"""Main PostHog client."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any

import httpx

from .config import ClientConfig
from .events import IDENTIFY_EVENT, CaptureEvent
from .errors import QueueClosedError
from .properties import group_properties, identify_properties
from .queue import EventQueue
from .worker import DeliveryWorker


# How often stop_processing checks whether the queue has drained (seconds)
DRAIN_POLL_INTERVAL = 0.1


class PostHogClient:
    """
    Non-blocking PostHog capture client.

    Captured events are placed on an in-memory queue and sent by a single
    background task, so callers never wait on the network and never see
    delivery errors (those only show up in the logs).

    Usage:
        async with PostHogClient(api_key="phc_...") as posthog:
            posthog.capture("signed_up", "user-42", {"plan": "pro"})
            posthog.identify("user-42", {"email": "a@example.com"})

    If no API key is given (directly or via config) the client is disabled
    for its whole lifetime: no queue, no worker, and every capture is ignored.
    A client with a key must be created inside a running event loop, since
    the worker task starts immediately.
    """

    def __init__(
        self,
        api_key: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        capture_url: str | None = None,
        logger: logging.Logger | None = None,
        config: ClientConfig | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self._api_key = api_key if api_key is not None else self.config.api_key
        self._capture_url = capture_url or self.config.capture_url
        self._logger = logger or logging.getLogger(__name__)
        self._http_client = http_client
        self._queue: EventQueue | None = None
        self._worker: DeliveryWorker | None = None
        self._worker_task: asyncio.Task | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._captured = 0

        # Writes handed over from other threads that the loop hasn't applied yet
        self._handoffs = 0
        self._handoff_lock = threading.Lock()

        if self._api_key:
            self.enabled = self.config.enabled
            self._loop = asyncio.get_running_loop()
            if self._http_client is None:
                self._http_client = httpx.AsyncClient(timeout=self.config.timeout)
            self._queue = EventQueue()
            self._worker = DeliveryWorker(
                queue=self._queue,
                http_client=self._http_client,
                capture_url=self._capture_url,
                is_enabled=lambda: self.enabled,
                log=self._logger,
            )
            self._worker_task = self._loop.create_task(self._worker.process_loop())
        else:
            self.enabled = False

    async def __aenter__(self) -> PostHogClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop_processing(timeout=self.config.shutdown_timeout)
        await self.aclose()

    def capture(
        self,
        event_name: str,
        distinct_id: str,
        properties: dict[str, Any] | None = None,
    ) -> None:
        """
        The raw PostHog capture call (non-blocking).

        Args:
            event_name: Name of the event
            distinct_id: Your stable key for the user or group
            properties: Optional event properties

        Every other recording method goes through here.
        """
        if not self.enabled or self._queue is None:
            return

        event = CaptureEvent.create(event_name, self._api_key, distinct_id, properties)
        self._enqueue(event)

    def identify(
        self,
        distinct_id: str,
        properties: dict[str, Any] | None = None,
        once_properties: dict[str, Any] | None = None,
        groups: dict[str, Any] | None = None,
    ) -> None:
        """
        Identify a user to PostHog.

        Args:
            distinct_id: Your database key for the user (unique and constant over all time)
            properties: Values that overwrite anything PostHog already has
            once_properties: Values only used if PostHog hasn't seen the user before
            groups: Group information for the user (its "$groups" entry)
        """
        self.capture(
            IDENTIFY_EVENT,
            distinct_id,
            identify_properties(properties, once_properties, groups),
        )

    def group(
        self,
        distinct_id: str,
        group_type: str,
        group_key: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Publish group information to PostHog.

        Args:
            distinct_id: Key of the user the update is attributed to
            group_type: The group type (you should have very few of these)
            group_key: Your database key for the group (unique and constant over all time)
            details: Properties for the group; include "name" for a friendly name
        """
        self.capture(
            IDENTIFY_EVENT,
            distinct_id,
            group_properties(group_type, group_key, details),
        )

    def _enqueue(self, event: CaptureEvent) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._queue.add(event)
            self._captured += 1
        else:
            # Called from another thread: hand the write to the owning loop
            with self._handoff_lock:
                self._handoffs += 1
            self._loop.call_soon_threadsafe(self._add_handoff, event)

    def _add_handoff(self, event: CaptureEvent) -> None:
        """Apply a write from another thread (runs on the loop)."""
        with self._handoff_lock:
            self._handoffs -= 1
        try:
            self._queue.add(event)
        except QueueClosedError:
            self._logger.error(
                "PostHog event %r was captured after the client stopped accepting events and was dropped.",
                event.name,
            )
            return
        self._captured += 1

    async def _flush_handoffs(self) -> None:
        # Handoffs already scheduled run before this task resumes
        while self._handoffs > 0:
            await asyncio.sleep(0)

    async def stop_processing(self, timeout: float | None = None) -> None:
        """
        Stop accepting events and wait for pending ones to be sent.

        Returns once nothing is queued or in flight, or when timeout seconds
        have passed. In-flight requests are never cancelled here. Captures
        made from other threads before this call are queued first.
        """
        if self._queue is None:
            return

        await self._flush_handoffs()

        # No more writes, so the worker exits once the queue is empty
        self._queue.complete_adding()

        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout is not None else None

        while self.pending > 0:
            if self._worker_task is None or self._worker_task.done():
                break
            if deadline is not None and loop.time() >= deadline:
                self._logger.debug(f"Stopped waiting for PostHog queue with {self.pending} event(s) pending")
                return
            await asyncio.sleep(DRAIN_POLL_INTERVAL)

    async def aclose(self) -> None:
        """
        Release the worker and the HTTP transport.

        Safe to call whether or not processing drained; anything still
        queued or in flight is abandoned.
        """
        if self._queue is not None:
            await self._flush_handoffs()
            self._queue.complete_adding()

        if self._worker_task is not None and not self._worker_task.done():
            self._worker_task.cancel()
            try:
                await self._worker_task
            except asyncio.CancelledError:
                pass

        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    @property
    def pending(self) -> int:
        """Events handed over, queued or in flight."""
        if self._queue is None:
            return 0
        in_flight = 1 if self._worker is not None and self._worker.is_busy else 0
        return self._handoffs + len(self._queue) + in_flight

    @property
    def is_running(self) -> bool:
        """True while the delivery worker task is alive."""
        return self._worker_task is not None and not self._worker_task.done()

    @property
    def queue_depth(self) -> int:
        """Current queue depth."""
        return len(self._queue) if self._queue is not None else 0

    @property
    def stats(self) -> dict:
        """Get client statistics."""
        worker_stats = self._worker.stats if self._worker else {"sent": 0, "failed": 0, "discarded": 0, "outcomes": {}}
        return {
            "captured": self._captured,
            **worker_stats,
            "queue_depth": self.queue_depth,
            "enabled": self.enabled,
        }
