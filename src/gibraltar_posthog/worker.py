"""Background delivery of captured events to PostHog."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import Callable

import httpx

from .errors import root_cause
from .events import CaptureEvent, DeliveryOutcome, classify_status
from .queue import EventQueue


logger = logging.getLogger(__name__)


class DeliveryWorker:
    """
    Single consumer that sends queued events one at a time.

    Failures are logged and the event is dropped; nothing is retried and
    nothing is raised back to the code that captured the event.
    """

    def __init__(
        self,
        queue: EventQueue,
        http_client: httpx.AsyncClient,
        capture_url: str,
        is_enabled: Callable[[], bool],
        log: logging.Logger | None = None,
    ) -> None:
        self._queue = queue
        self._http_client = http_client
        self._capture_url = capture_url
        self._is_enabled = is_enabled
        self._logger = log or logger
        self._in_flight: CaptureEvent | None = None
        self._stats = {
            "sent": 0,
            "failed": 0,
            "discarded": 0,
        }
        self._outcomes: Counter[str] = Counter()

    async def process_loop(self) -> None:
        """
        Main processing loop - runs until the queue is closed and drained.

        Call this as a background task.
        """
        logger.info(f"PostHog delivery worker started ({self._capture_url})")
        have_logged_disabled = False

        try:
            async for event in self._queue.consume():
                # The client can be disabled at runtime, so check every event
                if not self._is_enabled():
                    if not have_logged_disabled:
                        self._logger.warning(
                            "PostHog API calls are disabled. All calls to PostHog will be ignored."
                        )
                        have_logged_disabled = True
                    self._record(DeliveryOutcome.DISCARDED)
                    continue

                self._in_flight = event
                try:
                    await self.deliver(event)
                finally:
                    self._in_flight = None
        except asyncio.CancelledError:
            logger.info("PostHog delivery worker cancelled")
            raise

        logger.info(f"PostHog delivery worker stopped. Stats: {self._stats}")

    async def deliver(self, event: CaptureEvent) -> DeliveryOutcome:
        """Send one event and log the outcome."""
        try:
            response = await self._http_client.post(
                self._capture_url,
                content=event.to_json(),
                headers={"Content-Type": "application/json"},
            )
        except asyncio.CancelledError:
            self._logger.debug("The request to PostHog was cancelled.")
            self._record(DeliveryOutcome.CANCELLED)
            raise
        except httpx.TimeoutException as e:
            self._logger.debug("The request to PostHog was cancelled.", exc_info=e)
            return self._record(DeliveryOutcome.CANCELLED)
        except Exception as e:
            cause = root_cause(e)
            self._logger.error(
                "Unable to send data to PostHog due to %s. The request will be dropped.\n%s",
                type(cause).__name__,
                cause,
                exc_info=e,
            )
            return self._record(DeliveryOutcome.ERROR)

        outcome = self._record(classify_status(response.status_code))
        if outcome == DeliveryOutcome.SUCCESS:
            return outcome

        if outcome == DeliveryOutcome.BAD_REQUEST:
            self._logger.warning(
                "PostHog API call failed with status %s. Typically this means the API key "
                "didn't map to an active project or the request payload was not formatted "
                "correctly.\n\nRaw Response:\n%s",
                response.status_code,
                response.text,
            )
        elif outcome == DeliveryOutcome.UNAUTHORIZED:
            self._logger.warning(
                "PostHog API call failed with status %s. Typically this means the API key "
                "was invalid.\n\nRaw Response:\n%s",
                response.status_code,
                response.text,
            )
        else:
            self._logger.warning(
                "PostHog API call failed with status %s.\n\nRaw Response:\n%s",
                response.status_code,
                response.text,
            )
        return outcome

    def _record(self, outcome: DeliveryOutcome) -> DeliveryOutcome:
        self._outcomes[outcome.value] += 1
        if outcome == DeliveryOutcome.SUCCESS:
            self._stats["sent"] += 1
        elif outcome == DeliveryOutcome.DISCARDED:
            self._stats["discarded"] += 1
        else:
            self._stats["failed"] += 1
        return outcome

    @property
    def is_busy(self) -> bool:
        """True while a request is in flight."""
        return self._in_flight is not None

    @property
    def stats(self) -> dict:
        """Get worker statistics."""
        return {**self._stats, "outcomes": dict(self._outcomes)}
