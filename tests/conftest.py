"""Shared test fixtures for the PostHog client tests.

HTTP traffic never leaves the process: every client under test is given an
httpx.AsyncClient backed by a MockTransport that records each request.
"""

import json
from typing import Awaitable, Callable

import httpx
import pytest

from gibraltar_posthog.config import ClientConfig


class Recorder:
    """Fake capture endpoint that records requests and replays status codes."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        # Status codes to return, in order; 200 once exhausted
        self.statuses: list[int] = []
        # Optional hook run before responding (may sleep or raise)
        self.on_request: Callable[[httpx.Request], Awaitable[None]] | None = None

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.on_request is not None:
            await self.on_request(request)
        status = self.statuses.pop(0) if self.statuses else 200
        return httpx.Response(status, text=f'{{"status": {status}}}')

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    @property
    def payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]

    @property
    def event_names(self) -> list[str]:
        return [p["event"] for p in self.payloads]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def config() -> ClientConfig:
    """Config that ignores any POSTHOG_* variables in the environment."""
    return ClientConfig(
        api_key="phc_test",
        capture_url="https://posthog.test/capture/",
        timeout=5.0,
        shutdown_timeout=2.0,
        enabled=True,
    )
