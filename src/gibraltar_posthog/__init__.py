"""
PostHog Client Library

Queues analytics events in memory and sends them to PostHog from a
background task, so application code never waits on the network.

Usage:
    from gibraltar_posthog import PostHogClient

    async with PostHogClient(api_key="phc_...") as posthog:
        posthog.capture("report_viewed", "user-42", {"report": "sales"})
        posthog.identify("user-42", {"email": "a@example.com"}, {"first_seen": "2024-01-15"})
        posthog.group("user-42", "company", "acme", {"name": "Acme"})
"""

from .client import PostHogClient
from .config import DEFAULT_CAPTURE_URL, ClientConfig
from .errors import PostHogError, QueueClosedError, root_cause
from .events import CaptureEvent, DeliveryOutcome, IDENTIFY_EVENT, classify_status
from .properties import group_properties, identify_properties
from .queue import EventQueue
from .worker import DeliveryWorker

__version__ = "0.1.0"

__all__ = [
    # Core classes
    "PostHogClient",
    "ClientConfig",
    "DEFAULT_CAPTURE_URL",
    # Pipeline
    "EventQueue",
    "DeliveryWorker",
    # Events
    "CaptureEvent",
    "DeliveryOutcome",
    "IDENTIFY_EVENT",
    "classify_status",
    # Property builders
    "identify_properties",
    "group_properties",
    # Exceptions
    "PostHogError",
    "QueueClosedError",
    "root_cause",
]
