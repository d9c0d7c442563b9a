"""PostHog capture event types."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# Reserved event name shared by identify and group records
IDENTIFY_EVENT = "$identify"

# Reserved property keys
SET = "$set"
SET_ONCE = "$set_once"
GROUPS = "$groups"
GROUP_SET = "$group_set"
GROUP_TYPE = "$group_type"
GROUP_KEY = "$group_key"


class DeliveryOutcome(str, Enum):
    """Outcome of one delivery attempt."""
    SUCCESS = "success"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    HTTP_ERROR = "http_error"
    CANCELLED = "cancelled"
    ERROR = "error"
    DISCARDED = "discarded"


def classify_status(status_code: int) -> DeliveryOutcome:
    """Map an HTTP status code from the capture endpoint to an outcome."""
    if 200 <= status_code < 300:
        return DeliveryOutcome.SUCCESS
    if status_code == 400:
        return DeliveryOutcome.BAD_REQUEST
    if status_code == 401:
        return DeliveryOutcome.UNAUTHORIZED
    return DeliveryOutcome.HTTP_ERROR


@dataclass(frozen=True, slots=True)
class CaptureEvent:
    """
    A single analytics event waiting for delivery.

    The timestamp is taken when the event is captured, not when it is sent,
    so queueing delay never shifts the time PostHog records.
    """
    # Event type (a user event name or $identify)
    name: str

    # Project API key, copied from the client
    api_key: str

    # Stable identifier of the acting user/group
    distinct_id: str

    # When capture was called (UTC)
    timestamp: datetime

    properties: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        name: str,
        api_key: str,
        distinct_id: str,
        properties: dict[str, Any] | None = None,
    ) -> CaptureEvent:
        """Factory method stamping the current UTC time."""
        return cls(
            name=name,
            api_key=api_key,
            distinct_id=distinct_id,
            timestamp=datetime.now(timezone.utc),
            properties=properties if properties is not None else {},
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the capture API's wire shape."""
        return {
            "event": self.name,
            "api_key": self.api_key,
            "distinct_id": self.distinct_id,
            "properties": self.properties,
            "timestamp": self.timestamp.isoformat(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)
