"""Client configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from typing import Any


# US PostHog cloud capture endpoint
DEFAULT_CAPTURE_URL = "https://app.posthog.com/capture/"


@dataclass
class ClientConfig:
    """
    Configuration for the PostHog client.

    Can be set via:
    - Constructor arguments
    - Environment variables (POSTHOG_*)
    - Config file (YAML)
    """
    # Project API key; empty disables the client entirely
    api_key: str = field(
        default_factory=lambda: os.environ.get("POSTHOG_API_KEY", "")
    )

    # Capture endpoint
    capture_url: str = field(
        default_factory=lambda: os.environ.get("POSTHOG_CAPTURE_URL", DEFAULT_CAPTURE_URL)
    )

    # Request timeout for the client-owned transport (seconds)
    timeout: float = field(
        default_factory=lambda: float(os.environ.get("POSTHOG_TIMEOUT", "10"))
    )

    # How long "async with" waits for the queue to drain on exit (seconds)
    shutdown_timeout: float = field(
        default_factory=lambda: float(os.environ.get("POSTHOG_SHUTDOWN_TIMEOUT", "5"))
    )

    # Initial state of the runtime kill-switch
    enabled: bool = field(
        default_factory=lambda: os.environ.get("POSTHOG_ENABLED", "true").lower() == "true"
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClientConfig:
        """Create config from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_yaml(cls, path: str) -> ClientConfig:
        """Load config from YAML file."""
        import yaml
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})
