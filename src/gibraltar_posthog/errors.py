"""Exceptions for the PostHog client."""

from __future__ import annotations


class PostHogError(Exception):
    """Base exception for PostHog client errors."""
    pass


class QueueClosedError(PostHogError):
    """An event was added after the queue stopped accepting writes."""
    pass


def root_cause(error: BaseException) -> BaseException:
    """
    Walk the exception chain down to the innermost error.

    Explicit causes (``raise ... from``) are preferred over implicit context.
    """
    seen = {id(error)}
    current = error
    while True:
        inner = current.__cause__ or current.__context__
        if inner is None or id(inner) in seen:
            return current
        seen.add(id(inner))
        current = inner
