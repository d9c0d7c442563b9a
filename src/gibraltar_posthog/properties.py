"""Property builders for the identify and group record shapes."""

from __future__ import annotations

from typing import Any

from .events import GROUP_KEY, GROUP_SET, GROUP_TYPE, GROUPS, SET, SET_ONCE


def identify_properties(
    properties: dict[str, Any] | None = None,
    once_properties: dict[str, Any] | None = None,
    groups: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build the composite properties of an identify record.

    Args:
        properties: Values that overwrite what PostHog already has
        once_properties: Values only used if PostHog hasn't seen the subject before
        groups: Group information; its "$groups" entry is forwarded

    Missing inputs are left out of the result rather than sent as empty.
    """
    composite: dict[str, Any] = {}

    if properties is not None:
        composite[SET] = properties

    if once_properties is not None:
        composite[SET_ONCE] = once_properties

    if groups is not None and GROUPS in groups:
        composite[GROUPS] = groups[GROUPS]

    return composite


def group_properties(
    group_type: str,
    group_key: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build the properties of a group record.

    Add a "name" entry to details to give the group a friendly name.
    """
    properties: dict[str, Any] = {}

    if details is not None:
        properties[GROUP_SET] = details

    properties[GROUP_TYPE] = group_type
    properties[GROUP_KEY] = group_key

    return properties
