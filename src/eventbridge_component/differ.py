"""Diff engine for event bus reconciliation.

Compares the desired configuration against the provider-side view of the
bus and its archive to produce the list of changes a deploy must apply.
Identity fields (name, region) are never compared here; they are guarded
before reconciliation starts.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from .models import ArchiveView, BusView, DesiredConfig, PersistedState


@dataclass(frozen=True)
class Change:
    """A single change to apply."""

    action: str  # "create", "update", "delete"
    target: str  # "bus", "archive"
    data: dict[str, Any] | None = None  # fields for create/update, name for delete


def compute_diff(
    config: DesiredConfig,
    bus: BusView | None,
    archive: ArchiveView | None,
    state: PersistedState,
) -> list[Change]:
    """Compute changes between the desired config and the deployed resources.

    Args:
        config: The desired configuration.
        bus: Current event bus, or None if absent.
        archive: Current archive named by the config, or None if absent.
        state: The persisted state, used to tell owned archives apart.

    Returns:
        List of Change objects to apply, bus changes first. Empty when the
        deployed resources already match.
    """
    changes: list[Change] = []

    # --- Bus ---
    if bus is None:
        changes.append(
            Change(
                action="create",
                target="bus",
                data={
                    "description": config.description,
                    "event_source_name": config.event_source_name,
                    "tags": config.managed_tags(),
                },
            )
        )
    else:
        data: dict[str, Any] = {}
        if (bus.description or "") != config.description:
            data["description"] = config.description
        missing_tags = {
            key: value for key, value in config.managed_tags().items() if bus.tags.get(key) != value
        }
        if missing_tags:
            data["tags"] = missing_tags
        if data:
            changes.append(Change(action="update", target="bus", data=data))

    # --- Archive ---
    desired = config.archive
    if desired.active:
        if state.archive_name and state.archive_name != desired.name:
            # Renamed: drop the recorded archive before creating its replacement
            changes.append(
                Change(action="delete", target="archive", data={"name": state.archive_name})
            )
        archive_data = {
            "description": desired.description,
            "event_pattern": desired.event_pattern,
            "retention_days": desired.retention_days,
        }
        if archive is None:
            changes.append(Change(action="create", target="archive", data=archive_data))
        elif archive_differs(
            desired.description, desired.event_pattern, desired.retention_days, archive
        ):
            changes.append(Change(action="update", target="archive", data=archive_data))
    elif archive is not None and state.archive_name == archive.name:
        # Only archives this component created are removed on deactivation
        changes.append(Change(action="delete", target="archive", data={"name": archive.name}))

    return changes


def archive_differs(
    description: str,
    event_pattern: str | None,
    retention_days: int | None,
    archive: ArchiveView,
) -> bool:
    """True if any mutable archive field differs from the deployed archive."""
    if (archive.description or "") != description:
        return True
    if not patterns_equal(archive.event_pattern, event_pattern):
        return True
    return (archive.retention_days or 0) != (retention_days or 0)


def patterns_equal(left: str | None, right: str | None) -> bool:
    """Compare event patterns as parsed JSON so formatting does not matter."""
    if not left or not right:
        return not left and not right
    try:
        return bool(json.loads(left) == json.loads(right))
    except json.JSONDecodeError:
        return left == right
