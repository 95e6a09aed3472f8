"""Create-or-update reconciliation of the event bus and its archive.

The bus moves between two states, absent and present. When absent it is
created; when present it is never recreated, since that would drop its
rules and archived events. Only its mutable configuration is refreshed.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from botocore.exceptions import ClientError

from .differ import Change, compute_diff
from .exceptions import ImmutableFieldError, RemoteServiceError
from .models import BusView, DesiredConfig, PersistedState
from .remote import describe_archive, describe_event_bus, is_not_found

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Result of reconciling the event bus."""

    bus_arn: str
    archive_arn: str | None = None
    changes: list[Change] = field(default_factory=list)

    @property
    def created(self) -> bool:
        return any(c.action == "create" and c.target == "bus" for c in self.changes)


def check_immutable_fields(config: DesiredConfig, state: PersistedState) -> None:
    """
    Reject a deploy that would rename or move the deployed bus.

    Raises:
        ImmutableFieldError: If name or region differ from the persisted state
    """
    if state.name and state.name != config.name:
        raise ImmutableFieldError("name", state.name, config.name)
    if state.region and state.region != config.region:
        raise ImmutableFieldError("region", state.region, config.region)


async def reconcile_event_bus(
    events: Any,
    config: DesiredConfig,
    state: PersistedState,
) -> ReconcileResult:
    """
    Converge the event bus and archive to the desired configuration.

    Args:
        events: aioboto3 EventBridge client for ``config.region``
        config: The desired configuration
        state: Persisted state, updated in place as resources converge

    Returns:
        ReconcileResult with the bus ARN, archive ARN and applied changes
    """
    logger.info("Checking if an AWS EventBridge event bus named %s already exists", config.name)
    archive_name = config.archive.name if config.archive.active else state.archive_name
    if archive_name:
        bus, archive = await asyncio.gather(
            describe_event_bus(events, config.name),
            describe_archive(events, archive_name),
        )
    else:
        bus, archive = await describe_event_bus(events, config.name), None

    changes = compute_diff(config, bus, archive, state)
    if not changes:
        logger.info("Event bus %s is up to date", config.name)

    if bus is None:
        bus_arn = await _create_bus(events, config)
    else:
        bus_arn = bus.arn
        for change in changes:
            if change.target == "bus":
                await _update_bus(events, bus, change)

    state.name = config.name
    state.arn = bus_arn
    state.region = config.region

    archive_arn = archive.arn if archive is not None and config.archive.active else None
    for change in changes:
        if change.target != "archive":
            continue
        if change.action == "delete":
            name = (change.data or {})["name"]
            await delete_archive(events, name)
            if state.archive_name == name:
                state.archive_name = None
                state.archive_arn = None
            continue

        if change.action == "create":
            archive_arn = await _create_archive(events, config, bus_arn, change)
        else:
            archive_arn = await _update_archive(events, config, change)
        state.archive_name = config.archive.name
        state.archive_arn = archive_arn

    if config.archive.active:
        state.archive_name = config.archive.name
        state.archive_arn = archive_arn
    else:
        state.archive_name = None
        state.archive_arn = None

    return ReconcileResult(bus_arn=bus_arn, archive_arn=archive_arn, changes=changes)


def _tag_list(tags: dict[str, str]) -> list[dict[str, str]]:
    return [{"Key": k, "Value": v} for k, v in tags.items()]


async def _create_bus(events: Any, config: DesiredConfig) -> str:
    params: dict[str, Any] = {
        "Name": config.name,
        "Description": config.description,
        "Tags": _tag_list(config.managed_tags()),
    }
    if config.event_source_name:
        params["EventSourceName"] = config.event_source_name

    logger.info("Creating AWS EventBridge event bus %s in %s", config.name, config.region)
    try:
        response = await events.create_event_bus(**params)
    except ClientError as e:
        raise RemoteServiceError.from_client_error("CreateEventBus", e) from e

    arn: str = response["EventBusArn"]
    logger.info("Created event bus %s", arn)
    return arn


async def _update_bus(events: Any, bus: BusView, change: Change) -> None:
    data = change.data or {}
    try:
        if "description" in data:
            logger.info("Updating description of event bus %s", bus.name)
            await events.update_event_bus(Name=bus.name, Description=data["description"])
        if "tags" in data:
            logger.info("Tagging event bus %s with %s", bus.name, sorted(data["tags"]))
            await events.tag_resource(ResourceARN=bus.arn, Tags=_tag_list(data["tags"]))
    except ClientError as e:
        raise RemoteServiceError.from_client_error(e.operation_name or "UpdateEventBus", e) from e


def _archive_params(config: DesiredConfig, data: dict[str, Any]) -> dict[str, Any]:
    params: dict[str, Any] = {
        "ArchiveName": config.archive.name,
        "Description": data["description"],
        "RetentionDays": data["retention_days"] or 0,
    }
    if data.get("event_pattern"):
        params["EventPattern"] = data["event_pattern"]
    return params


async def _create_archive(events: Any, config: DesiredConfig, bus_arn: str, change: Change) -> str:
    params = _archive_params(config, change.data or {})
    params["EventSourceArn"] = bus_arn

    logger.info("Creating archive %s for event bus %s", config.archive.name, bus_arn)
    try:
        response = await events.create_archive(**params)
    except ClientError as e:
        raise RemoteServiceError.from_client_error("CreateArchive", e) from e

    arn: str = response["ArchiveArn"]
    logger.info("Created archive %s (state: %s)", arn, response.get("State"))
    return arn


async def _update_archive(events: Any, config: DesiredConfig, change: Change) -> str:
    params = _archive_params(config, change.data or {})

    logger.info("Updating archive %s", config.archive.name)
    try:
        response = await events.update_archive(**params)
    except ClientError as e:
        raise RemoteServiceError.from_client_error("UpdateArchive", e) from e

    arn: str = response["ArchiveArn"]
    return arn


async def delete_archive(events: Any, name: str) -> bool:
    """
    Delete an archive.

    Returns:
        True if deleted, False if it did not exist
    """
    try:
        await events.delete_archive(ArchiveName=name)
    except ClientError as e:
        if is_not_found(e):
            logger.info("Archive %s already removed", name)
            return False
        raise RemoteServiceError.from_client_error("DeleteArchive", e) from e

    logger.info("Deleted archive %s", name)
    return True


async def delete_event_bus(events: Any, name: str) -> bool:
    """
    Delete an event bus.

    Returns:
        True if deleted, False if it did not exist
    """
    try:
        await events.delete_event_bus(Name=name)
    except ClientError as e:
        if is_not_found(e):
            logger.info("Event bus %s already removed", name)
            return False
        raise RemoteServiceError.from_client_error("DeleteEventBus", e) from e

    logger.info("Deleted event bus %s", name)
    return True

