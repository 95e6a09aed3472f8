"""Reads the provider-side view of the event bus and its archive.

Absence is an expected outcome here, not an error: the describe functions
return ``None`` when the resource does not exist, which is what separates
the create path from the update path.
"""

import logging
from typing import Any

from botocore.exceptions import ClientError

from .exceptions import RemoteServiceError
from .models import ArchiveView, BusView

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = frozenset({"ResourceNotFoundException", "NoSuchEntity"})


def is_not_found(error: ClientError) -> bool:
    """True if the error is the provider's "resource does not exist" signal."""
    return error.response.get("Error", {}).get("Code") in NOT_FOUND_CODES


async def describe_event_bus(client: Any, name: str) -> BusView | None:
    """
    Describe an event bus, including its tags.

    Args:
        client: aioboto3 EventBridge client
        name: Event bus name

    Returns:
        BusView, or None if the bus does not exist

    Raises:
        RemoteServiceError: On any other provider failure
    """
    try:
        response = await client.describe_event_bus(Name=name)
    except ClientError as e:
        if is_not_found(e):
            logger.debug("Event bus %s not found", name)
            return None
        raise RemoteServiceError.from_client_error("DescribeEventBus", e) from e

    arn = response["Arn"]
    return BusView(
        name=response["Name"],
        arn=arn,
        description=response.get("Description"),
        policy=response.get("Policy"),
        tags=await list_tags(client, arn),
    )


async def describe_archive(client: Any, name: str) -> ArchiveView | None:
    """
    Describe an archive.

    Args:
        client: aioboto3 EventBridge client
        name: Archive name

    Returns:
        ArchiveView, or None if the archive does not exist
    """
    try:
        response = await client.describe_archive(ArchiveName=name)
    except ClientError as e:
        if is_not_found(e):
            logger.debug("Archive %s not found", name)
            return None
        raise RemoteServiceError.from_client_error("DescribeArchive", e) from e

    return ArchiveView(
        name=response["ArchiveName"],
        arn=response["ArchiveArn"],
        state=response.get("State"),
        event_pattern=response.get("EventPattern"),
        retention_days=response.get("RetentionDays", 0) or 0,
        description=response.get("Description"),
        event_source_arn=response.get("EventSourceArn"),
    )


async def list_tags(client: Any, arn: str) -> dict[str, str]:
    """Tags on an EventBridge resource as a plain dict."""
    try:
        response = await client.list_tags_for_resource(ResourceARN=arn)
    except ClientError as e:
        raise RemoteServiceError.from_client_error("ListTagsForResource", e) from e
    return {tag["Key"]: tag["Value"] for tag in response.get("Tags", [])}
