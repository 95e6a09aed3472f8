"""Removal of everything a deploy created.

Every delete tolerates the resource already being gone, so a remove that
failed halfway can simply be run again.
"""

import logging

from .clients import ClientFactory
from .models import PersistedState
from .reconciler import delete_archive, delete_event_bus
from .roles import delete_role

logger = logging.getLogger(__name__)


async def remove(factory: ClientFactory, state: PersistedState) -> None:
    """
    Delete the archive, event bus and owned roles recorded in ``state``.

    A role supplied by the caller (``user_role_arn``) is never deleted; only
    the default execution role and the meta role this component created are.
    Roles are deleted even when no bus was recorded, which is what a deploy
    that failed before creating the bus leaves behind. On success ``state``
    is reset to empty.

    Args:
        factory: Client factory for the caller's credentials
        state: Persisted state of the deployment to remove
    """
    if state.is_empty:
        logger.info("No state found. Event bus appears removed already.")
        return

    if state.name:
        logger.info("Removing AWS EventBridge event bus %s from %s", state.name, state.region)
        events = await factory.client("events", state.region)
        if state.archive_name:
            await delete_archive(events, state.archive_name)
        await delete_event_bus(events, state.name)

    if state.default_lambda_role_name or state.meta_role_name:
        iam = await factory.client("iam", state.region)
        if state.default_lambda_role_name:
            await delete_role(iam, state.default_lambda_role_name)
        if state.meta_role_name:
            await delete_role(iam, state.meta_role_name)
    if state.user_role_arn:
        logger.info("Keeping caller-supplied IAM role %s", state.user_role_arn)

    logger.info("Successfully removed event bus %s", state.name or "(never created)")
    state.clear()
