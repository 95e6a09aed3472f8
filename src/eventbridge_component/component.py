"""Caller-facing deploy, remove and metrics operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .clients import ClientFactory
from .exceptions import CredentialsNotFoundError
from .inputs import normalize
from .metrics import get_metrics
from .models import DeployOutputs, MetricSeries
from .reconciler import check_immutable_fields, reconcile_event_bus
from .roles import ensure_execution_role, ensure_meta_role
from .state_store import StateStore
from .teardown import remove as remove_resources

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComponentSettings:
    """
    Settings of one component instance.

    Attributes:
        instance_name: Name of the instance, used in default resource names
        stage: Deployment stage, used in default resource names
        platform_account_id: Account allowed to assume the meta role.
            When None, the meta role trusts the deploying account itself.
    """

    instance_name: str
    stage: str
    platform_account_id: str | None = None


class EventBridgeComponent:
    """
    Deploys and removes one event bus with its archive and IAM roles.

    State is read from and written to the given store; nothing is kept on
    the instance between calls. The store is checkpointed after the roles
    converge and again when the deploy ends, failed or not, so a failed
    deploy can be re-run or removed from where it stopped.

    Example:
        async with ClientFactory(credentials) as factory:
            component = EventBridgeComponent(
                factory,
                JsonFileStateStore(".eventbridge-component", "orders", "dev"),
                ComponentSettings(instance_name="orders", stage="dev"),
            )
            outputs = await component.deploy({"name": "orders-bus"})
    """

    def __init__(
        self,
        factory: ClientFactory,
        store: StateStore,
        settings: ComponentSettings,
    ) -> None:
        self.factory = factory
        self.store = store
        self.settings = settings

    def _require_credentials(self) -> None:
        if self.factory.credentials is None:
            raise CredentialsNotFoundError()

    async def deploy(self, inputs: dict[str, Any] | None = None) -> dict[str, str]:
        """
        Create or update the event bus described by ``inputs``.

        Returns:
            Dict with the bus ``name`` and ``arn`` (plus ``archiveArn`` when
            an archive is active)

        Raises:
            CredentialsNotFoundError: If the factory has no credentials
            ValidationError: If the inputs are invalid
            ImmutableFieldError: If name or region changed since the last deploy
            RoleNotFoundError: If ``roleName`` names a missing role
            RemoteServiceError: If an AWS call fails
        """
        self._require_credentials()

        prior = self.store.load()
        config = normalize(inputs, prior, self.settings.instance_name, self.settings.stage)
        check_immutable_fields(config, prior)

        logger.info(
            "Starting deployment of AWS EventBridge event bus %s to the AWS region %s",
            config.name,
            config.region,
        )

        state = prior.copy()
        # A rerun after a failure reuses this name
        state.name = config.name
        state.region = config.region
        try:
            iam = await self.factory.client("iam", config.region)
            execution_role = await ensure_execution_role(iam, config, state)
            await ensure_meta_role(
                iam,
                config,
                state,
                self.settings.instance_name,
                self.settings.stage,
                self.settings.platform_account_id or execution_role.account_id,
            )
            self.store.save(state)

            events = await self.factory.client("events", config.region)
            result = await reconcile_event_bus(events, config, state)
        finally:
            # Partial progress is persisted
            self.store.save(state)

        logger.info(
            "Successfully %s AWS EventBridge event bus %s",
            "created" if result.created else "deployed",
            result.bus_arn,
        )
        return DeployOutputs(
            name=config.name,
            arn=result.bus_arn,
            archive_arn=result.archive_arn,
        ).to_dict()

    async def remove(self, inputs: dict[str, Any] | None = None) -> None:
        """Remove everything the last deploy created and clear the state."""
        self._require_credentials()

        state = self.store.load()
        await remove_resources(self.factory, state)
        self.store.clear()

    async def metrics(self, inputs: dict[str, Any] | None = None) -> MetricSeries:
        """
        Query metrics of the deployed bus for ``inputs['rangeStart']`` to ``inputs['rangeEnd']``.

        Raises:
            ValidationError: If either bound is missing (before any AWS call)
        """
        inputs = inputs or {}
        state = self.store.load()
        return await get_metrics(
            self.factory,
            state.region,
            state.meta_role_arn,
            state.name,
            inputs.get("rangeStart"),
            inputs.get("rangeEnd"),
        )
