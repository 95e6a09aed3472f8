"""
eventbridge-component: Deploys an AWS EventBridge event bus for an IaC framework.

This library reconciles one event bus with:
- An optional archive of the events it receives
- A default (or caller-supplied) execution role
- A least-privilege meta role for read-only monitoring
- Operational metrics read through the meta role

Example:
    from eventbridge_component import (
        ClientFactory,
        ComponentSettings,
        EventBridgeComponent,
        JsonFileStateStore,
    )

    async with ClientFactory(credentials) as factory:
        component = EventBridgeComponent(
            factory,
            JsonFileStateStore(".eventbridge-component", "orders", "dev"),
            ComponentSettings(instance_name="orders", stage="dev"),
        )
        outputs = await component.deploy({"name": "orders-bus", "region": "us-east-1"})
"""

from importlib.metadata import PackageNotFoundError, version

from .clients import ClientFactory, Credentials
from .component import ComponentSettings, EventBridgeComponent
from .exceptions import (
    ConfigurationError,
    CredentialsNotFoundError,
    EventBridgeComponentError,
    ImmutableFieldError,
    InfrastructureError,
    RemoteServiceError,
    RoleNotFoundError,
    ValidationError,
)
from .models import (
    ArchiveConfig,
    DeployOutputs,
    DesiredConfig,
    MetricResult,
    MetricSeries,
    PersistedState,
)
from .state_store import InMemoryStateStore, JsonFileStateStore, StateStore

try:
    __version__ = version("eventbridge-component")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

__all__ = [
    # Version
    "__version__",
    # Main classes
    "EventBridgeComponent",
    "ComponentSettings",
    "ClientFactory",
    "Credentials",
    # State
    "StateStore",
    "JsonFileStateStore",
    "InMemoryStateStore",
    # Models
    "ArchiveConfig",
    "DesiredConfig",
    "PersistedState",
    "DeployOutputs",
    "MetricResult",
    "MetricSeries",
    # Exceptions
    "EventBridgeComponentError",
    "ConfigurationError",
    "InfrastructureError",
    "ValidationError",
    "CredentialsNotFoundError",
    "RoleNotFoundError",
    "ImmutableFieldError",
    "RemoteServiceError",
]
