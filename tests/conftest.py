"""Pytest fixtures for eventbridge-component tests."""

import pytest

from eventbridge_component import (
    ComponentSettings,
    Credentials,
    EventBridgeComponent,
    InMemoryStateStore,
)
from tests.fixtures.moto import (  # noqa: F401
    MotoClientFactory,
    aws_credentials,
    events_client,
    iam_client,
    mock_aws_services,
)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(access_key_id="testing", secret_access_key="testing")


@pytest.fixture
async def factory(mock_aws_services, credentials):
    """Client factory whose clients talk to moto."""
    async with MotoClientFactory(credentials) as factory:
        yield factory


@pytest.fixture
async def events(factory):
    """aioboto3 EventBridge client in the default test region."""
    return await factory.client("events", "us-east-1")


@pytest.fixture
async def iam(factory):
    """aioboto3 IAM client."""
    return await factory.client("iam", "us-east-1")


@pytest.fixture
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def settings() -> ComponentSettings:
    return ComponentSettings(instance_name="orders", stage="dev")


@pytest.fixture
def component(factory, store, settings) -> EventBridgeComponent:
    return EventBridgeComponent(factory, store, settings)
