"""Moto fixtures for unit tests with mocked AWS."""

import asyncio
import json
from collections.abc import Awaitable
from typing import Any
from unittest.mock import AsyncMock, patch

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from eventbridge_component.clients import ClientFactory, Credentials

# moto's default account
ACCOUNT_ID = "123456789012"
PLATFORM_ACCOUNT_ID = "999999999999"
REGION = "us-east-1"


def client_error(code: str, operation: str, message: str = "boom") -> ClientError:
    """Build a botocore ClientError with the given error code."""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mock AWS credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)
    # Unset AWS_ENDPOINT_URL to ensure moto intercepts requests
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)


@pytest.fixture
def mock_aws_services(aws_credentials):
    """Mock EventBridge, IAM, STS and CloudWatch for tests."""
    with mock_aws(), _patch_aiobotocore_response():
        yield


def _patch_aiobotocore_response():
    """
    Patch aiobotocore to work with moto's sync responses.

    Moto returns botocore.awsrequest.AWSResponse which has sync content,
    but aiobotocore expects async content. This patch wraps the response
    handling to convert sync content to async.

    See: https://github.com/aio-libs/aiobotocore/discussions/1300
    """
    from aiobotocore import endpoint

    original_convert = endpoint.convert_to_response_dict

    async def patched_convert(http_response, operation_model):
        # If content is not awaitable (moto's sync response), wrap it
        if hasattr(http_response, "_content") and not isinstance(http_response._content, Awaitable):
            fut: asyncio.Future[bytes] = asyncio.Future()
            fut.set_result(http_response.content)
            http_response._content = fut
        return await original_convert(http_response, operation_model)

    return patch.object(endpoint, "convert_to_response_dict", patched_convert)


class MotoClientFactory(ClientFactory):
    """
    ClientFactory for use under mock_aws that records requested clients.

    UpdateEventBus is answered by an AsyncMock on every events client so
    tests do not depend on moto's coverage of that operation.
    """

    def __init__(
        self,
        credentials: Credentials | None = None,
        endpoint_url: str | None = None,
    ) -> None:
        super().__init__(credentials, endpoint_url)
        self.requested: list[tuple[str, str | None]] = []

    async def client(self, service: str, region: str | None = None) -> Any:
        self.requested.append((service, region))
        cached = (service, region) in self._clients
        client = await super().client(service, region)
        if service == "events" and not cached:
            client.update_event_bus = AsyncMock(return_value={})
        return client

    def with_credentials(self, credentials: Credentials) -> "MotoClientFactory":
        return MotoClientFactory(credentials=credentials, endpoint_url=self.endpoint_url)


def make_boto3_client(service: str, region: str = REGION):
    """Create a sync boto3 client for checking what moto holds."""
    return boto3.client(service, region_name=region)


@pytest.fixture
def events_client(mock_aws_services):
    """Sync EventBridge client for verification."""
    return make_boto3_client("events")


@pytest.fixture
def iam_client(mock_aws_services):
    """Sync IAM client for verification."""
    return make_boto3_client("iam")


def bus_names(events_client) -> set[str]:
    """Names of every non-default bus moto holds."""
    buses = events_client.list_event_buses()["EventBuses"]
    return {bus["Name"] for bus in buses if bus["Name"] != "default"}


def archive_names(events_client) -> set[str]:
    return {archive["ArchiveName"] for archive in events_client.list_archives()["Archives"]}


def role_names(iam_client) -> set[str]:
    return {role["RoleName"] for role in iam_client.list_roles()["Roles"]}


def trust_policy(iam_client, name: str) -> dict[str, Any]:
    """The decoded assume-role policy of a role."""
    document = iam_client.get_role(RoleName=name)["Role"]["AssumeRolePolicyDocument"]
    return document if isinstance(document, dict) else json.loads(document)


def inline_policy(iam_client, role: str, name: str) -> dict[str, Any]:
    """The decoded inline policy of a role."""
    document = iam_client.get_role_policy(RoleName=role, PolicyName=name)["PolicyDocument"]
    return document if isinstance(document, dict) else json.loads(document)


def create_role(iam_client, name: str) -> str:
    """Create a role out of band, as a caller would, and return its ARN."""
    trust = {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"Service": "lambda.amazonaws.com"},
                "Action": "sts:AssumeRole",
            }
        ],
    }
    response = iam_client.create_role(RoleName=name, AssumeRolePolicyDocument=json.dumps(trust))
    arn: str = response["Role"]["Arn"]
    return arn
