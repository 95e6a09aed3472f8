"""Tests for the exception hierarchy."""

import pytest

from eventbridge_component.exceptions import (
    ConfigurationError,
    CredentialsNotFoundError,
    EventBridgeComponentError,
    ImmutableFieldError,
    InfrastructureError,
    RemoteServiceError,
    RoleNotFoundError,
    ValidationError,
)
from tests.fixtures.moto import client_error


class TestExceptionHierarchy:
    """Every error is catchable through its category and the base class."""

    @pytest.mark.parametrize(
        "error",
        [
            ValidationError("name", "x", "bad"),
            CredentialsNotFoundError(),
            RoleNotFoundError("my-role"),
        ],
    )
    def test_configuration_errors(self, error: Exception) -> None:
        assert isinstance(error, ConfigurationError)
        assert isinstance(error, EventBridgeComponentError)
        assert not isinstance(error, InfrastructureError)

    @pytest.mark.parametrize(
        "error",
        [
            ImmutableFieldError("name", "a", "b"),
            RemoteServiceError("CreateEventBus", "AccessDenied", "denied"),
        ],
    )
    def test_infrastructure_errors(self, error: Exception) -> None:
        assert isinstance(error, InfrastructureError)
        assert isinstance(error, EventBridgeComponentError)


class TestMessages:
    def test_validation_error(self) -> None:
        error = ValidationError("region", "mars-1", "Unknown region")
        assert str(error) == "Invalid region 'mars-1': Unknown region"
        assert error.field == "region"

    def test_credentials_not_found(self) -> None:
        assert str(CredentialsNotFoundError()).startswith("Credentials not found")

    def test_role_not_found(self) -> None:
        error = RoleNotFoundError("my-role")
        assert str(error).startswith("Invalid roleName")
        assert "my-role" in str(error)
        assert error.role_name == "my-role"

    def test_immutable_field(self) -> None:
        error = ImmutableFieldError("region", "us-east-1", "eu-west-1")
        message = str(error)
        assert "Changing the region from us-east-1 to eu-west-1" in message
        assert "remove it manually" in message
        assert (error.field, error.previous, error.desired) == ("region", "us-east-1", "eu-west-1")


class TestRemoteServiceError:
    def test_from_client_error(self) -> None:
        error = RemoteServiceError.from_client_error(
            "CreateEventBus", client_error("LimitExceededException", "CreateEventBus", "too many")
        )

        assert error.operation == "CreateEventBus"
        assert error.code == "LimitExceededException"
        assert error.message == "too many"
        assert str(error) == "CreateEventBus failed (LimitExceededException): too many"
