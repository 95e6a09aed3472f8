"""Exceptions for eventbridge-component."""

from typing import Any

from botocore.exceptions import ClientError

# ---------------------------------------------------------------------------
# Base Exception
# ---------------------------------------------------------------------------


class EventBridgeComponentError(Exception):
    """
    Base exception for all eventbridge-component errors.

    All exceptions raised by this library inherit from this class,
    allowing callers to catch all library-specific errors with a single
    except clause.
    """

    pass


# ---------------------------------------------------------------------------
# Category Exceptions
# ---------------------------------------------------------------------------


class ConfigurationError(EventBridgeComponentError):
    """
    Base exception for configuration errors.

    Raised for missing credentials, invalid inputs and references to
    resources the caller claims exist but do not. Never retried.
    """

    pass


class InfrastructureError(EventBridgeComponentError):
    """
    Base exception for infrastructure-related errors.

    This includes destructive changes rejected before they happen and
    failures reported by the AWS APIs.
    """

    pass


# ---------------------------------------------------------------------------
# Configuration Exceptions
# ---------------------------------------------------------------------------


class ValidationError(ConfigurationError):
    """
    Raised when an input field fails validation.

    Attributes:
        field: Name of the field that failed validation
        value: The invalid value
        reason: Human-readable explanation
    """

    def __init__(self, field: str, value: Any, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} {value!r}: {reason}")


class CredentialsNotFoundError(ConfigurationError):
    """Raised when no AWS credentials were supplied to an operation."""

    def __init__(self) -> None:
        super().__init__(
            "Credentials not found. Configure AWS credentials (environment, "
            "shared config or --profile) and try again."
        )


class RoleNotFoundError(ConfigurationError):
    """Raised when the caller names an execution role that does not exist."""

    def __init__(self, role_name: str) -> None:
        self.role_name = role_name
        super().__init__(
            f"Invalid roleName: IAM role '{role_name}' does not exist. "
            "Create the role first or omit roleName to use the default role."
        )


# ---------------------------------------------------------------------------
# Infrastructure Exceptions
# ---------------------------------------------------------------------------


class ImmutableFieldError(InfrastructureError):
    """
    Raised when a deploy would change a field that cannot change in place.

    Changing the name or region of an existing event bus would orphan the
    deployed bus, so the operator must remove it first.
    """

    def __init__(self, field: str, previous: str, desired: str) -> None:
        self.field = field
        self.previous = previous
        self.desired = desired
        super().__init__(
            f"Changing the {field} from {previous} to {desired} would abandon the "
            f"existing AWS EventBridge event bus. Please remove it manually, "
            f"change the {field}, then re-deploy."
        )


class RemoteServiceError(InfrastructureError):
    """
    Raised when an AWS API call fails for any reason other than "not found".

    Attributes:
        operation: The API operation that failed (e.g., 'CreateEventBus')
        code: The AWS error code
        message: The AWS error message
    """

    def __init__(self, operation: str, code: str, message: str) -> None:
        self.operation = operation
        self.code = code
        self.message = message
        super().__init__(f"{operation} failed ({code}): {message}")

    @classmethod
    def from_client_error(cls, operation: str, error: ClientError) -> "RemoteServiceError":
        """Build from a botocore ClientError, keeping the provider's detail."""
        detail = error.response.get("Error", {})
        return cls(
            operation=operation,
            code=detail.get("Code", "Unknown"),
            message=detail.get("Message", str(error)),
        )
