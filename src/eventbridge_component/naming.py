"""Resource naming utilities.

This module provides centralized validation and default generation for the
names of the resources this component owns:

- Event bus names: 1-256 characters from ``/ . - _`` and alphanumerics
- Archive names: 1-48 characters from ``. - _`` and alphanumerics
- IAM role names: at most 64 characters
"""

import os
import random
import re
import string

from .exceptions import ValidationError

DEFAULT_REGION = "us-east-1"
"""Region used when neither the inputs nor the persisted state name one."""

DEFAULT_INSTANCE_NAME = "eventbridge"
"""Instance name used by the CLI when none is given."""

DEFAULT_STAGE = "dev"
"""Stage used by the CLI when none is given."""

DEFAULT_STATE_DIR = ".eventbridge-component"
"""Directory holding persisted state documents."""

INSTANCE_ENV_VAR = "EBC_INSTANCE"
STAGE_ENV_VAR = "EBC_STAGE"
STATE_DIR_ENV_VAR = "EBC_STATE_DIR"
PLATFORM_ACCOUNT_ENV_VAR = "EBC_PLATFORM_ACCOUNT_ID"

EVENT_BUS_NAME_PATTERN = re.compile(r"^[/\.\-_A-Za-z0-9]{1,256}$")
ARCHIVE_NAME_PATTERN = re.compile(r"^[\.\-_A-Za-z0-9]{1,48}$")
ACCOUNT_ID_PATTERN = re.compile(r"^\d{12}$")

IAM_ROLE_NAME_MAX = 64

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def random_suffix(length: int = 7) -> str:
    """Generate a short lowercase base-36 suffix for default names."""
    return "".join(random.choices(_SUFFIX_ALPHABET, k=length))


def default_resource_name(instance_name: str, stage: str, suffix: str) -> str:
    """Default bus or archive name: ``{instance}-{stage}-{suffix}``."""
    return f"{instance_name}-{stage}-{suffix}"


def execution_role_name(bus_name: str) -> str:
    """Name of the default execution role created for a bus."""
    return _role_name(f"{bus_name}-lambda-role")


def meta_role_name(instance_name: str) -> str:
    """Name of the monitoring role created for an instance."""
    return _role_name(f"{instance_name}-meta-role")


def _role_name(name: str) -> str:
    # Bus names may contain '/' (partner buses); IAM role names may not
    name = name.replace("/", "-")
    if len(name) > IAM_ROLE_NAME_MAX:
        raise ValidationError(
            "roleName",
            name,
            f"Too long. IAM role names are limited to {IAM_ROLE_NAME_MAX} characters.",
        )
    return name


def validate_event_bus_name(name: str) -> None:
    """
    Validate an event bus name.

    Args:
        name: The user-provided or generated bus name

    Raises:
        ValidationError: If the name is empty, too long or has invalid characters
    """
    if not name:
        raise ValidationError("name", name, "Name cannot be empty")

    if len(name) > 256:
        raise ValidationError(
            "name", name, "Too long. Event bus names are limited to 256 characters."
        )

    if " " in name:
        raise ValidationError(
            "name",
            name,
            "Contains spaces. Use hyphens instead (e.g., 'orders-bus' not 'orders bus')",
        )

    if not EVENT_BUS_NAME_PATTERN.match(name):
        raise ValidationError(
            "name",
            name,
            "Only alphanumeric characters and '/', '.', '-', '_' are allowed.",
        )

    if name == "default":
        raise ValidationError("name", name, "The account's default event bus cannot be managed.")


def validate_archive_name(name: str) -> None:
    """Validate an archive name."""
    if not name:
        raise ValidationError("archive.name", name, "Name cannot be empty")
    if len(name) > 48:
        raise ValidationError(
            "archive.name", name, "Too long. Archive names are limited to 48 characters."
        )
    if not ARCHIVE_NAME_PATTERN.match(name):
        raise ValidationError(
            "archive.name",
            name,
            "Only alphanumeric characters and '.', '-', '_' are allowed.",
        )


def account_id_from_arn(arn: str) -> str:
    """Extract the account id (fifth segment) from an ARN."""
    parts = arn.split(":")
    if len(parts) < 6 or not ACCOUNT_ID_PATTERN.match(parts[4]):
        raise ValidationError("arn", arn, "Not an ARN with an account id segment.")
    return parts[4]


def resolve_instance_name(instance: str | None) -> str:
    """Resolve instance name from explicit arg, env var, or default.

    Resolution order: ``instance`` arg → ``EBC_INSTANCE`` env var → ``"eventbridge"``.
    """
    return instance or os.environ.get(INSTANCE_ENV_VAR) or DEFAULT_INSTANCE_NAME


def resolve_stage(stage: str | None) -> str:
    """Resolve stage from explicit arg, env var, or default.

    Resolution order: ``stage`` arg → ``EBC_STAGE`` env var → ``"dev"``.
    """
    return stage or os.environ.get(STAGE_ENV_VAR) or DEFAULT_STAGE


def resolve_state_dir(state_dir: str | None) -> str:
    """Resolve the state directory from explicit arg, env var, or default."""
    return state_dir or os.environ.get(STATE_DIR_ENV_VAR) or DEFAULT_STATE_DIR


def resolve_platform_account_id(account_id: str | None) -> str | None:
    """Resolve the account trusted by the meta role.

    Resolution order: ``account_id`` arg → ``EBC_PLATFORM_ACCOUNT_ID`` env var.
    Returns ``None`` when neither is set; callers then trust their own account.

    Raises:
        ValidationError: If the resolved value is not a 12-digit account id
    """
    resolved = account_id or os.environ.get(PLATFORM_ACCOUNT_ENV_VAR)
    if resolved is None:
        return None
    if not ACCOUNT_ID_PATTERN.match(resolved):
        raise ValidationError("platformAccountId", resolved, "Must be a 12-digit AWS account id.")
    return resolved
