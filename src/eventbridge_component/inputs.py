"""Input normalization for deploy.

Merges user-supplied inputs with the persisted state and generated defaults
into a complete :class:`DesiredConfig`. Every field follows the same order:
explicit input, then the previously persisted value, then a generated default.
"""

from __future__ import annotations

import json
from typing import Any

from .exceptions import ValidationError
from .models import ArchiveConfig, DesiredConfig, PersistedState
from .naming import (
    DEFAULT_REGION,
    default_resource_name,
    random_suffix,
    validate_archive_name,
    validate_event_bus_name,
)

# Lowercase spellings accepted for backwards compatibility
_ALIASES = {
    "eventsourcename": "eventSourceName",
    "rolename": "roleName",
    "monitoringEnabled": "monitoring",
    "eventpattern": "eventPattern",
    "retentiondays": "retentionDays",
}


def _canonical_keys(data: dict[str, Any]) -> dict[str, Any]:
    return {_ALIASES.get(key, key): value for key, value in data.items()}


def normalize(
    raw_inputs: dict[str, Any] | None,
    prior_state: PersistedState,
    instance_name: str,
    stage: str,
    *,
    suffix: str | None = None,
) -> DesiredConfig:
    """Build the desired configuration for a deploy.

    Args:
        raw_inputs: Inputs as written by the user (may be empty).
        prior_state: State persisted by the previous deploy.
        instance_name: Name of the component instance.
        stage: Deployment stage (e.g., 'dev').
        suffix: Suffix for generated names; random when omitted.

    Returns:
        The validated DesiredConfig.

    Raises:
        ValidationError: If any field is invalid.
    """
    inputs = _canonical_keys(raw_inputs or {})
    suffix = suffix or random_suffix()

    event_source_name = inputs.get("eventSourceName") or None

    # A partner bus must carry the name of the event source it is linked to
    name = (
        inputs.get("name")
        or prior_state.name
        or event_source_name
        or default_resource_name(instance_name, stage, suffix)
    )
    validate_event_bus_name(name)
    if event_source_name and name != event_source_name:
        raise ValidationError(
            "eventSourceName",
            event_source_name,
            f"A partner event bus must be named after its event source, not '{name}'.",
        )

    description = inputs.get("description") or (
        "An AWS EventBridge event bus from the eventbridge component. "
        f'Instance name: "{instance_name}" & stage: "{stage}"'
    )

    region = inputs.get("region") or prior_state.region or DEFAULT_REGION

    monitoring = _normalize_flag("monitoring", inputs.get("monitoring"), default=True)
    role_name = inputs.get("roleName") or None

    return DesiredConfig(
        name=name,
        description=description,
        region=region,
        archive=_normalize_archive(
            inputs.get("archive"), prior_state, instance_name, stage, suffix
        ),
        event_source_name=event_source_name,
        monitoring_enabled=monitoring,
        role_name=role_name,
        tags=_normalize_tags(inputs.get("tags")),
    )


def _normalize_archive(
    raw: dict[str, Any] | None,
    prior_state: PersistedState,
    instance_name: str,
    stage: str,
    suffix: str,
) -> ArchiveConfig:
    if raw is not None and not isinstance(raw, dict):
        raise ValidationError("archive", raw, "Must be a mapping.")
    archive = _canonical_keys(raw or {})

    name = (
        archive.get("name")
        or prior_state.archive_name
        or default_resource_name(instance_name, stage, suffix)
    )
    active = _normalize_flag("archive.active", archive.get("active"), default=False)
    if active:
        validate_archive_name(name)

    description = archive.get("description") or (
        f"An AWS EventBridge archive from the eventbridge component {instance_name}-{stage}"
    )

    return ArchiveConfig(
        name=name,
        active=active,
        description=description,
        event_pattern=normalize_event_pattern(archive.get("eventPattern")),
        retention_days=_normalize_retention(archive.get("retentionDays")),
    )


def normalize_event_pattern(pattern: str | dict[str, Any] | None) -> str | None:
    """Return the pattern as canonical JSON (sorted keys, compact separators)."""
    if pattern is None or pattern == "":
        return None

    if isinstance(pattern, str):
        try:
            parsed = json.loads(pattern)
        except json.JSONDecodeError as e:
            raise ValidationError("archive.eventPattern", pattern, f"Not valid JSON: {e}") from e
    else:
        parsed = pattern

    if not isinstance(parsed, dict) or not parsed:
        raise ValidationError(
            "archive.eventPattern", pattern, "Event patterns must be non-empty JSON objects."
        )
    return json.dumps(parsed, sort_keys=True, separators=(",", ":"))


def _normalize_retention(value: Any) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError("archive.retentionDays", value, "Must be a whole number of days.")
    try:
        days = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(
            "archive.retentionDays", value, "Must be a whole number of days."
        ) from e
    if days < 0:
        raise ValidationError("archive.retentionDays", value, "Cannot be negative.")
    # The provider reports indefinite retention as 0
    return days or None


def _normalize_flag(field: str, value: Any, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(field, value, "Must be true or false.")
    return value


def _normalize_tags(value: Any) -> dict[str, str]:
    if not value:
        return {}
    if not isinstance(value, dict):
        raise ValidationError("tags", value, "Must be a mapping of tag keys to values.")
    return {str(k): str(v) for k, v in value.items()}
