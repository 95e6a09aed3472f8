"""Core models for eventbridge-component."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any

CREATOR_TAG_KEY = "Creator"
CREATOR_TAG_VALUE = "eventbridge-component"


@dataclass(frozen=True)
class ArchiveConfig:
    """
    Desired archive configuration.

    Attributes:
        name: Archive name (scoped to the account and region)
        active: Whether an archive should exist for the bus
        description: Archive description
        event_pattern: Canonical JSON event pattern, or None to archive everything
        retention_days: Days to keep events, or None to keep them indefinitely
    """

    name: str
    active: bool = False
    description: str = ""
    event_pattern: str | None = None
    retention_days: int | None = None


@dataclass(frozen=True)
class DesiredConfig:
    """Complete, validated configuration a deploy converges to."""

    name: str
    description: str
    region: str
    archive: ArchiveConfig
    event_source_name: str | None = None
    monitoring_enabled: bool = True
    role_name: str | None = None
    tags: dict[str, str] = field(default_factory=dict)

    def managed_tags(self) -> dict[str, str]:
        """User tags plus the creator tag, which wins on collision."""
        tags = dict(self.tags)
        tags[CREATOR_TAG_KEY] = CREATOR_TAG_VALUE
        return tags


# Serialized key for each PersistedState attribute
_STATE_KEYS = {
    "name": "name",
    "arn": "arn",
    "region": "region",
    "archive_name": "archiveName",
    "archive_arn": "archiveArn",
    "meta_role_name": "metaRoleName",
    "meta_role_arn": "metaRoleArn",
    "user_role_arn": "userRoleArn",
    "default_lambda_role_name": "defaultLambdaRoleName",
    "default_lambda_role_arn": "defaultLambdaRoleArn",
    "aws_account_id": "awsAccountId",
}


@dataclass
class PersistedState:
    """
    Last-known state of the deployed resources.

    Populated incrementally as each sub-resource converges and reset to
    empty on a successful remove. At most one of ``user_role_arn`` or the
    ``default_lambda_role_*`` pair is set.
    """

    name: str | None = None
    arn: str | None = None
    region: str | None = None
    archive_name: str | None = None
    archive_arn: str | None = None
    meta_role_name: str | None = None
    meta_role_arn: str | None = None
    user_role_arn: str | None = None
    default_lambda_role_name: str | None = None
    default_lambda_role_arn: str | None = None
    aws_account_id: str | None = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def use_user_role(self, arn: str) -> None:
        """Record a caller-supplied execution role, forgetting the default one."""
        self.user_role_arn = arn
        self.default_lambda_role_name = None
        self.default_lambda_role_arn = None

    def use_default_role(self, name: str, arn: str) -> None:
        """Record the default execution role, forgetting any caller-supplied one."""
        self.default_lambda_role_name = name
        self.default_lambda_role_arn = arn
        self.user_role_arn = None

    def clear(self) -> None:
        for f in fields(self):
            setattr(self, f.name, None)

    def copy(self) -> PersistedState:
        return PersistedState(**{f.name: getattr(self, f.name) for f in fields(self)})

    def to_dict(self) -> dict[str, str]:
        """Serialize, omitting unset fields."""
        return {
            key: getattr(self, attr)
            for attr, key in _STATE_KEYS.items()
            if getattr(self, attr) is not None
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> PersistedState:
        if not data:
            return cls()
        return cls(**{attr: data.get(key) or None for attr, key in _STATE_KEYS.items()})


@dataclass(frozen=True)
class BusView:
    """Read-only snapshot of a deployed event bus."""

    name: str
    arn: str
    description: str | None = None
    policy: str | None = None
    tags: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ArchiveView:
    """Read-only snapshot of a deployed archive."""

    name: str
    arn: str
    state: str | None = None
    event_pattern: str | None = None
    retention_days: int = 0
    description: str | None = None
    event_source_arn: str | None = None


@dataclass(frozen=True)
class RoleRef:
    """Identity of an IAM role the deploy relies on."""

    name: str
    arn: str
    account_id: str
    user_supplied: bool = False


@dataclass(frozen=True)
class DeployOutputs:
    """Values returned to the caller after a deploy."""

    name: str
    arn: str
    archive_arn: str | None = None

    def to_dict(self) -> dict[str, str]:
        result = {"name": self.name, "arn": self.arn}
        if self.archive_arn:
            result["archiveArn"] = self.archive_arn
        return result


@dataclass(frozen=True)
class MetricResult:
    """One CloudWatch metric over the requested range."""

    name: str
    stat: str
    timestamps: list[datetime]
    values: list[float]

    @property
    def total(self) -> float:
        return sum(self.values)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "stat": self.stat,
            "total": self.total,
            "timestamps": [t.isoformat() for t in self.timestamps],
            "values": list(self.values),
        }


@dataclass(frozen=True)
class MetricSeries:
    """Metrics for one event bus over ``[range_start, range_end]``."""

    range_start: datetime
    range_end: datetime
    period: int
    metrics: list[MetricResult] = field(default_factory=list)

    def get(self, name: str) -> MetricResult | None:
        for metric in self.metrics:
            if metric.name == name:
                return metric
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "rangeStart": self.range_start.isoformat(),
            "rangeEnd": self.range_end.isoformat(),
            "period": self.period,
            "metrics": [m.to_dict() for m in self.metrics],
        }
