"""Operational metrics for a deployed event bus.

Metrics are read with short-lived credentials obtained by assuming the meta
role, so the monitoring principal never needs the deployer's credentials.
"""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime, timedelta
from typing import Any

from botocore.exceptions import ClientError

from .clients import ClientFactory, Credentials
from .exceptions import ConfigurationError, RemoteServiceError, ValidationError
from .models import MetricResult, MetricSeries

logger = logging.getLogger(__name__)

METRICS_NAMESPACE = "AWS/Events"
ASSUME_ROLE_DURATION_SECONDS = 900

# (metric name, statistic) queried for every bus
EVENT_BUS_METRICS = [
    ("Invocations", "Sum"),
    ("MatchedEvents", "Sum"),
    ("TriggeredRules", "Sum"),
    ("FailedInvocations", "Sum"),
    ("ThrottledRules", "Sum"),
]


def parse_bound(field: str, value: str | datetime | None) -> datetime:
    """
    Parse a range bound into an aware UTC datetime.

    Args:
        field: Input field name, used in error messages
        value: ISO-8601 string or datetime

    Raises:
        ValidationError: If the bound is missing or not a timestamp
    """
    if value is None or value == "":
        raise ValidationError(field, value, "rangeStart and rangeEnd are required inputs")

    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError as e:
            raise ValidationError(field, value, "Must be an ISO-8601 timestamp") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def period_for_range(range_start: datetime, range_end: datetime) -> int:
    """Pick a CloudWatch period that keeps the datapoint count small."""
    width = range_end - range_start
    if width <= timedelta(hours=1):
        return 60
    if width <= timedelta(days=1):
        return 300
    if width <= timedelta(days=7):
        return 3600
    return 86400


async def get_metrics(
    factory: ClientFactory,
    region: str | None,
    meta_role_arn: str | None,
    bus_name: str | None,
    range_start: str | datetime | None,
    range_end: str | datetime | None,
) -> MetricSeries:
    """
    Query EventBridge metrics for one bus over ``[range_start, range_end]``.

    Args:
        factory: Client factory for the caller's credentials
        region: Region of the deployed bus
        meta_role_arn: ARN of the meta role created by deploy
        bus_name: Name of the deployed bus
        range_start: Start of the range (ISO-8601 string or datetime)
        range_end: End of the range (ISO-8601 string or datetime)

    Returns:
        MetricSeries with one MetricResult per queried metric

    Raises:
        ValidationError: If a bound is missing or the range is inverted
        ConfigurationError: If nothing is deployed or monitoring is disabled
    """
    start = parse_bound("rangeStart", range_start)
    end = parse_bound("rangeEnd", range_end)
    if end < start:
        raise ValidationError("rangeEnd", range_end, "Must not be earlier than rangeStart")

    if not bus_name:
        raise ConfigurationError("Invalid name: no event bus has been deployed for this instance.")
    if not meta_role_arn:
        raise ConfigurationError(
            "Invalid metaRoleArn: no meta role is deployed. Deploy with monitoring enabled first."
        )

    credentials = await _assume_meta_role(factory, region, meta_role_arn)
    period = period_for_range(start, end)

    async with factory.with_credentials(credentials) as scoped:
        cloudwatch = await scoped.client("cloudwatch", region)
        try:
            response = await cloudwatch.get_metric_data(
                MetricDataQueries=_metric_queries(bus_name, period),
                StartTime=start,
                EndTime=end,
                ScanBy="TimestampAscending",
            )
        except ClientError as e:
            raise RemoteServiceError.from_client_error("GetMetricData", e) from e

    return MetricSeries(
        range_start=start,
        range_end=end,
        period=period,
        metrics=_metric_results(response),
    )


async def _assume_meta_role(
    factory: ClientFactory, region: str | None, meta_role_arn: str
) -> Credentials:
    sts = await factory.client("sts", region)
    logger.debug("Assuming meta role %s", meta_role_arn)
    try:
        response = await sts.assume_role(
            RoleArn=meta_role_arn,
            RoleSessionName=f"session{int(time.time() * 1000)}",
            DurationSeconds=ASSUME_ROLE_DURATION_SECONDS,
        )
    except ClientError as e:
        raise RemoteServiceError.from_client_error("AssumeRole", e) from e
    return Credentials.from_sts(response)


def _metric_queries(bus_name: str, period: int) -> list[dict[str, Any]]:
    return [
        {
            "Id": f"m{index}",
            "Label": name,
            "MetricStat": {
                "Metric": {
                    "Namespace": METRICS_NAMESPACE,
                    "MetricName": name,
                    "Dimensions": [{"Name": "EventBusName", "Value": bus_name}],
                },
                "Period": period,
                "Stat": stat,
            },
            "ReturnData": True,
        }
        for index, (name, stat) in enumerate(EVENT_BUS_METRICS)
    ]


def _metric_results(response: dict[str, Any]) -> list[MetricResult]:
    by_id = {f"m{index}": (name, stat) for index, (name, stat) in enumerate(EVENT_BUS_METRICS)}
    results = []
    for item in response.get("MetricDataResults", []):
        name, stat = by_id.get(item["Id"], (item.get("Label", item["Id"]), "Sum"))
        results.append(
            MetricResult(
                name=name,
                stat=stat,
                timestamps=list(item.get("Timestamps", [])),
                values=[float(v) for v in item.get("Values", [])],
            )
        )
    return results
