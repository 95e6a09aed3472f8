"""IAM policy documents for the roles this component manages."""

from typing import Any

POLICY_VERSION = "2012-10-17"

INLINE_POLICY_NAME = "eventbridge-component"
"""Name of the inline policy attached to every managed role."""

# Read-only CloudWatch metrics and logs access for the monitoring principal
META_ROLE_ACTIONS = [
    "cloudwatch:Describe*",
    "cloudwatch:Get*",
    "cloudwatch:List*",
    "logs:Get*",
    "logs:List*",
    "logs:Describe*",
    "logs:TestMetricFilter",
    "logs:FilterLogEvents",
]

EXECUTION_ROLE_ACTIONS = [
    "logs:CreateLogGroup",
    "logs:CreateLogStream",
    "logs:PutLogEvents",
    "events:PutEvents",
    "xray:PutTraceSegments",
    "xray:PutTelemetryRecords",
]


def meta_role_trust_policy(trusted_account_id: str) -> dict[str, Any]:
    """Trust policy allowing only the given account to assume the meta role."""
    return {
        "Version": POLICY_VERSION,
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"AWS": f"arn:aws:iam::{trusted_account_id}:root"},
                "Action": "sts:AssumeRole",
            }
        ],
    }


def meta_role_policy() -> dict[str, Any]:
    return {
        "Version": POLICY_VERSION,
        "Statement": [
            {
                "Effect": "Allow",
                "Action": list(META_ROLE_ACTIONS),
                "Resource": "*",
            }
        ],
    }


def execution_role_trust_policy() -> dict[str, Any]:
    """Trust policy for compute triggered by the bus."""
    return {
        "Version": POLICY_VERSION,
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"Service": "lambda.amazonaws.com"},
                "Action": "sts:AssumeRole",
            }
        ],
    }


def execution_role_policy() -> dict[str, Any]:
    return {
        "Version": POLICY_VERSION,
        "Statement": [
            {
                "Effect": "Allow",
                "Action": list(EXECUTION_ROLE_ACTIONS),
                "Resource": "*",
            }
        ],
    }
