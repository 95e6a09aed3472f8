"""IAM role reconciliation for the execution role and the meta role.

Deploy never deletes roles; it creates or updates them in place. Roles are
only deleted by the teardown path, and only the ones this component created.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from botocore.exceptions import ClientError

from .exceptions import RemoteServiceError, RoleNotFoundError
from .models import DesiredConfig, PersistedState, RoleRef
from .naming import account_id_from_arn, execution_role_name, meta_role_name
from .policies import (
    INLINE_POLICY_NAME,
    execution_role_policy,
    execution_role_trust_policy,
    meta_role_policy,
    meta_role_trust_policy,
)
from .remote import is_not_found

logger = logging.getLogger(__name__)


async def get_role(iam: Any, name: str) -> dict[str, Any] | None:
    """Return the role description, or None if it does not exist."""
    try:
        response = await iam.get_role(RoleName=name)
    except ClientError as e:
        if is_not_found(e):
            return None
        raise RemoteServiceError.from_client_error("GetRole", e) from e
    role: dict[str, Any] = response["Role"]
    return role


async def deploy_role(
    iam: Any,
    name: str,
    description: str,
    trust_policy: dict[str, Any],
    policy: dict[str, Any],
) -> str:
    """
    Create or update a role with a single inline policy.

    Args:
        iam: aioboto3 IAM client
        name: Role name
        description: Role description
        trust_policy: Assume-role policy document
        policy: Permission policy document, attached inline

    Returns:
        The role ARN
    """
    trust_document = json.dumps(trust_policy)
    existing = await get_role(iam, name)

    try:
        if existing is None:
            logger.info("Creating IAM role %s", name)
            response = await iam.create_role(
                RoleName=name,
                Description=description,
                AssumeRolePolicyDocument=trust_document,
            )
            arn: str = response["Role"]["Arn"]
        else:
            logger.info("Updating IAM role %s", name)
            arn = existing["Arn"]
            await iam.update_assume_role_policy(RoleName=name, PolicyDocument=trust_document)
            await iam.update_role(RoleName=name, Description=description)

        await iam.put_role_policy(
            RoleName=name,
            PolicyName=INLINE_POLICY_NAME,
            PolicyDocument=json.dumps(policy),
        )
    except ClientError as e:
        raise RemoteServiceError.from_client_error(e.operation_name or "DeployRole", e) from e

    return arn


async def ensure_execution_role(
    iam: Any,
    config: DesiredConfig,
    state: PersistedState,
) -> RoleRef:
    """
    Make sure the execution role exists and record it in ``state``.

    A role named by the caller is only looked up, never created. Without a
    role name, the default ``{name}-lambda-role`` is created or updated.

    Raises:
        RoleNotFoundError: If the caller-named role does not exist
    """
    if config.role_name:
        role = await get_role(iam, config.role_name)
        if role is None:
            raise RoleNotFoundError(config.role_name)

        arn = role["Arn"]
        account_id = account_id_from_arn(arn)
        state.use_user_role(arn)
        state.aws_account_id = account_id
        logger.info("Using existing IAM role %s", arn)
        return RoleRef(name=config.role_name, arn=arn, account_id=account_id, user_supplied=True)

    name = execution_role_name(config.name)
    arn = await deploy_role(
        iam,
        name,
        f"The execution role for the AWS EventBridge event bus {config.name}",
        execution_role_trust_policy(),
        execution_role_policy(),
    )
    account_id = account_id_from_arn(arn)
    state.use_default_role(name, arn)
    state.aws_account_id = account_id
    logger.info("Execution role created or updated with ARN %s", arn)
    return RoleRef(name=name, arn=arn, account_id=account_id)


async def ensure_meta_role(
    iam: Any,
    config: DesiredConfig,
    state: PersistedState,
    instance_name: str,
    stage: str,
    trusted_account_id: str,
) -> RoleRef | None:
    """
    Create or update the monitoring role when monitoring is enabled.

    The role can only be assumed from ``trusted_account_id`` and only grants
    read access to CloudWatch metrics and logs.

    Returns:
        The role, or None when monitoring is disabled
    """
    if not config.monitoring_enabled:
        logger.debug("Monitoring disabled, skipping meta role")
        return None

    name = meta_role_name(instance_name)
    arn = await deploy_role(
        iam,
        name,
        f"The meta role for the eventbridge component instance: {instance_name} stage: {stage}",
        meta_role_trust_policy(trusted_account_id),
        meta_role_policy(),
    )
    state.meta_role_name = name
    state.meta_role_arn = arn
    logger.info("Meta role created or updated with ARN %s", arn)
    return RoleRef(name=name, arn=arn, account_id=account_id_from_arn(arn))


async def delete_role(iam: Any, name: str) -> bool:
    """
    Delete a role after removing its policies.

    Returns:
        True if the role was deleted, False if it did not exist
    """
    try:
        response = await iam.list_attached_role_policies(RoleName=name)
        for policy in response.get("AttachedPolicies", []):
            await iam.detach_role_policy(RoleName=name, PolicyArn=policy["PolicyArn"])

        response = await iam.list_role_policies(RoleName=name)
        for policy_name in response.get("PolicyNames", []):
            await iam.delete_role_policy(RoleName=name, PolicyName=policy_name)

        await iam.delete_role(RoleName=name)
    except ClientError as e:
        if is_not_found(e):
            logger.info("IAM role %s already removed", name)
            return False
        raise RemoteServiceError.from_client_error(e.operation_name or "DeleteRole", e) from e

    logger.info("Deleted IAM role %s", name)
    return True
