"""STS preflight checks for the provider's AWS auth configuration."""

from typing import Any, Dict

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..action.credentials import (
    MIN_DURATION_SECONDS,
    AssumeRoleChained,
    AssumeRoleSTS,
    AuthConfig,
    InlineCredentials,
)
from .logger import get_logger

logger = get_logger("sts")


def check_auth_config(auth: AuthConfig) -> Dict[str, Any]:
    """
    Verify the resolved auth config works from the current environment.

    Inline keys are checked with GetCallerIdentity. For assume-role shapes the
    target role is assumed once with the ambient credentials, which is what
    the StepAction will do at workflow run time.

    Returns:
        Dictionary with status, mode and the identity ARN / account on success
    """
    if isinstance(auth, InlineCredentials):
        return _check_inline(auth)
    if isinstance(auth, (AssumeRoleSTS, AssumeRoleChained)):
        return _check_assume_role(auth)

    return {"status": "failed", "error": f"Unsupported auth config: {type(auth).__name__}"}


def _check_inline(auth: InlineCredentials) -> Dict[str, Any]:
    sts = boto3.client(
        "sts",
        region_name=auth.region,
        aws_access_key_id=auth.access_key,
        aws_secret_access_key=auth.secret_key,
    )
    try:
        identity = sts.get_caller_identity()
    except (ClientError, BotoCoreError) as e:
        logger.debug(f"GetCallerIdentity failed: {e}")
        return {"status": "failed", "mode": "inline", "error": str(e)}

    return {
        "status": "success",
        "mode": "inline",
        "account": identity["Account"],
        "arn": identity["Arn"],
    }


def _check_assume_role(auth) -> Dict[str, Any]:
    mode = "sts" if isinstance(auth, AssumeRoleSTS) else "chained"
    params = {
        "RoleArn": auth.role_arn,
        "RoleSessionName": auth.session_name,
        "DurationSeconds": MIN_DURATION_SECONDS,
    }
    if auth.external_id:
        params["ExternalId"] = auth.external_id

    sts = boto3.client("sts", region_name=auth.region)
    try:
        response = sts.assume_role(**params)
    except (ClientError, BotoCoreError) as e:
        logger.debug(f"AssumeRole {auth.role_arn} failed: {e}")
        return {"status": "failed", "mode": mode, "role_arn": auth.role_arn, "error": str(e)}

    assumed = response["AssumedRoleUser"]
    return {
        "status": "success",
        "mode": mode,
        "role_arn": auth.role_arn,
        "arn": assumed["Arn"],
        "account": assumed["Arn"].split(":")[4],
    }
