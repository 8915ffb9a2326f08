"""
Resolve provider-level AWS authentication into exactly one credential shape.

Two provider variants exist:

* dual-mode: region plus either inline access/secret keys or an assume_role
  block. Inline keys win when both are given. Assume-role produces an explicit
  STS call inside the bootstrap script at workflow run time.
* chained-identity: region plus a mandatory assume_role block. The pod's IRSA
  identity is chained to the target role through an AWS config profile, so
  the SDK performs the assumption itself.

The variant is fixed per process; resolution never reaches for global state.
"""

import os
import secrets
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..errors import ResolutionError
from ..helpers.logger import get_logger

logger = get_logger("credentials")

ROLE_ARN_PREFIX = "arn:aws:iam::"
ROLE_ARN_MIN_LENGTH = 20

DEFAULT_SESSION_NAME = "terraform-provider-session"
SESSION_NAME_PREFIX = "terraform-"
FALLBACK_SESSION_NAME_PREFIX = "terraform-session-"

DEFAULT_DURATION_SECONDS = 3600
MIN_DURATION_SECONDS = 900
MAX_DURATION_SECONDS = 43200


class ProviderVariant(str, Enum):
    """Credential policy of the provider deployment."""

    DUAL_MODE = "dual-mode"
    CHAINED_IDENTITY = "chained-identity"


@dataclass(frozen=True)
class AssumeRoleInput:
    """assume_role block as configured, before validation."""

    role_arn: Optional[str] = None
    session_name: Optional[str] = None
    external_id: Optional[str] = None
    duration_seconds: Optional[int] = None


@dataclass(frozen=True)
class ProviderAuthInput:
    """aws block of the provider configuration, before validation."""

    region: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    assume_role: Optional[AssumeRoleInput] = None

    @property
    def has_inline_credentials(self) -> bool:
        return bool(self.access_key) and bool(self.secret_key)


@dataclass(frozen=True)
class InlineCredentials:
    """Static access/secret keys written into the StepAction script."""

    access_key: str
    secret_key: str
    region: str

    def __repr__(self) -> str:
        return f"InlineCredentials(access_key='***', secret_key='***', region='{self.region}')"


@dataclass(frozen=True)
class AssumeRoleSTS:
    """Explicit sts:AssumeRole call made by the script with ambient credentials."""

    role_arn: str
    session_name: str
    duration_seconds: int
    region: str
    external_id: Optional[str] = None


@dataclass(frozen=True)
class AssumeRoleChained:
    """IRSA source profile chained to the target role via source_profile."""

    role_arn: str
    session_name: str
    region: str
    external_id: Optional[str] = None


AuthConfig = Union[InlineCredentials, AssumeRoleSTS, AssumeRoleChained]


def generate_session_name() -> str:
    """
    Random session name for CloudTrail auditing.

    Returns "terraform-<16 hex chars>", or "terraform-session-<pid>" when the
    entropy source is unavailable.
    """
    try:
        return f"{SESSION_NAME_PREFIX}{secrets.token_bytes(8).hex()}"
    except (OSError, NotImplementedError):
        return f"{FALLBACK_SESSION_NAME_PREFIX}{os.getpid()}"


def validate_role_arn(role_arn: Optional[str]) -> str:
    """Check the target role ARN is present and IAM-role shaped."""
    if not role_arn:
        raise ResolutionError("role_arn is required in the assume_role block")

    if len(role_arn) < ROLE_ARN_MIN_LENGTH or not role_arn.startswith(ROLE_ARN_PREFIX):
        raise ResolutionError(
            f"invalid role_arn format: {role_arn}. "
            "Expected format: arn:aws:iam::ACCOUNT_ID:role/ROLE_NAME"
        )

    return role_arn


def validate_duration(duration_seconds: Optional[int]) -> int:
    """Apply the default and check the session duration range."""
    if duration_seconds is None:
        return DEFAULT_DURATION_SECONDS

    if not MIN_DURATION_SECONDS <= duration_seconds <= MAX_DURATION_SECONDS:
        raise ResolutionError(
            f"assume_role duration must be between {MIN_DURATION_SECONDS} (15 minutes) "
            f"and {MAX_DURATION_SECONDS} (12 hours), got: {duration_seconds}"
        )

    return duration_seconds


def resolve(
    auth_input: Optional[ProviderAuthInput],
    variant: ProviderVariant = ProviderVariant.DUAL_MODE,
) -> AuthConfig:
    """
    Validate the provider auth configuration and pick its credential shape.

    Args:
        auth_input: The provider's aws block
        variant: Credential policy of this deployment

    Returns:
        InlineCredentials or AssumeRoleSTS for dual-mode, AssumeRoleChained
        for chained-identity

    Raises:
        ResolutionError: If the configuration is missing, contradictory or out of range
    """
    if auth_input is None:
        raise ResolutionError(
            "AWS configuration is required for AWS actions. "
            "Please add an 'aws' block to your provider configuration"
        )

    if not auth_input.region:
        raise ResolutionError(
            "AWS region is required in the provider configuration. "
            "Please specify 'region' in the aws block"
        )

    if variant == ProviderVariant.DUAL_MODE:
        return _resolve_dual_mode(auth_input)
    if variant == ProviderVariant.CHAINED_IDENTITY:
        return _resolve_chained(auth_input)

    raise ResolutionError(f"Unknown provider variant: {variant}")


def _resolve_dual_mode(auth_input: ProviderAuthInput) -> AuthConfig:
    if auth_input.has_inline_credentials:
        if auth_input.assume_role is not None:
            logger.debug("Inline credentials provided; ignoring assume_role block")
        return InlineCredentials(
            access_key=auth_input.access_key,
            secret_key=auth_input.secret_key,
            region=auth_input.region,
        )

    assume_role = auth_input.assume_role
    if assume_role is None:
        raise ResolutionError(
            "AWS authentication is required. Please provide either "
            "(access_key + secret_key) OR assume_role configuration in the aws block"
        )

    return AssumeRoleSTS(
        role_arn=validate_role_arn(assume_role.role_arn),
        session_name=assume_role.session_name or DEFAULT_SESSION_NAME,
        duration_seconds=validate_duration(assume_role.duration_seconds),
        region=auth_input.region,
        external_id=assume_role.external_id or None,
    )


def _resolve_chained(auth_input: ProviderAuthInput) -> AuthConfig:
    assume_role = auth_input.assume_role
    if assume_role is None:
        raise ResolutionError(
            "assume_role configuration is required in the aws block; "
            "this provider chains the pod's IRSA identity to a target role"
        )

    if auth_input.access_key or auth_input.secret_key:
        logger.warning("Inline AWS credentials are not used by chained-identity provider")
    if assume_role.duration_seconds is not None:
        logger.debug("assume_role duration is managed by the SDK for chained roles; ignoring")

    return AssumeRoleChained(
        role_arn=validate_role_arn(assume_role.role_arn),
        session_name=assume_role.session_name or generate_session_name(),
        region=auth_input.region,
        external_id=assume_role.external_id or None,
    )
