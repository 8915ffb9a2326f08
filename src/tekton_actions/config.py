"""Process-level configuration: provider auth settings and cluster identity."""

import functools
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .action.credentials import AssumeRoleInput, ProviderAuthInput, ProviderVariant
from .errors import ResolutionError
from .helpers.utils import load_yaml

DEFAULT_NAMESPACE = "tekton-pipelines"
DEFAULT_CLUSTER_ID = "na"

KUBERNETES_STEP_ACTION_IMAGE = "facetscloud/actions-base-image:v1.0.0"
# the AWS scripts need jq, which only ships in v1.1.0
AWS_STEP_ACTION_IMAGE = "facetscloud/actions-base-image:v1.1.0"
HELPERS_IMAGE = "facetscloud/actions-base-image:v1.1.0"

TEKTON_GROUP = "tekton.dev"
TEKTON_VERSION = "v1beta1"
TEKTON_API_VERSION = f"{TEKTON_GROUP}/{TEKTON_VERSION}"
TASK_KIND = "Task"
STEP_ACTION_KIND = "StepAction"
KIND_PLURALS = {TASK_KIND: "tasks", STEP_ACTION_KIND: "stepactions"}

PROVIDER_CONFIG_ENV = "TEKTON_ACTIONS_PROVIDER_CONFIG"


@dataclass(frozen=True)
class ProviderConfig:
    """Provider configuration, loaded once per process."""

    variant: ProviderVariant = ProviderVariant.DUAL_MODE
    auth_input: Optional[ProviderAuthInput] = None
    # None picks the image matching the credential flavor
    step_action_image: Optional[str] = None


@functools.lru_cache(maxsize=None)
def get_cluster_id() -> str:
    """Return CLUSTER_ID from the environment, read once per process."""
    return os.environ.get("CLUSTER_ID") or DEFAULT_CLUSTER_ID


def load_provider_config(config_path: Optional[str] = None) -> ProviderConfig:
    """
    Load the provider configuration file.

    Args:
        config_path: Path to the provider YAML. Falls back to
            TEKTON_ACTIONS_PROVIDER_CONFIG; with neither, an empty config is returned.

    Returns:
        ProviderConfig with the unresolved AWS auth input
    """
    config_path = config_path or os.environ.get(PROVIDER_CONFIG_ENV)
    if not config_path:
        return ProviderConfig()

    data = load_yaml(config_path)
    return provider_config_from_dict(data)


def provider_config_from_dict(data: Dict[str, Any]) -> ProviderConfig:
    """Build a ProviderConfig from parsed provider YAML."""
    variant_name = data.get("variant", ProviderVariant.DUAL_MODE.value)
    try:
        variant = ProviderVariant(variant_name)
    except ValueError:
        allowed = ", ".join(v.value for v in ProviderVariant)
        raise ResolutionError(
            f"Unknown provider variant '{variant_name}'. Expected one of: {allowed}"
        )

    auth_input = None
    aws_data = data.get("aws")
    if aws_data:
        assume_role = None
        assume_role_data = aws_data.get("assumeRole")
        if assume_role_data:
            duration = assume_role_data.get("duration")
            assume_role = AssumeRoleInput(
                role_arn=assume_role_data.get("roleArn"),
                session_name=assume_role_data.get("sessionName"),
                external_id=assume_role_data.get("externalId"),
                duration_seconds=int(duration) if duration is not None else None,
            )

        auth_input = ProviderAuthInput(
            region=aws_data.get("region"),
            access_key=aws_data.get("accessKey"),
            secret_key=aws_data.get("secretKey"),
            assume_role=assume_role,
        )

    return ProviderConfig(
        variant=variant,
        auth_input=auth_input,
        step_action_image=data.get("stepActionImage"),
    )
