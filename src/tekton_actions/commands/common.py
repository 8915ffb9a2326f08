"""Shared plumbing for CLI commands: reconciler construction and state files."""

import os
from typing import Optional

from ..action.credentials import resolve
from ..action.models import ActionState, CredentialFlavor
from ..action.reconciler import ActionReconciler
from ..config import load_provider_config
from ..errors import ValidationError
from ..helpers.k8s_client import KubernetesObjectStore
from ..helpers.logger import get_logger
from ..helpers.utils import dump_yaml, load_yaml

logger = get_logger("commands")

DEFAULT_STATE_FILE = "action-state.yaml"


def parse_flavor(flavor: str) -> CredentialFlavor:
    try:
        return CredentialFlavor(flavor.lower())
    except ValueError:
        allowed = ", ".join(f.value for f in CredentialFlavor)
        raise ValidationError(f"Unknown flavor '{flavor}'. Expected one of: {allowed}")


def build_reconciler(
    flavor: CredentialFlavor,
    provider_config: Optional[str] = None,
    store=None,
    connect: bool = True,
) -> ActionReconciler:
    """
    Create a reconciler for the given flavor.

    The provider config is only loaded and resolved for the AWS flavor. Without
    an explicit store, one backed by the current Kubernetes context is used
    unless connect is False, in which case the reconciler can only build objects.
    """
    config = load_provider_config(provider_config)

    auth = None
    if flavor == CredentialFlavor.AWS:
        auth = resolve(config.auth_input, config.variant)
        logger.debug(f"Resolved AWS auth as {type(auth).__name__}")

    if store is None and connect:
        store = KubernetesObjectStore()

    return ActionReconciler(
        store, flavor, auth=auth, step_action_image=config.step_action_image
    )


def read_state(state_file: str) -> Optional[ActionState]:
    """Load action state, or None when the state file does not exist."""
    if not os.path.exists(state_file):
        return None

    data = load_yaml(state_file, substitute=False)
    if not data:
        return None
    return ActionState.from_dict(data)


def write_state(state_file: str, state: ActionState) -> None:
    with open(state_file, "w") as f:
        f.write(dump_yaml(state.to_dict()))
    logger.debug(f"Wrote state for {state.id} to {state_file}")


def clear_state(state_file: str) -> None:
    if os.path.exists(state_file):
        os.remove(state_file)
        logger.debug(f"Removed state file {state_file}")
