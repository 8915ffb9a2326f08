"""Deterministic names for the Task and StepAction generated from an action."""

import hashlib

from .models import ResourceIdentity

MAX_NAME_LENGTH = 63
CREDENTIAL_SETUP_PREFIX = "setup-credentials-"


def truncate_name(name: str) -> str:
    """Cap a name at 63 characters, keeping the trailing hash-bearing part."""
    if len(name) > MAX_NAME_LENGTH:
        return name[-MAX_NAME_LENGTH:]
    return name


def credential_setup_id_for(task_id: str) -> str:
    """StepAction name for a known Task name."""
    return truncate_name(f"{CREDENTIAL_SETUP_PREFIX}{task_id}")


def generate_identity(
    resource_name: str, environment_name: str, display_name: str
) -> ResourceIdentity:
    """
    Generate the Task and StepAction names for an action.

    The names are an MD5 of "resource-environment-display", so the same
    inputs always map to the same objects. Collisions are not detected.

    Args:
        resource_name: Resource name from the blueprint
        environment_name: Unique name of the environment
        display_name: Display name of the action

    Returns:
        ResourceIdentity with task_id (32 hex chars) and credential_setup_id
    """
    hash_input = f"{resource_name}-{environment_name}-{display_name}"
    name_hash = hashlib.md5(hash_input.encode("utf-8")).hexdigest()

    return ResourceIdentity(
        task_id=truncate_name(name_hash),
        credential_setup_id=credential_setup_id_for(name_hash),
    )
