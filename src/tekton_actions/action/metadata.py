"""Labels attached to both generated objects."""

from typing import Dict, Optional

from ..config import DEFAULT_CLUSTER_ID

DISPLAY_NAME_LABEL = "display_name"
RESOURCE_NAME_LABEL = "resource_name"
RESOURCE_KIND_LABEL = "resource_kind"
ENVIRONMENT_LABEL = "environment_unique_name"
CLUSTER_ID_LABEL = "cluster_id"
CLOUD_ACTION_LABEL = "cloud_action"

REQUIRED_LABEL_KEYS = (
    DISPLAY_NAME_LABEL,
    RESOURCE_NAME_LABEL,
    RESOURCE_KIND_LABEL,
    ENVIRONMENT_LABEL,
    CLUSTER_ID_LABEL,
)


def build_labels(
    display_name: str,
    resource_name: str,
    resource_kind: str,
    environment_name: str,
    cluster_id: Optional[str],
    custom_labels: Optional[Dict[str, str]] = None,
    cloud_action: bool = False,
) -> Dict[str, str]:
    """
    Merge custom labels with the auto-generated ones.

    Custom labels go in first and the auto-generated keys are written over
    them, so a caller can never override display_name, resource_name,
    resource_kind, environment_unique_name, cluster_id or cloud_action.
    """
    labels = dict(custom_labels or {})

    labels[DISPLAY_NAME_LABEL] = display_name
    labels[RESOURCE_NAME_LABEL] = resource_name
    labels[RESOURCE_KIND_LABEL] = resource_kind
    labels[ENVIRONMENT_LABEL] = environment_name
    labels[CLUSTER_ID_LABEL] = cluster_id or DEFAULT_CLUSTER_ID
    labels[CLOUD_ACTION_LABEL] = "true" if cloud_action else "false"

    return labels


def missing_required_labels(labels: Optional[Dict[str, str]]) -> list:
    """Required label keys absent from a label set, in canonical order."""
    labels = labels or {}
    return [key for key in REQUIRED_LABEL_KEYS if key not in labels]
