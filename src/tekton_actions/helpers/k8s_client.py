"""Kubernetes object store for Tekton Tasks and StepActions."""

import os
from typing import Any, Dict, Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from ..config import KIND_PLURALS, TEKTON_GROUP, TEKTON_VERSION
from ..errors import ConflictError, NotFoundError, StoreError, TransportError
from .logger import get_logger

logger = get_logger("k8s_client")


def load_kubernetes_config() -> None:
    """
    Load Kubernetes client configuration.

    Priority order:
    1. In-cluster config (service account token)
    2. KUBECONFIG environment variable
    3. ~/.kube/config file
    """
    try:
        config.load_incluster_config()
        logger.debug("Using in-cluster Kubernetes config")
        return
    except config.ConfigException:
        pass

    kubeconfig_env = os.environ.get("KUBECONFIG")
    if kubeconfig_env:
        try:
            config.load_kube_config(config_file=kubeconfig_env)
            logger.debug(f"Using kubeconfig from KUBECONFIG: {kubeconfig_env}")
            return
        except config.ConfigException as e:
            logger.debug(f"Could not load KUBECONFIG {kubeconfig_env}: {e}")

    default_path = os.path.join(os.path.expanduser("~"), ".kube", "config")
    if os.path.exists(default_path):
        try:
            config.load_kube_config(config_file=default_path)
            logger.debug(f"Using kubeconfig from {default_path}")
            return
        except config.ConfigException as e:
            logger.debug(f"Could not load {default_path}: {e}")

    raise TransportError(
        "unable to load kubernetes config: tried in-cluster, KUBECONFIG env, and ~/.kube/config"
    )


def _plural(kind: str) -> str:
    try:
        return KIND_PLURALS[kind]
    except KeyError:
        raise StoreError(f"Unsupported object kind: {kind}")


def _translate(error: ApiException, operation: str, kind: str, namespace: str, name: str):
    """Map an API error onto the store error taxonomy."""
    message = f"{error.status} {error.reason}"
    if error.status == 404:
        return NotFoundError(message, operation, kind, namespace, name)
    if error.status == 409:
        return ConflictError(message, operation, kind, namespace, name)
    return TransportError(message, operation, kind, namespace, name)


class KubernetesObjectStore:
    """ObjectStore backed by the Tekton custom resources of a cluster."""

    def __init__(self, api: Optional[client.CustomObjectsApi] = None):
        if api is None:
            load_kubernetes_config()
            api = client.CustomObjectsApi()
        self.api = api

    def create(self, namespace: str, manifest: Dict[str, Any]) -> Dict[str, Any]:
        kind = manifest["kind"]
        name = manifest["metadata"]["name"]
        try:
            return self.api.create_namespaced_custom_object(
                TEKTON_GROUP, TEKTON_VERSION, namespace, _plural(kind), manifest
            )
        except ApiException as e:
            raise _translate(e, "create", kind, namespace, name) from e

    def get(self, namespace: str, kind: str, name: str) -> Dict[str, Any]:
        try:
            return self.api.get_namespaced_custom_object(
                TEKTON_GROUP, TEKTON_VERSION, namespace, _plural(kind), name
            )
        except ApiException as e:
            raise _translate(e, "get", kind, namespace, name) from e

    def update(self, namespace: str, manifest: Dict[str, Any]) -> Dict[str, Any]:
        kind = manifest["kind"]
        metadata = manifest.get("metadata", {})
        name = metadata.get("name")
        if not name or not metadata.get("resourceVersion"):
            raise StoreError(
                "missing name or resourceVersion", "update", kind, namespace, name
            )

        try:
            # replace with resourceVersion set is rejected with 409 when stale
            return self.api.replace_namespaced_custom_object(
                TEKTON_GROUP, TEKTON_VERSION, namespace, _plural(kind), name, manifest
            )
        except ApiException as e:
            raise _translate(e, "update", kind, namespace, name) from e

    def delete(self, namespace: str, kind: str, name: str) -> None:
        try:
            self.api.delete_namespaced_custom_object(
                TEKTON_GROUP, TEKTON_VERSION, namespace, _plural(kind), name
            )
        except ApiException as e:
            raise _translate(e, "delete", kind, namespace, name) from e
