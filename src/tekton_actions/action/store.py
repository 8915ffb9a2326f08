"""Interface to the control-plane object store holding Tasks and StepActions."""

from typing import Any, Dict, Protocol


class ObjectStore(Protocol):
    """
    Synchronous object store.

    Each call succeeds or raises NotFoundError, ConflictError or
    TransportError. Manifests are plain dicts at this boundary.
    """

    def create(self, namespace: str, manifest: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def get(self, namespace: str, kind: str, name: str) -> Dict[str, Any]:
        ...

    def update(self, namespace: str, manifest: Dict[str, Any]) -> Dict[str, Any]:
        """Replace an object; manifest metadata.resourceVersion must be current."""
        ...

    def delete(self, namespace: str, kind: str, name: str) -> None:
        ...
