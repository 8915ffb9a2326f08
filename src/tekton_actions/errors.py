"""Error taxonomy for Tekton action reconciliation."""

from typing import Optional


class ActionError(Exception):
    """Base class for all action reconciliation errors."""


class ValidationError(ActionError):
    """Raised when an action manifest, import id or label set is invalid."""


class ResolutionError(ActionError):
    """Raised when the provider credential configuration cannot be resolved."""


class TemplateError(ActionError):
    """Raised when a bootstrap script template cannot be rendered."""


class StoreError(ActionError):
    """Raised when an object store call fails.

    Carries the operation and the object it was applied to so callers can
    tell which half of an action failed.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        kind: Optional[str] = None,
        namespace: Optional[str] = None,
        name: Optional[str] = None,
    ):
        self.operation = operation
        self.kind = kind
        self.namespace = namespace
        self.name = name
        super().__init__(self._format(message))

    def _format(self, message: str) -> str:
        if not self.operation:
            return message
        target = f"{self.kind} {self.namespace}/{self.name}"
        return f"{self.operation} {target} failed: {message}"


class ConflictError(StoreError):
    """Raised when a write is rejected because the resource version is stale."""


class NotFoundError(StoreError):
    """Raised when the requested object does not exist."""


class TransportError(StoreError):
    """Raised when the store call itself failed for any other reason."""
