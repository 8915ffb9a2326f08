"""Typed models for actions and the Tekton objects generated from them."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..config import STEP_ACTION_KIND, TASK_KIND, TEKTON_API_VERSION
from ..errors import ValidationError

PARAM_TYPES = ("string", "array", "object")


class CredentialFlavor(str, Enum):
    """Which credential the bootstrap step sets up for the Task."""

    KUBERNETES = "kubernetes"
    AWS = "aws"

    @property
    def is_cloud(self) -> bool:
        return self is CredentialFlavor.AWS


@dataclass(frozen=True)
class EnvVar:
    """Environment variable for a step."""

    name: str
    value: str

    def to_manifest(self) -> Dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class ComputeResources:
    """Compute resource requests and limits (e.g. cpu, memory)."""

    requests: Dict[str, str] = field(default_factory=dict)
    limits: Dict[str, str] = field(default_factory=dict)

    def to_manifest(self) -> Dict[str, Dict[str, str]]:
        """Only non-empty sections are emitted."""
        resources = {}
        if self.requests:
            resources["requests"] = dict(self.requests)
        if self.limits:
            resources["limits"] = dict(self.limits)
        return resources


@dataclass(frozen=True)
class Step:
    """Single user-defined step of an action."""

    name: str
    image: str
    script: str
    resources: Optional[ComputeResources] = None
    env: List[EnvVar] = field(default_factory=list)


@dataclass(frozen=True)
class Param:
    """Task parameter declaration."""

    name: str
    type: str = "string"

    def __post_init__(self):
        """Validate parameter type."""
        if self.type not in PARAM_TYPES:
            raise ValueError(
                f"Param type must be one of {', '.join(PARAM_TYPES)}, got: {self.type}"
            )

    def to_manifest(self) -> Dict[str, str]:
        return {"name": self.name, "type": self.type}


@dataclass(frozen=True)
class ActionSpec:
    """Declarative action submitted by the caller."""

    display_name: str
    resource_name: str
    environment_name: str
    resource_kind: str
    steps: List[Step]
    namespace: Optional[str] = None
    description: Optional[str] = None
    params: List[Param] = field(default_factory=list)
    labels: Dict[str, str] = field(default_factory=dict)
    emit_outputs: bool = False


@dataclass(frozen=True)
class ResourceIdentity:
    """Generated names joining an action to its Task and StepAction."""

    task_id: str
    credential_setup_id: str


@dataclass
class TaskObject:
    """Tekton Task holding the credential step reference and user steps."""

    name: str
    namespace: str
    labels: Dict[str, str]
    description: str
    steps: List[Dict[str, Any]]
    params: List[Dict[str, Any]] = field(default_factory=list)
    workspaces: List[Dict[str, Any]] = field(default_factory=list)
    results: List[Dict[str, Any]] = field(default_factory=list)
    resource_version: Optional[str] = None

    def to_manifest(self) -> Dict[str, Any]:
        """Render the Task as the dict sent to the object store."""
        spec = {
            "description": self.description,
            "steps": self.steps,
            "params": self.params,
        }
        if self.workspaces:
            spec["workspaces"] = self.workspaces
        if self.results:
            spec["results"] = self.results

        return {
            "apiVersion": TEKTON_API_VERSION,
            "kind": TASK_KIND,
            "metadata": _metadata(
                self.name, self.namespace, self.labels, self.resource_version
            ),
            "spec": spec,
        }

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> "TaskObject":
        metadata = manifest.get("metadata", {})
        spec = manifest.get("spec", {})
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            labels=dict(metadata.get("labels") or {}),
            description=spec.get("description", ""),
            steps=list(spec.get("steps") or []),
            params=list(spec.get("params") or []),
            workspaces=list(spec.get("workspaces") or []),
            results=list(spec.get("results") or []),
            resource_version=metadata.get("resourceVersion"),
        )


@dataclass
class StepActionObject:
    """Tekton StepAction carrying the credential bootstrap script."""

    name: str
    namespace: str
    labels: Dict[str, str]
    image: str
    script: str
    params: List[Dict[str, Any]] = field(default_factory=list)
    env: List[Dict[str, Any]] = field(default_factory=list)
    resource_version: Optional[str] = None

    def to_manifest(self) -> Dict[str, Any]:
        """Render the StepAction as the dict sent to the object store."""
        spec = {"image": self.image, "script": self.script}
        if self.params:
            spec["params"] = self.params
        if self.env:
            spec["env"] = self.env

        return {
            "apiVersion": TEKTON_API_VERSION,
            "kind": STEP_ACTION_KIND,
            "metadata": _metadata(
                self.name, self.namespace, self.labels, self.resource_version
            ),
            "spec": spec,
        }

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> "StepActionObject":
        metadata = manifest.get("metadata", {})
        spec = manifest.get("spec", {})
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            labels=dict(metadata.get("labels") or {}),
            image=spec.get("image", ""),
            script=spec.get("script", ""),
            params=list(spec.get("params") or []),
            env=list(spec.get("env") or []),
            resource_version=metadata.get("resourceVersion"),
        )


def _metadata(
    name: str, namespace: str, labels: Dict[str, str], resource_version: Optional[str]
) -> Dict[str, Any]:
    metadata = {"name": name, "namespace": namespace, "labels": dict(labels)}
    if resource_version:
        metadata["resourceVersion"] = resource_version
    return metadata


STATE_KEYS = ("id", "namespace", "flavor", "taskName", "stepActionName")


@dataclass
class ActionState:
    """What is remembered about a reconciled action between operations."""

    id: str
    namespace: str
    identity: ResourceIdentity
    flavor: CredentialFlavor
    spec: Optional[ActionSpec] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize state for a state file; the action spec is stored as given."""
        from .validation import spec_to_dict

        data = {
            "id": self.id,
            "namespace": self.namespace,
            "flavor": self.flavor.value,
            "taskName": self.identity.task_id,
            "stepActionName": self.identity.credential_setup_id,
        }
        if self.spec is not None:
            data["spec"] = spec_to_dict(self.spec)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActionState":
        from .validation import spec_from_dict

        if not isinstance(data, dict):
            raise ValidationError("Invalid state file: expected a mapping")

        missing = [key for key in STATE_KEYS if not data.get(key)]
        if missing:
            raise ValidationError(f"Invalid state file: missing {', '.join(missing)}")

        try:
            flavor = CredentialFlavor(data["flavor"])
        except ValueError:
            raise ValidationError(
                f"Invalid state file: unknown flavor '{data['flavor']}'"
            )

        spec_data = data.get("spec")
        return cls(
            id=data["id"],
            namespace=data["namespace"],
            identity=ResourceIdentity(
                task_id=data["taskName"],
                credential_setup_id=data["stepActionName"],
            ),
            flavor=flavor,
            spec=spec_from_dict(spec_data) if spec_data else None,
        )


@dataclass
class ImportResult:
    """Outcome of importing an existing Task: partial state plus warnings."""

    state: ActionState
    labels: Dict[str, str]
    warnings: List[str] = field(default_factory=list)
