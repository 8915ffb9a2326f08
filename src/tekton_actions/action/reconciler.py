"""
Create, read, update, delete and import of Tekton actions.

An action is a Task plus the credential StepAction it references. Writes go
StepAction first so the Task's reference always has a target; deletes go Task
first so the reference is removed before its target. Nothing is retried or
rolled back. A failure between the two calls leaves an orphaned StepAction,
which is logged and surfaced to the caller.
"""

import re
from typing import Optional

from ..config import STEP_ACTION_KIND, TASK_KIND, get_cluster_id
from ..errors import NotFoundError, ResolutionError, StoreError, ValidationError
from ..helpers.logger import get_logger
from .builders import build_credential_step_action, build_task, resolve_namespace
from .credentials import AuthConfig
from .metadata import (
    CLOUD_ACTION_LABEL,
    build_labels,
    missing_required_labels,
)
from .models import (
    ActionSpec,
    ActionState,
    CredentialFlavor,
    ImportResult,
    ResourceIdentity,
    StepActionObject,
    TaskObject,
)
from .naming import MAX_NAME_LENGTH, credential_setup_id_for, generate_identity
from .store import ObjectStore

logger = get_logger("reconciler")

IMPORT_ID_PATTERN = re.compile(r"^([^/]+)/([^/]+)$")
_NAME_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")


class ActionReconciler:
    """Keeps the Task and StepAction of an action in sync with its spec."""

    def __init__(
        self,
        store: ObjectStore,
        flavor: CredentialFlavor,
        auth: Optional[AuthConfig] = None,
        cluster_id: Optional[str] = None,
        step_action_image: Optional[str] = None,
    ):
        """
        Initialize reconciler.

        Args:
            store: Object store the Tekton resources live in
            flavor: Credential flavor of the actions this reconciler manages
            auth: Resolved AWS auth config, required for the AWS flavor
            cluster_id: Cluster identifier label (defaults to CLUSTER_ID / "na")
            step_action_image: Image the credential StepAction runs in
                (defaults to the flavor's base image)
        """
        if flavor == CredentialFlavor.AWS and auth is None:
            raise ResolutionError(
                "AWS actions require a resolved AWS auth configuration"
            )

        self.store = store
        self.flavor = flavor
        self.auth = auth
        self.cluster_id = cluster_id or get_cluster_id()
        self.step_action_image = step_action_image

    def build_objects(self, identity: ResourceIdentity, spec: ActionSpec):
        """Build the (StepAction, Task) pair for a spec under a fixed identity."""
        _check_identity(identity)

        labels = build_labels(
            spec.display_name,
            spec.resource_name,
            spec.resource_kind,
            spec.environment_name,
            self.cluster_id,
            spec.labels,
            cloud_action=self.flavor.is_cloud,
        )
        namespace = resolve_namespace(spec)

        step_action = build_credential_step_action(
            identity,
            namespace,
            labels,
            self.flavor,
            auth=self.auth,
            image=self.step_action_image,
        )
        task = build_task(identity, spec, labels, self.flavor, auth=self.auth)
        return step_action, task

    def create(self, spec: ActionSpec) -> ActionState:
        """Create the StepAction, then the Task."""
        identity = generate_identity(
            spec.resource_name, spec.environment_name, spec.display_name
        )
        namespace = resolve_namespace(spec)
        step_action, task = self.build_objects(identity, spec)

        logger.info(f"Creating action {namespace}/{identity.task_id}")

        self.store.create(namespace, step_action.to_manifest())
        logger.debug(f"Created StepAction {namespace}/{step_action.name}")

        try:
            self.store.create(namespace, task.to_manifest())
        except StoreError:
            logger.warning(
                f"Task creation failed; StepAction {namespace}/{step_action.name} "
                f"is left without a Task"
            )
            raise
        logger.debug(f"Created Task {namespace}/{task.name}")

        return ActionState(
            id=f"{namespace}/{identity.task_id}",
            namespace=namespace,
            identity=identity,
            flavor=self.flavor,
            spec=spec,
        )

    def read(self, state: ActionState) -> Optional[ActionState]:
        """
        Check the action still exists.

        Only the Task is probed. Returns None when it is gone, which means
        the caller should forget the action even if the StepAction remains.
        """
        try:
            self.store.get(state.namespace, TASK_KIND, state.identity.task_id)
        except NotFoundError:
            logger.info(f"Task {state.id} no longer exists")
            return None

        return state

    def update(self, state: ActionState, spec: ActionSpec) -> ActionState:
        """
        Rebuild both objects from a new spec and replace them.

        The identity and namespace from creation are kept. Each write carries
        the resourceVersion just read from the store, so a concurrent change
        surfaces as ConflictError.
        """
        step_action, task = self.build_objects(state.identity, spec)
        step_action.namespace = state.namespace
        task.namespace = state.namespace

        logger.info(f"Updating action {state.id}")

        self._replace(state.namespace, STEP_ACTION_KIND, step_action)
        self._replace(state.namespace, TASK_KIND, task)

        return ActionState(
            id=state.id,
            namespace=state.namespace,
            identity=state.identity,
            flavor=state.flavor,
            spec=spec,
        )

    def _replace(self, namespace: str, kind: str, obj) -> None:
        current = self.store.get(namespace, kind, obj.name)
        obj.resource_version = current.get("metadata", {}).get("resourceVersion")
        self.store.update(namespace, obj.to_manifest())
        logger.debug(
            f"Updated {kind} {namespace}/{obj.name} from resourceVersion {obj.resource_version}"
        )

    def delete(self, state: ActionState) -> None:
        """Delete the Task, then the StepAction."""
        logger.info(f"Deleting action {state.id}")

        self.store.delete(state.namespace, TASK_KIND, state.identity.task_id)

        try:
            self.store.delete(
                state.namespace, STEP_ACTION_KIND, state.identity.credential_setup_id
            )
        except StoreError:
            logger.warning(
                f"Task {state.id} deleted but StepAction "
                f"{state.namespace}/{state.identity.credential_setup_id} was not"
            )
            raise

    def import_action(self, import_id: str) -> ImportResult:
        """
        Reconstruct action state from an existing Task.

        Args:
            import_id: "namespace/taskName"

        Returns:
            ImportResult whose state has no spec, plus warnings listing what
            must be supplied again
        """
        match = IMPORT_ID_PATTERN.match(import_id or "")
        if not match:
            raise ValidationError(
                f"Expected import ID in format: namespace/taskName, got: {import_id}"
            )
        namespace, task_id = match.group(1), match.group(2)

        manifest = self.store.get(namespace, TASK_KIND, task_id)
        labels = TaskObject.from_manifest(manifest).labels

        missing = missing_required_labels(labels)
        if missing:
            raise ValidationError(
                f"Task {namespace}/{task_id} missing required labels: {', '.join(missing)}"
            )

        identity = ResourceIdentity(
            task_id=task_id, credential_setup_id=credential_setup_id_for(task_id)
        )

        warnings = [
            "Only basic fields were imported. You must manually specify: "
            "environment, resource, steps, params and labels in your configuration."
        ]
        cloud_action = labels.get(CLOUD_ACTION_LABEL)
        expected = "true" if self.flavor.is_cloud else "false"
        if cloud_action is not None and cloud_action != expected:
            warnings.append(
                f"Task {namespace}/{task_id} has {CLOUD_ACTION_LABEL}={cloud_action} "
                f"but is being imported as a {self.flavor.value} action"
            )

        logger.info(f"Imported action {namespace}/{task_id}")

        return ImportResult(
            state=ActionState(
                id=f"{namespace}/{task_id}",
                namespace=namespace,
                identity=identity,
                flavor=self.flavor,
            ),
            labels=labels,
            warnings=warnings,
        )

    def get_step_action(self, state: ActionState) -> StepActionObject:
        """Fetch the current credential StepAction of an action."""
        manifest = self.store.get(
            state.namespace, STEP_ACTION_KIND, state.identity.credential_setup_id
        )
        return StepActionObject.from_manifest(manifest)


def _check_identity(identity: ResourceIdentity) -> None:
    """Reject generated names the object store would refuse."""
    for name in (identity.task_id, identity.credential_setup_id):
        if len(name) > MAX_NAME_LENGTH or not _NAME_PATTERN.match(name):
            raise ValidationError(f"Generated object name is not valid: {name!r}")
