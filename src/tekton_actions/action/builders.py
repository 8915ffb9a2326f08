"""Pure builders for the Task and credential StepAction of an action."""

from typing import Any, Dict, List, Optional

from ..config import (
    AWS_STEP_ACTION_IMAGE,
    DEFAULT_NAMESPACE,
    HELPERS_IMAGE,
    KUBERNETES_STEP_ACTION_IMAGE,
)
from .credentials import AuthConfig
from .models import (
    ActionSpec,
    CredentialFlavor,
    ResourceIdentity,
    Step,
    StepActionObject,
    TaskObject,
)
from .scripts import (
    credential_env_for,
    render_credential_script,
    render_kube_script,
    render_setup_helpers_script,
)

CREDENTIAL_STEP_NAME = "setup-credentials"
HELPERS_STEP_NAME = "setup-facets-helpers"

KUBECONFIG_PARAM = "FACETS_USER_KUBECONFIG"
USER_EMAIL_PARAM = "FACETS_USER_EMAIL"
KUBECONFIG_PATH = "/workspace/.kube/config"

SHARED_WORKSPACE = "shared-data"
WORKSPACE_BIN = f"$(workspaces.{SHARED_WORKSPACE}.path)/bin"
DEFAULT_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"


def resolve_namespace(spec: ActionSpec) -> str:
    return spec.namespace or DEFAULT_NAMESPACE


def build_step(step: Step, injected_env: Dict[str, str]) -> Dict[str, Any]:
    """
    Render a user step, appending the credential env vars after its own.

    Compute resources are emitted only when requests or limits are non-empty.
    """
    tekton_step = {
        "name": step.name,
        "image": step.image,
        "script": step.script,
    }

    env_list = [env.to_manifest() for env in step.env]
    for name, value in injected_env.items():
        env_list.append({"name": name, "value": value})
    tekton_step["env"] = env_list

    if step.resources is not None:
        compute_resources = step.resources.to_manifest()
        if compute_resources:
            tekton_step["computeResources"] = compute_resources

    return tekton_step


def prepend_workspace_path(step: Dict[str, Any]) -> None:
    """Put the workspace bin directory first on the step's PATH."""
    env_list = step.setdefault("env", [])
    for env in env_list:
        if env.get("name") == "PATH":
            env["value"] = f"{WORKSPACE_BIN}:{env.get('value', '')}"
            return

    env_list.append({"name": "PATH", "value": f"{WORKSPACE_BIN}:{DEFAULT_PATH}"})


def credential_step_reference(
    identity: ResourceIdentity, flavor: CredentialFlavor
) -> Dict[str, Any]:
    """First Task step: a reference to the credential StepAction."""
    step = {
        "name": CREDENTIAL_STEP_NAME,
        "ref": {"name": identity.credential_setup_id},
    }
    if flavor == CredentialFlavor.KUBERNETES:
        step["params"] = [
            {"name": KUBECONFIG_PARAM, "value": f"$(params.{KUBECONFIG_PARAM})"}
        ]
    return step


def setup_helpers_step() -> Dict[str, Any]:
    return {
        "name": HELPERS_STEP_NAME,
        "image": HELPERS_IMAGE,
        "script": render_setup_helpers_script(),
    }


def injected_params(flavor: CredentialFlavor) -> List[Dict[str, str]]:
    """Parameters every Task of this flavor declares ahead of the user's."""
    if flavor == CredentialFlavor.KUBERNETES:
        return [
            {"name": USER_EMAIL_PARAM, "type": "string"},
            {"name": KUBECONFIG_PARAM, "type": "string"},
        ]
    return []


def injected_env(
    flavor: CredentialFlavor, auth: Optional[AuthConfig] = None
) -> Dict[str, str]:
    """Env vars pointing user steps at the files the bootstrap step writes."""
    if flavor == CredentialFlavor.KUBERNETES:
        return {"KUBECONFIG": KUBECONFIG_PATH}
    if auth is None:
        return {"AWS_CONFIG_FILE": "/workspace/.aws/config"}
    return credential_env_for(auth)


def build_task(
    identity: ResourceIdentity,
    spec: ActionSpec,
    labels: Dict[str, str],
    flavor: CredentialFlavor,
    auth: Optional[AuthConfig] = None,
) -> TaskObject:
    """
    Build the Task for an action.

    The credential StepAction reference is always the first step. With
    emit_outputs the helpers step follows it, and every user step gets the
    workspace bin directory on its PATH.
    """
    env = injected_env(flavor, auth)

    steps = [credential_step_reference(identity, flavor)]
    if spec.emit_outputs:
        steps.append(setup_helpers_step())

    for step in spec.steps:
        tekton_step = build_step(step, env)
        if spec.emit_outputs:
            prepend_workspace_path(tekton_step)
        steps.append(tekton_step)

    params = injected_params(flavor) + [param.to_manifest() for param in spec.params]

    workspaces = []
    results = []
    if spec.emit_outputs:
        workspaces.append(
            {
                "name": SHARED_WORKSPACE,
                "description": "Workspace for sharing helper scripts and data between steps",
            }
        )
        results.append(
            {
                "name": "outputs",
                "type": "string",
                "description": "Task outputs as JSON key-value pairs",
            }
        )

    return TaskObject(
        name=identity.task_id,
        namespace=resolve_namespace(spec),
        labels=dict(labels),
        description=spec.description or identity.task_id,
        steps=steps,
        params=params,
        workspaces=workspaces,
        results=results,
    )


def build_credential_step_action(
    identity: ResourceIdentity,
    namespace: str,
    labels: Dict[str, str],
    flavor: CredentialFlavor,
    auth: Optional[AuthConfig] = None,
    image: Optional[str] = None,
) -> StepActionObject:
    """
    Build the StepAction that sets up credentials for the Task.

    The AWS flavor bakes the compiled auth script in and takes no params. The
    Kubernetes flavor takes the base64 kubeconfig as its single param. Without an
    explicit image each flavor runs in its own base image.
    """
    if flavor == CredentialFlavor.AWS:
        if auth is None:
            raise ValueError("AWS StepAction requires a resolved auth config")
        image = image or AWS_STEP_ACTION_IMAGE
        return StepActionObject(
            name=identity.credential_setup_id,
            namespace=namespace,
            labels=dict(labels),
            image=image,
            script=render_credential_script(auth),
        )

    image = image or KUBERNETES_STEP_ACTION_IMAGE
    return StepActionObject(
        name=identity.credential_setup_id,
        namespace=namespace,
        labels=dict(labels),
        image=image,
        script=render_kube_script(),
        params=[{"name": KUBECONFIG_PARAM, "type": "string"}],
        env=[{"name": KUBECONFIG_PARAM, "value": f"$(params.{KUBECONFIG_PARAM})"}],
    )
