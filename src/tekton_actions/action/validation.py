"""
Action manifest validation and conversion to typed specs.
"""

from pathlib import Path
from typing import Any, Dict, List, Tuple

import jsonschema

from ..errors import ValidationError
from ..helpers.utils import load_yaml
from .models import ActionSpec, ComputeResources, EnvVar, Param, Step


def load_schema() -> Dict[str, Any]:
    """Load the action manifest schema."""
    schema_path = Path(__file__).parent / "action-schema.yaml"
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_path}")

    return load_yaml(str(schema_path), substitute=False)


def validate_yaml_syntax(manifest_path: str) -> Tuple[bool, str, Dict[str, Any]]:
    """
    Validate YAML syntax of manifest file.

    Step scripts keep their ${VAR} references; no substitution is applied.

    Returns:
        Tuple of (is_valid, error_message, parsed_data)
    """
    try:
        data = load_yaml(manifest_path, substitute=False)
        return True, "", data
    except FileNotFoundError:
        return False, f"File not found: {manifest_path}", {}
    except Exception as e:
        return False, f"YAML syntax error: {e}", {}


def validate_manifest_schema(
    manifest_data: Dict[str, Any], schema: Dict[str, Any] = None
) -> Tuple[bool, List[str]]:
    """
    Validate manifest data against the schema.

    Args:
        manifest_data: Parsed manifest data
        schema: Schema to validate against (loads default if None)

    Returns:
        Tuple of (is_valid, list_of_error_messages)
    """
    if schema is None:
        schema = load_schema()

    validator = jsonschema.Draft7Validator(schema)
    errors = sorted(validator.iter_errors(manifest_data), key=lambda e: list(e.absolute_path))

    if not errors:
        return True, []

    error_messages = []
    for error in errors:
        path = (
            " -> ".join(str(p) for p in error.absolute_path)
            if error.absolute_path
            else "root"
        )
        error_messages.append(f"Path '{path}': {error.message}")

    return False, error_messages


def validate_manifest_file(manifest_path: str) -> Tuple[bool, List[str], Dict[str, Any]]:
    """
    Validate an action manifest file (YAML syntax + schema).

    Returns:
        Tuple of (is_valid, list_of_error_messages, parsed_data)
    """
    is_valid, error, data = validate_yaml_syntax(manifest_path)
    if not is_valid:
        return False, [error], {}

    is_valid, errors = validate_manifest_schema(data)
    return is_valid, errors, data


def load_action_spec(manifest_path: str) -> ActionSpec:
    """Load, validate and convert an action manifest file."""
    is_valid, errors, data = validate_manifest_file(manifest_path)
    if not is_valid:
        raise ValidationError(
            f"Action manifest validation failed for {manifest_path}:\n"
            + "\n".join(f"  - {error}" for error in errors)
        )

    return spec_from_dict(data)


def spec_from_dict(data: Dict[str, Any]) -> ActionSpec:
    """Create an action spec from a schema-valid manifest dictionary."""
    steps = []
    for step_data in data.get("steps", []):
        resources = None
        resources_data = step_data.get("resources")
        if resources_data:
            resources = ComputeResources(
                requests=dict(resources_data.get("requests") or {}),
                limits=dict(resources_data.get("limits") or {}),
            )

        steps.append(
            Step(
                name=step_data["name"],
                image=step_data["image"],
                script=step_data["script"],
                resources=resources,
                env=[
                    EnvVar(name=env["name"], value=env["value"])
                    for env in step_data.get("env") or []
                ],
            )
        )

    if not steps:
        raise ValidationError("at least one step must be defined")

    return ActionSpec(
        display_name=data["name"],
        resource_name=data["resourceName"],
        environment_name=data["environment"]["uniqueName"],
        resource_kind=data["resource"]["kind"],
        steps=steps,
        namespace=data.get("namespace") or None,
        description=data.get("description") or None,
        params=[
            Param(name=param["name"], type=param["type"])
            for param in data.get("params") or []
        ],
        labels=dict(data.get("labels") or {}),
        emit_outputs=bool(data.get("emitOutputs", False)),
    )


def spec_to_dict(spec: ActionSpec) -> Dict[str, Any]:
    """Inverse of spec_from_dict, producing manifest-shaped data."""
    data = {
        "name": spec.display_name,
        "resourceName": spec.resource_name,
        "environment": {"uniqueName": spec.environment_name},
        "resource": {"kind": spec.resource_kind},
    }
    if spec.namespace:
        data["namespace"] = spec.namespace
    if spec.description:
        data["description"] = spec.description
    if spec.labels:
        data["labels"] = dict(spec.labels)
    if spec.emit_outputs:
        data["emitOutputs"] = True

    steps = []
    for step in spec.steps:
        step_data = {"name": step.name, "image": step.image, "script": step.script}
        if step.resources is not None:
            step_data["resources"] = step.resources.to_manifest()
        if step.env:
            step_data["env"] = [env.to_manifest() for env in step.env]
        steps.append(step_data)
    data["steps"] = steps

    if spec.params:
        data["params"] = [param.to_manifest() for param in spec.params]

    return data
