"""Unit tests for action manifest validation."""

import pytest

from tekton_actions.action.models import ComputeResources, EnvVar, Param
from tekton_actions.action.validation import (
    load_action_spec,
    load_schema,
    spec_from_dict,
    spec_to_dict,
    validate_manifest_file,
    validate_manifest_schema,
)
from tekton_actions.errors import ValidationError

VALID_MANIFEST = """
name: restart
resourceName: my-app
description: Restart the deployment
namespace: ops
environment:
  uniqueName: prod
resource:
  kind: service
  flavor: k8s
  version: "0.1"
labels:
  team: platform
emitOutputs: true
params:
  - name: REASON
    type: string
steps:
  - name: restart
    image: bitnami/kubectl:latest
    script: |
      kubectl rollout restart deployment/${APP}
    resources:
      limits:
        memory: 128Mi
    env:
      - name: APP
        value: my-app
"""


def _minimal(**overrides):
    data = {
        "name": "restart",
        "resourceName": "my-app",
        "environment": {"uniqueName": "prod"},
        "resource": {"kind": "service"},
        "steps": [{"name": "s", "image": "alpine", "script": "true"}],
    }
    data.update(overrides)
    return data


class TestValidateManifestSchema:
    """Test schema validation of parsed manifests."""

    def test_schema_loads(self):
        """Test the packaged schema is a draft-07 object schema."""
        schema = load_schema()

        assert schema["type"] == "object"
        assert "steps" in schema["required"]

    def test_minimal_manifest_valid(self):
        """Test only the required fields are needed."""
        is_valid, errors = validate_manifest_schema(_minimal())

        assert is_valid
        assert errors == []

    @pytest.mark.parametrize(
        "field", ["name", "resourceName", "environment", "resource", "steps"]
    )
    def test_required_fields(self, field):
        """Test each required field is enforced."""
        data = _minimal()
        del data[field]

        is_valid, errors = validate_manifest_schema(data)

        assert not is_valid
        assert any(field in error for error in errors)

    def test_empty_steps_rejected(self):
        """Test at least one step is required."""
        is_valid, errors = validate_manifest_schema(_minimal(steps=[]))

        assert not is_valid
        assert "steps" in errors[0]

    def test_invalid_namespace(self):
        """Test namespaces must be DNS labels."""
        is_valid, errors = validate_manifest_schema(_minimal(namespace="Bad_NS"))

        assert not is_valid
        assert "namespace" in errors[0]

    def test_invalid_param_type(self):
        """Test param types are limited to string, array and object."""
        is_valid, errors = validate_manifest_schema(
            _minimal(params=[{"name": "p", "type": "number"}])
        )

        assert not is_valid
        assert "params -> 0 -> type" in errors[0]

    def test_invalid_env_name(self):
        """Test env var names must be upper-case identifiers."""
        steps = [
            {
                "name": "s",
                "image": "alpine",
                "script": "true",
                "env": [{"name": "lower-case", "value": "x"}],
            }
        ]

        is_valid, _ = validate_manifest_schema(_minimal(steps=steps))

        assert not is_valid

    def test_unknown_top_level_field(self):
        """Test unknown top-level keys are rejected."""
        is_valid, errors = validate_manifest_schema(_minimal(unexpected=True))

        assert not is_valid
        assert "unexpected" in errors[0]

    def test_extra_resource_fields_ignored(self):
        """Test flavor, version and spec under resource are accepted."""
        resource = {"kind": "service", "flavor": "k8s", "version": "0.1", "spec": {}}

        is_valid, _ = validate_manifest_schema(_minimal(resource=resource))

        assert is_valid


class TestValidateManifestFile:
    """Test validation of manifest files on disk."""

    def test_missing_file(self):
        """Test a missing file is reported."""
        is_valid, errors, data = validate_manifest_file("/nonexistent/action.yaml")

        assert not is_valid
        assert "File not found" in errors[0]
        assert data == {}

    def test_invalid_yaml(self, write_file):
        """Test YAML syntax errors are reported."""
        path = write_file("action.yaml", "name: [unclosed\n")

        is_valid, errors, _ = validate_manifest_file(path)

        assert not is_valid
        assert "YAML syntax error" in errors[0]

    def test_scripts_keep_shell_variables(self, write_file):
        """Test ${VAR} in step scripts is not substituted."""
        path = write_file("action.yaml", VALID_MANIFEST)

        is_valid, errors, data = validate_manifest_file(path)

        assert is_valid, errors
        assert "${APP}" in data["steps"][0]["script"]


class TestLoadActionSpec:
    """Test conversion of manifests to action specs."""

    def test_full_manifest(self, write_file):
        """Test every manifest field maps onto the action spec."""
        path = write_file("action.yaml", VALID_MANIFEST)

        spec = load_action_spec(path)

        assert spec.display_name == "restart"
        assert spec.resource_name == "my-app"
        assert spec.environment_name == "prod"
        assert spec.resource_kind == "service"
        assert spec.namespace == "ops"
        assert spec.description == "Restart the deployment"
        assert spec.labels == {"team": "platform"}
        assert spec.emit_outputs is True
        assert spec.params == [Param(name="REASON", type="string")]

        step = spec.steps[0]
        assert step.name == "restart"
        assert step.resources == ComputeResources(limits={"memory": "128Mi"})
        assert step.env == [EnvVar(name="APP", value="my-app")]

    def test_invalid_manifest_raises(self, write_file):
        """Test schema errors are raised as a validation error."""
        path = write_file("action.yaml", "name: restart\n")

        with pytest.raises(ValidationError, match="validation failed"):
            load_action_spec(path)

    def test_defaults(self):
        """Test optional fields default sensibly."""
        spec = spec_from_dict(_minimal())

        assert spec.namespace is None
        assert spec.description is None
        assert spec.params == []
        assert spec.labels == {}
        assert spec.emit_outputs is False

    def test_spec_to_dict_is_valid_manifest(self, write_file):
        """Test a spec written back out passes the schema."""
        spec = load_action_spec(write_file("action.yaml", VALID_MANIFEST))

        data = spec_to_dict(spec)

        assert validate_manifest_schema(data) == (True, [])
        assert spec_from_dict(data) == spec
