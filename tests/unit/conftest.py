"""Shared fixtures for unit tests."""

import copy
import os
import tempfile

import pytest

from tekton_actions.action.credentials import (
    AssumeRoleChained,
    AssumeRoleSTS,
    InlineCredentials,
)
from tekton_actions.action.models import ActionSpec, EnvVar, Param, Step
from tekton_actions.errors import ConflictError, NotFoundError, TransportError


class InMemoryObjectStore:
    """
    ObjectStore double that behaves like the API server for our purposes.

    Every successful write bumps a global resourceVersion. Updates carrying a
    resourceVersion other than the stored one are rejected with ConflictError.
    Each call is recorded in ``calls`` as (operation, kind, name).
    """

    def __init__(self):
        self.objects = {}
        self.calls = []
        self.failures = {}
        self._version = 0

    def fail_on(self, operation, kind, error=None):
        """Make the next matching call raise instead of touching state."""
        self.failures[(operation, kind)] = error or TransportError(
            "injected failure", operation, kind
        )

    def _check_failure(self, operation, kind):
        error = self.failures.pop((operation, kind), None)
        if error is not None:
            raise error

    def _next_version(self):
        self._version += 1
        return str(self._version)

    def create(self, namespace, manifest):
        kind = manifest["kind"]
        name = manifest["metadata"]["name"]
        self.calls.append(("create", kind, name))
        self._check_failure("create", kind)

        key = (namespace, kind, name)
        if key in self.objects:
            raise ConflictError("already exists", "create", kind, namespace, name)

        stored = copy.deepcopy(manifest)
        stored["metadata"]["resourceVersion"] = self._next_version()
        self.objects[key] = stored
        return copy.deepcopy(stored)

    def get(self, namespace, kind, name):
        self.calls.append(("get", kind, name))
        self._check_failure("get", kind)

        key = (namespace, kind, name)
        if key not in self.objects:
            raise NotFoundError("not found", "get", kind, namespace, name)
        return copy.deepcopy(self.objects[key])

    def update(self, namespace, manifest):
        kind = manifest["kind"]
        name = manifest["metadata"]["name"]
        self.calls.append(("update", kind, name))
        self._check_failure("update", kind)

        key = (namespace, kind, name)
        if key not in self.objects:
            raise NotFoundError("not found", "update", kind, namespace, name)

        current = self.objects[key]["metadata"]["resourceVersion"]
        if manifest["metadata"].get("resourceVersion") != current:
            raise ConflictError(
                f"stale resourceVersion, current is {current}",
                "update",
                kind,
                namespace,
                name,
            )

        stored = copy.deepcopy(manifest)
        stored["metadata"]["resourceVersion"] = self._next_version()
        self.objects[key] = stored
        return copy.deepcopy(stored)

    def delete(self, namespace, kind, name):
        self.calls.append(("delete", kind, name))
        self._check_failure("delete", kind)

        key = (namespace, kind, name)
        if key not in self.objects:
            raise NotFoundError("not found", "delete", kind, namespace, name)
        del self.objects[key]

    def bump(self, namespace, kind, name):
        """Simulate a concurrent writer changing an object."""
        self.objects[(namespace, kind, name)]["metadata"][
            "resourceVersion"
        ] = self._next_version()


@pytest.fixture
def store():
    return InMemoryObjectStore()


@pytest.fixture
def action_spec():
    return ActionSpec(
        display_name="restart",
        resource_name="my-app",
        environment_name="prod",
        resource_kind="service",
        steps=[
            Step(
                name="restart",
                image="bitnami/kubectl:latest",
                script="kubectl rollout restart deployment/${APP}",
                env=[EnvVar(name="APP", value="my-app")],
            )
        ],
        params=[Param(name="REASON")],
        labels={"team": "platform"},
    )


@pytest.fixture
def inline_auth():
    return InlineCredentials(
        access_key="AKIAEXAMPLE", secret_key="secret/Key+Value", region="us-east-1"
    )


@pytest.fixture
def sts_auth():
    return AssumeRoleSTS(
        role_arn="arn:aws:iam::123456789012:role/deployer",
        session_name="terraform-provider-session",
        duration_seconds=3600,
        region="us-west-2",
    )


@pytest.fixture
def chained_auth():
    return AssumeRoleChained(
        role_arn="arn:aws:iam::123456789012:role/target",
        session_name="terraform-0123456789abcdef",
        region="eu-west-1",
    )


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as temp:
        yield temp


@pytest.fixture
def write_file(temp_dir):
    def _write(name, content):
        path = os.path.join(temp_dir, name)
        with open(path, "w") as f:
            f.write(content)
        return path

    return _write
