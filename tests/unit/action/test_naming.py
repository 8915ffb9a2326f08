"""Unit tests for generated Task and StepAction names."""

import hashlib
import re

from tekton_actions.action.naming import (
    CREDENTIAL_SETUP_PREFIX,
    MAX_NAME_LENGTH,
    credential_setup_id_for,
    generate_identity,
    truncate_name,
)


class TestGenerateIdentity:
    """Test identity generation from resource, environment and display name."""

    def test_task_id_is_md5_hex(self):
        """Test task id is the MD5 of the dash-joined inputs."""
        identity = generate_identity("my-app", "prod", "restart")

        expected = hashlib.md5(b"my-app-prod-restart").hexdigest()
        assert identity.task_id == expected
        assert re.fullmatch(r"[0-9a-f]{32}", identity.task_id)

    def test_credential_setup_id_has_prefix(self):
        """Test credential setup id is the prefix plus the task id."""
        identity = generate_identity("my-app", "prod", "restart")

        assert identity.credential_setup_id == f"setup-credentials-{identity.task_id}"
        assert len(identity.credential_setup_id) == 50

    def test_identity_is_deterministic(self):
        """Test identical inputs give identical names."""
        first = generate_identity("my-app", "prod", "restart")
        second = generate_identity("my-app", "prod", "restart")

        assert first == second

    def test_different_inputs_give_different_names(self):
        """Test any change in the inputs changes the names."""
        base = generate_identity("my-app", "prod", "restart")

        assert generate_identity("my-app", "staging", "restart") != base
        assert generate_identity("other-app", "prod", "restart") != base
        assert generate_identity("my-app", "prod", "scale") != base

    def test_names_within_length_limit(self):
        """Test both names fit the object name limit for long inputs."""
        identity = generate_identity("r" * 300, "e" * 300, "d" * 300)

        assert len(identity.task_id) <= MAX_NAME_LENGTH
        assert len(identity.credential_setup_id) <= MAX_NAME_LENGTH


class TestTruncateName:
    """Test the trailing-63 truncation rule."""

    def test_short_name_unchanged(self):
        """Test names within the limit are returned as-is."""
        assert truncate_name("setup-credentials-abc") == "setup-credentials-abc"

    def test_exactly_max_length_unchanged(self):
        """Test a 63 character name is not truncated."""
        name = "a" * MAX_NAME_LENGTH
        assert truncate_name(name) == name

    def test_long_name_keeps_suffix(self):
        """Test truncation keeps the trailing characters."""
        name = "x" * 10 + "y" * MAX_NAME_LENGTH

        result = truncate_name(name)

        assert len(result) == MAX_NAME_LENGTH
        assert result == "y" * MAX_NAME_LENGTH
        assert name.endswith(result)


class TestCredentialSetupIdFor:
    """Test deriving the StepAction name from a known Task name."""

    def test_matches_generated_identity(self):
        """Test derivation agrees with generate_identity."""
        identity = generate_identity("my-app", "prod", "restart")

        assert credential_setup_id_for(identity.task_id) == identity.credential_setup_id

    def test_long_task_id_is_truncated(self):
        """Test the prefixed name is capped while keeping the task id suffix."""
        task_id = "t" * 60

        result = credential_setup_id_for(task_id)

        assert len(result) == MAX_NAME_LENGTH
        assert result.endswith(task_id)
        assert (CREDENTIAL_SETUP_PREFIX + task_id).endswith(result)
