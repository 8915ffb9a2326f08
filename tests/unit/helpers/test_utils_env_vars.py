"""Unit tests for YAML loading and environment variable substitution."""

import os
from unittest.mock import patch

import pytest
import yaml

from tekton_actions.helpers.utils import dump_yaml, load_yaml, substitute_env_vars


class TestSubstituteEnvVars:
    """Test environment variable substitution functionality."""

    def test_substitute_simple_env_var(self):
        """Test basic environment variable substitution."""
        with patch.dict(os.environ, {"TEST_VAR": "test_value"}):
            assert substitute_env_vars("${TEST_VAR}") == "test_value"

    def test_substitute_env_var_with_default(self):
        """Test environment variable with default value."""
        with patch.dict(os.environ, {"TEST_VAR": "env_value"}):
            assert substitute_env_vars("${TEST_VAR:default_value}") == "env_value"

        with patch.dict(os.environ, {}, clear=True):
            assert substitute_env_vars("${TEST_VAR:default_value}") == "default_value"

    def test_substitute_env_var_missing_no_default(self):
        """Test missing environment variable without default raises ValueError."""
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="Variable.*MISSING_VAR.*is not set"):
                substitute_env_vars("${MISSING_VAR}")

    def test_substitute_nested_structures(self):
        """Test substitution in nested dicts and lists."""
        with patch.dict(os.environ, {"REGION": "us-east-1", "ROLE": "deployer"}):
            data = {
                "aws": {
                    "region": "${REGION}",
                    "roles": ["arn:aws:iam::123456789012:role/${ROLE}", "static"],
                }
            }

            result = substitute_env_vars(data)

        assert result == {
            "aws": {
                "region": "us-east-1",
                "roles": ["arn:aws:iam::123456789012:role/deployer", "static"],
            }
        }

    def test_non_string_values_untouched(self):
        """Test numbers, booleans and None pass through."""
        data = {"duration": 3600, "enabled": True, "value": None}

        assert substitute_env_vars(data) == data


class TestLoadYaml:
    """Test YAML file loading."""

    def test_load_with_substitution(self, write_file):
        """Test variables are substituted by default."""
        path = write_file("provider.yaml", "aws:\n  region: ${AWS_REGION:us-west-2}\n")

        with patch.dict(os.environ, {}, clear=True):
            assert load_yaml(path) == {"aws": {"region": "us-west-2"}}

    def test_load_without_substitution(self, write_file):
        """Test substitution can be turned off."""
        path = write_file("action.yaml", "script: echo ${HOME}\n")

        assert load_yaml(path, substitute=False) == {"script": "echo ${HOME}"}

    def test_empty_file(self, write_file):
        """Test an empty file loads as an empty dict."""
        assert load_yaml(write_file("empty.yaml", "")) == {}

    def test_missing_file(self):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="File not found"):
            load_yaml("/nonexistent/file.yaml")

    def test_invalid_yaml(self, write_file):
        """Test malformed YAML raises YAMLError."""
        path = write_file("bad.yaml", "key: [unclosed\n")

        with pytest.raises(yaml.YAMLError, match="Invalid YAML syntax"):
            load_yaml(path)


class TestDumpYaml:
    """Test YAML serialization."""

    def test_keeps_key_order(self):
        """Test keys are written in insertion order."""
        text = dump_yaml({"kind": "Task", "apiVersion": "tekton.dev/v1beta1"})

        assert text.index("kind") < text.index("apiVersion")

    def test_block_style(self):
        """Test nested values use block style."""
        text = dump_yaml({"metadata": {"labels": {"a": "b"}}})

        assert text == "metadata:\n  labels:\n    a: b\n"
