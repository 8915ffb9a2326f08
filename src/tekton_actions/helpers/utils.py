"""Utility functions for the Tekton Actions CLI."""

import os
import re
from typing import Any, Dict, List, Union

import yaml


def substitute_env_vars(data: Union[Dict, List, str]) -> Union[Dict, List, str]:
    """
    Recursively substitute environment variables in YAML data.

    Supports ${VAR_NAME} and ${VAR_NAME:default_value} syntax.

    Args:
        data: YAML data (dict, list, or string)

    Returns:
        Data with environment variables substituted

    Raises:
        ValueError: If a variable is not set and has no default
    """
    if isinstance(data, dict):
        return {key: substitute_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [substitute_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

        def replace_var(match):
            var_name = match.group(1)
            default_value = match.group(2)

            value = os.getenv(var_name)
            if value is not None:
                return value
            if default_value is not None:
                return default_value
            raise ValueError(
                f"Variable '{var_name}' is not set and has no default value"
            )

        return re.sub(pattern, replace_var, data)
    else:
        return data


def load_yaml(file_path: str, substitute: bool = True) -> Dict[str, Any]:
    """
    Load and parse YAML file.

    Args:
        file_path: Path to the YAML file
        substitute: Apply ${VAR} substitution to the parsed content. Action
            manifests turn this off so step scripts keep their shell variables.

    Returns:
        Parsed YAML content as dictionary

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If the file contains invalid YAML
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(
            f"File not found: {file_path}\n"
            f"Please create the file or specify the correct path."
        )

    try:
        with open(file_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML syntax in {file_path}: {e}")

    if substitute:
        return substitute_env_vars(data)
    return data


def dump_yaml(data: Any) -> str:
    """Serialize data to block-style YAML, keeping key order."""
    return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)
