"""Logging configuration for the Tekton Actions CLI."""

import logging
import os
import sys


def setup_logger(
    name: str, level: str = "INFO", json_output: bool = False
) -> logging.Logger:
    """
    Set up logger with appropriate handlers.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: If True, send logs to stderr to avoid contaminating YAML/JSON stdout

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    # Clear existing handlers
    logger.handlers.clear()

    logger.setLevel(getattr(logging, level.upper()))

    # Machine-readable output keeps stdout clean
    handler = logging.StreamHandler(sys.stderr if json_output else sys.stdout)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)
    logger.propagate = False

    return logger


def get_logger(name: str, json_output: bool = None) -> logging.Logger:
    """Get or create logger with appropriate configuration."""
    logger_name = f"tekton_actions.{name}"

    if json_output is None:
        json_output = _detect_machine_output_mode()

    level = os.environ.get("TEKTON_ACTIONS_LOG_LEVEL", "INFO")
    return setup_logger(logger_name, level, json_output)


def _detect_machine_output_mode() -> bool:
    """
    Detect if stdout carries rendered manifests by checking command line arguments.

    Returns:
        True if the render command or --output YAML/JSON is in use, False otherwise
    """
    args = sys.argv
    for i, arg in enumerate(args):
        if arg == "render":
            return True
        if arg == "--output" and i + 1 < len(args):
            return args[i + 1].upper() in ("JSON", "YAML")
        elif arg.startswith("--output="):
            return arg.split("=", 1)[1].upper() in ("JSON", "YAML")

    return False
