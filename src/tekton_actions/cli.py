#!/usr/bin/env python3
"""
Tekton Actions CLI - Manage Tekton Tasks and their credential StepActions
"""

import logging
import os

import typer
import yaml
from rich.console import Console

from . import __version__
from .commands.apply import apply_command
from .commands.common import DEFAULT_STATE_FILE
from .commands.delete import delete_command
from .commands.import_action import import_command
from .commands.preflight import preflight_command
from .commands.render import render_command
from .commands.show import show_command
from .errors import ActionError
from .helpers.error_handler import handle_error
from .helpers.logger import setup_logger

console = Console()


def configure_logging(output_format: str = "TEXT", log_level: str = None):
    """Configure logging based on output format and log level."""
    # Set log level: CLI option > environment > default
    if log_level is None:
        log_level = os.environ.get("TEKTON_ACTIONS_LOG_LEVEL", "INFO")

    # Machine-readable output sends logs to stderr to keep stdout clean
    json_output = output_format.upper() in ("JSON", "YAML")

    setup_logger("tekton_actions", log_level.upper(), json_output)

    # module loggers are configured at import time; align their levels
    for name, existing in list(logging.Logger.manager.loggerDict.items()):
        if name.startswith("tekton_actions.") and isinstance(existing, logging.Logger):
            existing.setLevel(log_level.upper())


def run_command(command, *args, **kwargs) -> None:
    """Run a command function, turning action errors into CLI errors."""
    try:
        command(*args, **kwargs)
    except (ActionError, FileNotFoundError, ValueError, yaml.YAMLError) as e:
        handle_error(e)


app = typer.Typer(
    help="Tekton Actions CLI - Manage Tekton Tasks and their credential StepActions",
    no_args_is_help=True,
    add_completion=False,
    epilog="💡 Use 'tekton-actions <command> --help' for command-specific help",
)


# Global log level option
LOG_LEVEL = None


@app.callback()
def main(
    ctx: typer.Context,
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        case_sensitive=False,
    ),
):
    """Tekton Actions CLI - Manage Tekton Tasks and their credential StepActions."""
    global LOG_LEVEL
    LOG_LEVEL = log_level


@app.command(
    "render",
    help="Print the StepAction and Task for an action manifest. Example: tekton-actions render -f action.yaml --flavor aws",
    rich_help_panel="Action Commands",
)
def render(
    manifest_file: str = typer.Option(
        "action.yaml", "--file", "-f", help="Path to action manifest file"
    ),
    flavor: str = typer.Option(
        "kubernetes", "--flavor", help="Credential flavor: kubernetes (default) or aws"
    ),
    provider_config: str = typer.Option(
        None,
        "--provider-config",
        "-p",
        help="Path to provider config (defaults to $TEKTON_ACTIONS_PROVIDER_CONFIG)",
    ),
    output: str = typer.Option(
        "YAML", "--output", "-o", help="Output format: YAML (default) or JSON"
    ),
):
    """Render the Tekton objects without touching the cluster."""
    configure_logging("YAML", LOG_LEVEL)
    run_command(render_command, manifest_file, flavor, provider_config, output)


@app.command(
    "apply",
    help="Create an action, or update it when the state file exists. Example: tekton-actions apply -f action.yaml",
    rich_help_panel="Action Commands",
)
def apply(
    manifest_file: str = typer.Option(
        "action.yaml", "--file", "-f", help="Path to action manifest file"
    ),
    state_file: str = typer.Option(
        DEFAULT_STATE_FILE, "--state-file", "-s", help="Path to action state file"
    ),
    flavor: str = typer.Option(
        "kubernetes",
        "--flavor",
        help="Credential flavor for new actions: kubernetes (default) or aws",
    ),
    provider_config: str = typer.Option(
        None,
        "--provider-config",
        "-p",
        help="Path to provider config (defaults to $TEKTON_ACTIONS_PROVIDER_CONFIG)",
    ),
):
    """Create or update the Task and StepAction of an action."""
    configure_logging("TEXT", LOG_LEVEL)
    run_command(apply_command, manifest_file, state_file, flavor, provider_config)


@app.command(
    "show",
    help="Show the action recorded in a state file. Example: tekton-actions show --state-file action-state.yaml",
    rich_help_panel="Action Commands",
)
def show(
    state_file: str = typer.Option(
        DEFAULT_STATE_FILE, "--state-file", "-s", help="Path to action state file"
    ),
    provider_config: str = typer.Option(
        None,
        "--provider-config",
        "-p",
        help="Path to provider config (defaults to $TEKTON_ACTIONS_PROVIDER_CONFIG)",
    ),
    output: str = typer.Option(
        "TEXT", "--output", "-o", help="Output format: TEXT (default) or JSON"
    ),
):
    """Read the action; a missing Task clears the state file."""
    configure_logging(output, LOG_LEVEL)
    run_command(show_command, state_file, provider_config, output)


@app.command(
    "delete",
    help="Delete the action recorded in a state file. Example: tekton-actions delete --force",
    rich_help_panel="Action Commands",
)
def delete(
    state_file: str = typer.Option(
        DEFAULT_STATE_FILE, "--state-file", "-s", help="Path to action state file"
    ),
    provider_config: str = typer.Option(
        None,
        "--provider-config",
        "-p",
        help="Path to provider config (defaults to $TEKTON_ACTIONS_PROVIDER_CONFIG)",
    ),
    force: bool = typer.Option(False, "--force", help="Skip confirmation prompt"),
):
    """Delete the Task, then the StepAction, then the state file."""
    configure_logging("TEXT", LOG_LEVEL)
    run_command(delete_command, state_file, provider_config, force)


@app.command(
    "import",
    help="Adopt an existing Task into a state file. Example: tekton-actions import tekton-pipelines/<task-id>",
    rich_help_panel="Action Commands",
)
def import_(
    import_id: str = typer.Argument(..., help="Existing Task as NAMESPACE/TASK_ID"),
    state_file: str = typer.Option(
        DEFAULT_STATE_FILE, "--state-file", "-s", help="Path to action state file"
    ),
    flavor: str = typer.Option(
        "kubernetes", "--flavor", help="Credential flavor: kubernetes (default) or aws"
    ),
    provider_config: str = typer.Option(
        None,
        "--provider-config",
        "-p",
        help="Path to provider config (defaults to $TEKTON_ACTIONS_PROVIDER_CONFIG)",
    ),
    force: bool = typer.Option(
        False, "--force", help="Replace an existing state file"
    ),
):
    """Reconstruct action state from an existing Task."""
    configure_logging("TEXT", LOG_LEVEL)
    run_command(
        import_command, import_id, state_file, flavor, provider_config, force
    )


@app.command(
    "preflight",
    help="Check that the provider AWS auth config works. Example: tekton-actions preflight -p provider.yaml",
    rich_help_panel="Provider Commands",
)
def preflight(
    provider_config: str = typer.Option(
        None,
        "--provider-config",
        "-p",
        help="Path to provider config (defaults to $TEKTON_ACTIONS_PROVIDER_CONFIG)",
    ),
    output: str = typer.Option(
        "TEXT", "--output", "-o", help="Output format: TEXT (default) or JSON"
    ),
):
    """Resolve the AWS auth config and verify it with STS."""
    configure_logging(output, LOG_LEVEL)
    run_command(preflight_command, provider_config, output)


@app.command("version", help="Show the CLI version")
def version():
    console.print(f"Tekton Actions CLI v{__version__}")


if __name__ == "__main__":
    app()
