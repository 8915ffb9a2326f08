"""Show command: check that a recorded action still exists."""

import json

import typer
from rich.console import Console

from ..errors import NotFoundError
from ..helpers.error_handler import handle_error, handle_warning
from .common import build_reconciler, clear_state, read_state

console = Console()


def show_command(
    state_file: str, provider_config: str = None, output: str = "TEXT"
) -> None:
    """Read the action recorded in the state file; forget it if it is gone."""
    state = read_state(state_file)
    if state is None:
        handle_error(f"No action state found in {state_file}")

    reconciler = build_reconciler(state.flavor, provider_config)
    current = reconciler.read(state)

    if current is None:
        clear_state(state_file)
        handle_warning(f"Action {state.id} no longer exists; cleared {state_file}")
        return

    # Read only probes the Task; a missing StepAction is reported, not fatal
    try:
        step_action = reconciler.get_step_action(current)
    except NotFoundError:
        step_action = None

    if output.upper() == "JSON":
        data = current.to_dict()
        data["stepActionImage"] = step_action.image if step_action else None
        typer.echo(json.dumps(data, indent=2))
        return

    console.print(f"[bold]Action:[/bold] {current.id}")
    console.print(f"  Flavor: {current.flavor.value}")
    console.print(f"  Namespace: {current.namespace}")
    console.print(f"  Task: {current.identity.task_id}")
    if step_action is not None:
        console.print(f"  StepAction: {step_action.name} ({step_action.image})")
    else:
        console.print(f"  StepAction: {current.identity.credential_setup_id} (missing)")
        handle_warning(
            f"StepAction {current.identity.credential_setup_id} no longer exists"
        )
    if current.spec is not None:
        console.print(f"  Display name: {current.spec.display_name}")
        console.print(f"  Steps: {', '.join(step.name for step in current.spec.steps)}")
