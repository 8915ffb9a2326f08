"""Delete command: remove an action's Task and StepAction."""

from rich.console import Console
from rich.prompt import Confirm

from ..helpers.error_handler import handle_error, handle_info, handle_success
from .common import build_reconciler, clear_state, read_state

console = Console()


def delete_command(
    state_file: str, provider_config: str = None, force: bool = False
) -> None:
    """Delete the action recorded in the state file, then remove the file."""
    state = read_state(state_file)
    if state is None:
        handle_error(f"No action state found in {state_file}")

    console.print(f"[yellow]Action:[/yellow] {state.id}")
    console.print(f"  Task: {state.identity.task_id}")
    console.print(f"  StepAction: {state.identity.credential_setup_id}")

    if not force and not Confirm.ask("Are you sure you want to continue?"):
        handle_info("Deletion cancelled")
        return

    reconciler = build_reconciler(state.flavor, provider_config)
    reconciler.delete(state)
    clear_state(state_file)

    handle_success(f"Deleted action {state.id}")
