"""Apply command: create an action, or update it when state already exists."""

from rich.console import Console

from ..action.validation import load_action_spec
from ..helpers.error_handler import handle_success
from .common import build_reconciler, parse_flavor, read_state, write_state

console = Console()


def apply_command(
    manifest_file: str,
    state_file: str,
    flavor: str = "kubernetes",
    provider_config: str = None,
) -> None:
    """
    Create or update the action described by a manifest.

    When the state file holds an action it is updated in place, keeping the
    names and namespace it was created with. Otherwise a new action is created
    and its state written to the state file.
    """
    spec = load_action_spec(manifest_file)
    state = read_state(state_file)

    if state is not None:
        reconciler = build_reconciler(state.flavor, provider_config)
        console.print(f"[blue]🔄 Updating action:[/blue] {state.id}")
        state = reconciler.update(state, spec)
        write_state(state_file, state)
        handle_success(f"Updated Task and StepAction for {state.id}")
        return

    reconciler = build_reconciler(parse_flavor(flavor), provider_config)
    console.print(f"[blue]🚀 Creating action:[/blue] {spec.display_name}")
    state = reconciler.create(spec)
    write_state(state_file, state)

    handle_success(f"Created action {state.id}")
    console.print(f"   Task: {state.identity.task_id}")
    console.print(f"   StepAction: {state.identity.credential_setup_id}")
    console.print(f"   State written to {state_file}")
