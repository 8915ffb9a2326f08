"""Import command: adopt an existing Task into a state file."""

from rich.console import Console

from ..errors import ValidationError
from ..helpers.error_handler import handle_success, handle_warnings
from .common import build_reconciler, parse_flavor, read_state, write_state

console = Console()


def import_command(
    import_id: str,
    state_file: str,
    flavor: str = "kubernetes",
    provider_config: str = None,
    force: bool = False,
) -> None:
    """
    Reconstruct action state from the Task named by NAMESPACE/TASK_ID.

    Only the identity is recovered; the caller has to re-supply the manifest
    before the next apply. An existing state file is only replaced with force,
    since the action spec it records cannot be recovered from the cluster.
    """
    existing = read_state(state_file)
    if existing is not None and not force:
        raise ValidationError(
            f"{state_file} already tracks action {existing.id}; "
            "use --force to replace it"
        )

    reconciler = build_reconciler(parse_flavor(flavor), provider_config)
    result = reconciler.import_action(import_id)

    write_state(state_file, result.state)
    handle_success(f"Imported action {result.state.id}")

    for key in sorted(result.labels):
        console.print(f"  {key}: {result.labels[key]}")

    handle_warnings(result.warnings)
