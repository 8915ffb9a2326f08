"""CLI messages for action results and reconciliation errors."""

from typing import Iterable, Union

import typer

from ..errors import (
    ConflictError,
    NotFoundError,
    ResolutionError,
    StoreError,
    TemplateError,
    ValidationError,
)

# most specific first
ERROR_TITLES = (
    (ConflictError, "Conflict"),
    (NotFoundError, "Not found"),
    (StoreError, "Cluster error"),
    (ValidationError, "Invalid action"),
    (ResolutionError, "Credential error"),
    (TemplateError, "Script error"),
)

ERROR_HINTS = {
    ConflictError: "The object changed since it was read. Run the command again.",
    NotFoundError: "Run 'tekton-actions show' to refresh the state file.",
}


def describe_error(error: Union[str, Exception]) -> str:
    """Render an error as the lines the CLI prints for it."""
    if isinstance(error, str):
        return f"❌ Error: {error}"

    title = "Error"
    for error_type, error_title in ERROR_TITLES:
        if isinstance(error, error_type):
            title = error_title
            break

    lines = [f"❌ {title}: {error}"]
    if isinstance(error, StoreError) and error.operation:
        lines.append(f"   Object: {error.kind} {error.namespace}/{error.name}")
        lines.append(f"   Operation: {error.operation}")
        hint = ERROR_HINTS.get(type(error))
        if hint:
            lines.append(f"   {hint}")
    return "\n".join(lines)


def handle_error(error: Union[str, Exception], exit_code: int = 1) -> None:
    """Print an error to stderr and exit the CLI."""
    typer.echo(describe_error(error), err=True)
    raise typer.Exit(exit_code)


def handle_warnings(warnings: Iterable[str]) -> None:
    for warning in warnings:
        typer.echo(f"⚠️ Warning: {warning}")


def handle_warning(message: str) -> None:
    handle_warnings([message])


def handle_success(message: str) -> None:
    typer.echo(f"✅ {message}")


def handle_info(message: str) -> None:
    typer.echo(f"ℹ️ {message}")
