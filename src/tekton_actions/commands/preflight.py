"""Preflight command: check the provider's AWS auth config end to end."""

import json

import typer
from rich.console import Console

from ..action.credentials import resolve
from ..config import load_provider_config
from ..helpers.error_handler import handle_error, handle_success
from ..helpers.sts import check_auth_config

console = Console()


def preflight_command(provider_config: str = None, output: str = "TEXT") -> None:
    """Resolve the auth config and verify it against STS."""
    config = load_provider_config(provider_config)
    auth = resolve(config.auth_input, config.variant)

    if output.upper() != "JSON":
        console.print(f"[blue]🔍 Checking {type(auth).__name__} in {auth.region}[/blue]")

    result = check_auth_config(auth)

    if output.upper() == "JSON":
        typer.echo(json.dumps(result, indent=2))
        if result["status"] != "success":
            raise typer.Exit(1)
        return

    if result["status"] != "success":
        handle_error(f"AWS auth check failed: {result.get('error', 'unknown error')}")

    handle_success(f"AWS auth check passed ({result['mode']})")
    console.print(f"   Identity: {result['arn']}")
    console.print(f"   Account: {result['account']}")
