"""Render command: print the Tekton objects of an action without applying them."""

import json

import typer

from ..action.naming import generate_identity
from ..action.validation import load_action_spec
from ..helpers.utils import dump_yaml
from .common import build_reconciler, parse_flavor


def render_command(
    manifest_file: str,
    flavor: str = "kubernetes",
    provider_config: str = None,
    output: str = "YAML",
) -> None:
    """
    Print the StepAction and Task an action manifest would produce.

    Args:
        manifest_file: Path to the action manifest
        flavor: Credential flavor (kubernetes or aws)
        provider_config: Provider config path, needed for the aws flavor
        output: YAML (default) or JSON
    """
    spec = load_action_spec(manifest_file)
    reconciler = build_reconciler(
        parse_flavor(flavor), provider_config, connect=False
    )

    identity = generate_identity(
        spec.resource_name, spec.environment_name, spec.display_name
    )
    step_action, task = reconciler.build_objects(identity, spec)
    manifests = [step_action.to_manifest(), task.to_manifest()]

    if output.upper() == "JSON":
        typer.echo(json.dumps(manifests, indent=2))
    else:
        typer.echo("---\n".join(dump_yaml(manifest) for manifest in manifests), nl=False)
