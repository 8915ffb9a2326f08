"""
Bootstrap script templates for the credential StepAction.

Template text lives in resources/scripts/*.sh with {SLOT} placeholders. Shell
expansions such as ${VAR} are left alone. Each auth shape has one render
function that maps its fields onto the template's slots.
"""

import os
import re
import shlex
from typing import Dict, Set

from ..errors import TemplateError
from .credentials import AssumeRoleChained, AssumeRoleSTS, AuthConfig, InlineCredentials

SCRIPTS_DIR = os.path.join(os.path.dirname(__file__), "..", "resources", "scripts")

INLINE_TEMPLATE = "aws_inline.sh"
STS_TEMPLATE = "aws_sts.sh"
CHAINED_TEMPLATE = "aws_chained.sh"
KUBE_TEMPLATE = "kube_credentials.sh"
SETUP_HELPERS_TEMPLATE = "setup_helpers.sh"

# {NAME} not preceded by "$", so ${VAR} stays a shell expansion
_SLOT_PATTERN = re.compile(r"(?<!\$)\{([A-Z][A-Z0-9_]*)\}")


def load_template(name: str) -> str:
    """Read a script template from the package resources."""
    path = os.path.join(SCRIPTS_DIR, name)
    if not os.path.exists(path):
        raise TemplateError(f"Script template not found: {name}")

    with open(path, "r") as f:
        return f.read()


def template_slots(template: str) -> Set[str]:
    """Names of the {SLOT} placeholders in a template."""
    return set(_SLOT_PATTERN.findall(template))


def render_template(name: str, **slots: str) -> str:
    """
    Fill every slot of a template.

    Args:
        name: Template file name under resources/scripts
        **slots: Value for each slot

    Returns:
        Rendered script

    Raises:
        TemplateError: If a slot is left unfilled, an unknown slot is given,
            or a value spans more than one line
    """
    template = load_template(name)
    expected = template_slots(template)

    missing = expected - set(slots)
    if missing:
        raise TemplateError(
            f"Template {name} is missing values for: {', '.join(sorted(missing))}"
        )

    unknown = set(slots) - expected
    if unknown:
        raise TemplateError(
            f"Template {name} has no slots named: {', '.join(sorted(unknown))}"
        )

    for slot, value in slots.items():
        if "\n" in value.rstrip("\n") or "\r" in value:
            raise TemplateError(f"Value for {slot} in {name} must be a single line")

    return _SLOT_PATTERN.sub(lambda match: slots[match.group(1)], template)


def _heredoc_escape(value: str) -> str:
    """Escape a value written inside an unquoted heredoc."""
    return value.replace("\\", "\\\\").replace("$", "\\$").replace("`", "\\`")


def render_inline_script(auth: InlineCredentials) -> str:
    return render_template(
        INLINE_TEMPLATE,
        ACCESS_KEY=auth.access_key,
        SECRET_KEY=auth.secret_key,
        REGION=auth.region,
    )


def render_sts_script(auth: AssumeRoleSTS) -> str:
    external_id_arg = ""
    if auth.external_id:
        external_id_arg = f"--external-id {shlex.quote(auth.external_id)} "

    return render_template(
        STS_TEMPLATE,
        ROLE_ARN=shlex.quote(auth.role_arn),
        SESSION_NAME=shlex.quote(auth.session_name),
        DURATION_SECONDS=str(int(auth.duration_seconds)),
        REGION=shlex.quote(auth.region),
        EXTERNAL_ID_ARG=external_id_arg,
        CONFIG_REGION=auth.region,
    )


def render_chained_script(auth: AssumeRoleChained) -> str:
    external_id_line = ""
    if auth.external_id:
        external_id_line = f"external_id = {_heredoc_escape(auth.external_id)}\n"

    return render_template(
        CHAINED_TEMPLATE,
        ROLE_ARN=_heredoc_escape(auth.role_arn),
        SESSION_NAME=_heredoc_escape(auth.session_name),
        REGION=_heredoc_escape(auth.region),
        EXTERNAL_ID_LINE=external_id_line,
    )


_RENDERERS = {
    InlineCredentials: render_inline_script,
    AssumeRoleSTS: render_sts_script,
    AssumeRoleChained: render_chained_script,
}


def render_credential_script(auth: AuthConfig) -> str:
    """Compile a resolved AWS auth config into its bootstrap script."""
    renderer = _RENDERERS.get(type(auth))
    if renderer is None:
        raise TemplateError(f"No script template for auth config {type(auth).__name__}")
    return renderer(auth)


def render_kube_script() -> str:
    return render_template(KUBE_TEMPLATE)


def render_setup_helpers_script() -> str:
    return render_template(SETUP_HELPERS_TEMPLATE)


def credential_env_for(auth: AuthConfig) -> Dict[str, str]:
    """Files each AWS script is contracted to produce, as env var -> path."""
    env = {"AWS_CONFIG_FILE": "/workspace/.aws/config"}
    if not isinstance(auth, AssumeRoleChained):
        env["AWS_SHARED_CREDENTIALS_FILE"] = "/workspace/.aws/credentials"
    return env
