"""CLI utilities shared by commands."""

from pathlib import Path
from typing import Any

import click

from elysium.config.constants import PLUGIN_NAMES
from elysium.config.loader import load_config
from elysium.config.models import ElysiumConfig
from elysium.core.errors import ConfigError

plugin_option = click.option(
    "--plugin",
    "plugins",
    multiple=True,
    type=click.Choice(PLUGIN_NAMES),
    help="Macro family to enable (repeatable). Default: all.",
)


def resolve_config(project_root: Path, **overrides: Any) -> ElysiumConfig:
    """Load config for a project, turning ConfigError into a CLI error."""
    try:
        return load_config(project_root, **{k: v for k, v in overrides.items() if v})
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
