"""Elysium CLI - elysium command."""

import click

from elysium import __version__
from elysium.cli.check import check_command
from elysium.cli.serve import serve_command
from elysium.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="elysium")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Elysium - macro-aware language server for the Cronus kernel tree."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "INFO")


cli.add_command(serve_command, name="serve")
cli.add_command(check_command, name="check")


if __name__ == "__main__":
    cli()
