"""elysium serve command - run the language server."""

from pathlib import Path

import click

from elysium.cli.utils import plugin_option, resolve_config
from elysium.core.logging import configure_logging
from elysium.server.lsp import serve


@click.command()
@click.option(
    "--project-root",
    required=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Cronus repository root.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level (overrides config).",
)
@plugin_option
@click.option("--tcp", is_flag=True, help="Listen on TCP instead of stdio.")
@click.option("--host", help="TCP bind address.")
@click.option("--port", type=int, help="TCP port.")
@click.pass_context
def serve_command(
    ctx: click.Context,
    project_root: Path,
    log_level: str | None,
    plugins: tuple[str, ...],
    tcp: bool,
    host: str | None,
    port: int | None,
) -> None:
    """Run the language server for PROJECT_ROOT.

    The project tree is scanned once at startup; afterwards the index follows
    editor buffers and watched-file notifications.
    """
    project_root = project_root.resolve()

    server: dict[str, object] = {}
    if tcp:
        server["transport"] = "tcp"
    if host:
        server["host"] = host
    if port is not None:
        server["port"] = port

    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    level = "DEBUG" if verbose else (log_level.upper() if log_level else None)

    config = resolve_config(
        project_root,
        server=server,
        plugins={"enabled": list(plugins)} if plugins else None,
        logging={"level": level} if level else None,
    )
    configure_logging(
        config=config.logging, protocol_on_stdout=config.server.transport == "stdio"
    )
    serve(config, project_root)
