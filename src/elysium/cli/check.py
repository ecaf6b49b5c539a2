"""elysium check command - scan a project once and report diagnostics."""

import json
from pathlib import Path

import click
from rich.table import Table

from elysium.cli.utils import plugin_option, resolve_config
from elysium.core.errors import PluginError
from elysium.core.progress import get_console, pluralize, progress, status
from elysium.index.models import Severity
from elysium.server.dispatcher import DiagnosticBatch
from elysium.server.lsp import build_dispatcher

_SEVERITY_STYLES = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFORMATION: "cyan",
    Severity.HINT: "dim",
}


def _batch_to_dict(batch: DiagnosticBatch, root: Path) -> dict[str, object]:
    return {
        "path": _relative(batch.document_id, root),
        "diagnostics": [
            {
                "line": d.span.start.line + 1,
                "column": d.span.start.character + 1,
                "severity": d.severity.name.lower(),
                "code": d.code.value,
                "source": d.source,
                "message": d.message,
            }
            for d in batch.diagnostics
        ],
    }


def _relative(document_id: str, root: Path) -> str:
    try:
        return str(Path(document_id).relative_to(root))
    except ValueError:
        return document_id


@click.command()
@click.argument(
    "path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
@plugin_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def check_command(path: Path, plugins: tuple[str, ...], as_json: bool) -> None:
    """Scan PATH and print macro diagnostics.

    Exits with status 1 when any error-severity diagnostic is found.
    """
    root = path.resolve()
    config = resolve_config(root, plugins={"enabled": list(plugins)} if plugins else None)
    try:
        dispatcher = build_dispatcher(config, root)
    except PluginError as e:
        raise click.ClickException(str(e)) from e

    stats = dispatcher.load_workspace(
        wrap=lambda paths: progress(paths, desc="Scanning", unit="files")
    )
    batches = dispatcher.request_all_diagnostics()
    errors = sum(
        1 for batch in batches for d in batch.diagnostics if d.severity is Severity.ERROR
    )

    if as_json:
        click.echo(
            json.dumps(
                {
                    "files_indexed": stats.files_indexed,
                    "errors": errors,
                    "files": [_batch_to_dict(batch, root) for batch in batches],
                },
                indent=2,
            )
        )
    else:
        console = get_console()
        if batches:
            table = Table(show_header=True, header_style="bold", box=None)
            table.add_column("Location", style="cyan", no_wrap=True)
            table.add_column("Severity")
            table.add_column("Code", style="dim")
            table.add_column("Message")
            for batch in batches:
                rel = _relative(batch.document_id, root)
                for d in batch.diagnostics:
                    style = _SEVERITY_STYLES.get(d.severity, "")
                    table.add_row(
                        f"{rel}:{d.span.start.line + 1}:{d.span.start.character + 1}",
                        f"[{style}]{d.severity.name.lower()}[/{style}]",
                        d.code.value,
                        d.message,
                    )
            console.print(table)

        total = sum(len(batch.diagnostics) for batch in batches)
        summary = (
            f"{pluralize(stats.files_indexed, 'file')} scanned, "
            f"{pluralize(total, 'diagnostic')} ({pluralize(errors, 'error')})"
        )
        status(summary, style="error" if errors else "success")

    if errors:
        raise SystemExit(1)
