"""Terminal feedback for ``elysium check``.

Everything here writes to stderr through one Rich console, so
``check --json`` leaves stdout to the report. While a progress bar is live,
terminal log handlers hold their records back so they do not tear the bar.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TypeVar

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

# Smaller scans finish before a bar is worth drawing
_BAR_THRESHOLD = 100

_console = Console(stderr=True)

_MARKS = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "info": "",
}

_live = threading.Event()

T = TypeVar("T")


def live_display_active() -> bool:
    return _live.is_set()


@contextmanager
def live_display() -> Iterator[None]:
    """Mark stderr as owned by a live display for the duration of the block."""
    _live.set()
    try:
        yield
    finally:
        _live.clear()


def get_console() -> Console:
    return _console


def status(message: str, *, style: str = "info") -> None:
    """Print a one-line summary, prefixed with a mark for ``success`` or ``error``."""
    _console.print(f"{_MARKS.get(style, '')}{message}", highlight=False)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    word = singular if count == 1 else (plural or singular + "s")
    return f"{count} {word}"


def progress(items: Sequence[T], *, desc: str, unit: str = "files") -> Iterator[T]:
    """Yield ``items``, drawing a transient bar on a terminal for large scans."""
    if not (_console.is_terminal and len(items) > _BAR_THRESHOLD):
        yield from items
        return

    with (
        live_display(),
        Progress(
            TextColumn("    {task.description}:"),
            BarColumn(bar_width=25, style="cyan", complete_style="cyan"),
            TaskProgressColumn(),
            TextColumn("{task.completed}/{task.total} {task.fields[unit]}"),
            console=_console,
            transient=True,
        ) as bar,
    ):
        task_id = bar.add_task(desc, total=len(items), unit=unit)
        for item in items:
            yield item
            bar.advance(task_id)
