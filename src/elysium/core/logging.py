"""structlog setup for the language server and the CLI.

Events are rendered by stdlib ``logging`` handlers through
``structlog.stdlib.ProcessorFormatter``, one handler per configured output.
Two rules come from serving over stdio:

- stdout carries JSON-RPC frames, so with ``protocol_on_stdout`` an output
  configured for stdout is written to stderr instead
- every protocol message is handled inside ``request_context``, which binds a
  short ``request_id`` and the LSP method to each event logged meanwhile
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

from elysium.core.progress import live_display_active

if TYPE_CHECKING:
    from elysium.config.models import LoggingConfig

# pygls traces every JSON-RPC message at DEBUG
_CHATTY_LOGGERS = ("pygls",)


@contextmanager
def request_context(method: str) -> Iterator[str]:
    """Tag every event logged inside the block with a fresh request id."""
    request_id = uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(request_id=request_id, lsp_method=method):
        yield request_id


def current_request_id() -> str | None:
    return structlog.contextvars.get_contextvars().get("request_id")


class _LiveDisplayFilter(logging.Filter):
    """Holds terminal records back while a progress bar owns stderr."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: ARG002
        return not live_display_active()


def configure_logging(
    *,
    config: LoggingConfig | None = None,
    level: str = "INFO",
    json_format: bool = False,
    protocol_on_stdout: bool = False,
) -> None:
    """Install handlers for ``config.outputs`` (or one stderr output at ``level``).

    Args:
        config: Logging configuration with outputs
        level: Root level when no config is given
        json_format: Render the default stderr output as JSON lines
        protocol_on_stdout: stdout is reserved for the language-server stream
    """
    from elysium.config.models import LoggingConfig, LogOutputConfig

    if config is None:
        config = LoggingConfig(
            level=level.upper(),  # type: ignore[arg-type]
            outputs=[LogOutputConfig(format="json" if json_format else "console")],
        )

    levels = logging.getLevelNamesMapping()
    root_level = levels[config.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", key="timestamp"),
    ]
    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfigured by tests and by `serve` after `main`
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(root_level)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(root_level, logging.INFO))

    for output in config.outputs:
        handler = _handler_for(output.destination, protocol_on_stdout)
        handler.setLevel(levels[output.level or config.level])
        handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=_renderer_for(output.format, handler),
                foreign_pre_chain=shared_processors,
            )
        )
        root.addHandler(handler)


def _handler_for(destination: str, protocol_on_stdout: bool) -> logging.Handler:
    if destination == "stdout" and protocol_on_stdout:
        destination = "stderr"

    handler: logging.Handler
    if destination in ("stderr", "stdout"):
        handler = logging.StreamHandler(sys.stderr if destination == "stderr" else sys.stdout)
        handler.addFilter(_LiveDisplayFilter())
    else:
        path = Path(destination)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode="a")
    return handler


def _renderer_for(fmt: str, handler: logging.Handler) -> structlog.types.Processor:
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    stream = getattr(handler, "stream", None)
    colors = stream is not None and stream.isatty()
    return structlog.dev.ConsoleRenderer(colors=colors, pad_event_to=0, pad_level=False)
