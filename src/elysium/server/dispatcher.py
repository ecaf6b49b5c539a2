"""Plugin dispatcher: the core's event and query boundary.

Lifecycle events update the document store, then every enabled plugin's
index. Queries fan out to every plugin and merge the results.

Guarantees:
- a plugin raising during an update or a query is logged and contributes
  nothing; the other plugins still run
- a failed update also drops that plugin's old contribution for the
  document, so no stale entries survive
- queries read (document, plugin snapshots) as one consistent pair; if the
  stored copy was closed or replaced by the time the result is ready, the
  result is discarded. Copies are told apart by store revision, so a client
  opening at version 0 still supersedes the disk copy
- no public method raises
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

import structlog

from elysium.core.errors import PluginError
from elysium.index.completion import merge_candidates
from elysium.index.models import CompletionCandidate, Diagnostic, DocumentId, Position
from elysium.index.symbols import IndexSnapshot
from elysium.plugins.base import MacroPlugin
from elysium.server.documents import Document, DocumentStore
from elysium.server.workspace import ProjectScanner, document_id_for

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class DiagnosticBatch:
    """One document's diagnostics, stamped with the version they describe."""

    document_id: DocumentId
    version: int | None
    diagnostics: tuple[Diagnostic, ...]
    stale: bool = False


@dataclass(frozen=True, slots=True)
class WorkspaceStats:
    files_indexed: int
    files_skipped: int
    duration_seconds: float


class PluginDispatcher:
    """Routes document events and queries to the enabled plugins."""

    def __init__(
        self,
        plugins: Sequence[MacroPlugin],
        *,
        store: DocumentStore | None = None,
        scanner: ProjectScanner | None = None,
    ) -> None:
        self.plugins = tuple(plugins)
        self.store = store or DocumentStore()
        self.scanner = scanner
        # Serialises store + index updates against query capture
        self._lock = threading.RLock()

    # -- lifecycle events ---------------------------------------------------

    def load_workspace(
        self, wrap: Callable[[list[Path]], Iterable[Path]] | None = None
    ) -> WorkspaceStats:
        """Index every source file under the project root (startup scan)."""
        if self.scanner is None:
            return WorkspaceStats(0, 0, 0.0)

        start = time.perf_counter()
        paths = list(self.scanner.iter_sources())
        indexed = skipped = 0
        for path in wrap(paths) if wrap is not None else paths:
            if self._index_from_disk(document_id_for(path)):
                indexed += 1
            else:
                skipped += 1

        stats = WorkspaceStats(indexed, skipped, time.perf_counter() - start)
        logger.info(
            "workspace_scanned",
            root=str(self.scanner.root),
            files_indexed=stats.files_indexed,
            files_skipped=stats.files_skipped,
            duration_s=round(stats.duration_seconds, 3),
        )
        return stats

    def document_opened(self, document_id: DocumentId, text: str, version: int) -> None:
        with self._lock:
            self.store.open(document_id, text, version)
            self._update_plugins(document_id, text)
        logger.debug("document_opened", document=document_id, version=version)

    def document_changed(self, document_id: DocumentId, text: str, version: int) -> None:
        with self._lock:
            if self.store.change(document_id, text, version) is None:
                return
            self._update_plugins(document_id, text)
        logger.debug("document_changed", document=document_id, version=version)

    def document_closed(self, document_id: DocumentId) -> None:
        """Stop tracking a buffer; project files fall back to their disk text."""
        with self._lock:
            self.store.close(document_id)
            if self._index_from_disk(document_id):
                logger.debug("document_closed", document=document_id, reverted_to_disk=True)
                return
            self._remove_from_plugins(document_id)
        logger.debug("document_closed", document=document_id, reverted_to_disk=False)

    def file_changed_on_disk(self, document_id: DocumentId) -> None:
        """Watched-file create/change. Open buffers stay authoritative."""
        with self._lock:
            current = self.store.find(document_id)
            if current is not None and current.is_open:
                return
            if not self._index_from_disk(document_id) and current is not None:
                self.store.discard_disk_copy(document_id)
                self._remove_from_plugins(document_id)

    def file_deleted_on_disk(self, document_id: DocumentId) -> None:
        with self._lock:
            if self.store.discard_disk_copy(document_id) is not None:
                self._remove_from_plugins(document_id)
                logger.debug("document_deleted", document=document_id)

    # -- queries --------------------------------------------------------------

    def request_completions(
        self, document_id: DocumentId, position: Position
    ) -> list[CompletionCandidate]:
        document, snapshots = self._capture(document_id)
        if document is None:
            return []

        groups = [
            self._guarded(
                plugin,
                "completion",
                document_id,
                lambda p=plugin, s=snap: p.completions_at(document_id, position, s),
                [],
            )
            for plugin, snap in snapshots
            if plugin.accepts(document_id)
        ]
        candidates = merge_candidates(groups)

        if not self._is_current(document_id, document.revision):
            logger.info("stale_result_discarded", query="completion", document=document_id)
            return []
        return candidates

    def request_diagnostics(self, document_id: DocumentId) -> DiagnosticBatch:
        document, snapshots = self._capture(document_id)
        if document is None:
            return DiagnosticBatch(document_id, None, (), stale=True)

        diagnostics: list[Diagnostic] = []
        for plugin, snap in snapshots:
            if not plugin.accepts(document_id):
                continue
            diagnostics.extend(
                self._guarded(
                    plugin,
                    "diagnostics",
                    document_id,
                    lambda p=plugin, s=snap: p.diagnostics_for(document_id, s),
                    [],
                )
            )

        stale = not self._is_current(document_id, document.revision)
        if stale:
            logger.info("stale_result_discarded", query="diagnostics", document=document_id)
        return DiagnosticBatch(
            document_id, document.version, tuple(diagnostics), stale=stale
        )

    def request_all_diagnostics(self) -> list[DiagnosticBatch]:
        """A batch for every tracked document that currently has diagnostics."""
        with self._lock:
            tracked = {doc.document_id: doc for doc in self.store}
            snapshots = [(plugin, plugin.snapshot()) for plugin in self.plugins]

        merged: dict[DocumentId, list[Diagnostic]] = {}
        for plugin, snap in snapshots:
            grouped = self._guarded(
                plugin, "diagnostics", None, lambda p=plugin, s=snap: p.all_diagnostics(s), {}
            )
            for document_id, diagnostics in grouped.items():
                merged.setdefault(document_id, []).extend(diagnostics)

        batches: list[DiagnosticBatch] = []
        for document_id in sorted(merged):
            document = tracked.get(document_id)
            if document is None:
                continue
            batches.append(
                DiagnosticBatch(
                    document_id,
                    document.version,
                    tuple(merged[document_id]),
                    stale=not self._is_current(document_id, document.revision),
                )
            )
        return batches

    # -- internals --------------------------------------------------------------

    def _capture(
        self, document_id: DocumentId
    ) -> tuple[Document | None, list[tuple[MacroPlugin, IndexSnapshot]]]:
        with self._lock:
            document = self.store.find(document_id)
            if document is None:
                return None, []
            return document, [(plugin, plugin.snapshot()) for plugin in self.plugins]

    def _is_current(self, document_id: DocumentId, revision: int) -> bool:
        return self.store.revision_of(document_id) == revision

    def _index_from_disk(self, document_id: DocumentId) -> bool:
        if self.scanner is None or not self.scanner.contains(document_id):
            return False
        text = self.scanner.read(document_id)
        if text is None:
            return False
        with self._lock:
            if self.store.load_from_disk(document_id, text) is None:
                # Open in the client; the buffer wins
                return True
            self._update_plugins(document_id, text)
        return True

    def _update_plugins(self, document_id: DocumentId, text: str) -> None:
        for plugin in self.plugins:
            if not plugin.accepts(document_id):
                continue
            ok = self._guarded(
                plugin,
                "update",
                document_id,
                lambda p=plugin: p.update_document(document_id, text) or True,
                False,
            )
            if not ok:
                self._guarded(
                    plugin,
                    "remove",
                    document_id,
                    lambda p=plugin: p.remove_document(document_id),
                    False,
                )

    def _remove_from_plugins(self, document_id: DocumentId) -> None:
        for plugin in self.plugins:
            self._guarded(
                plugin,
                "remove",
                document_id,
                lambda p=plugin: p.remove_document(document_id),
                False,
            )

    @staticmethod
    def _guarded(
        plugin: MacroPlugin,
        operation: str,
        document_id: DocumentId | None,
        func: Callable[[], T],
        default: T,
    ) -> T:
        try:
            return func()
        except Exception as e:
            error = PluginError.failed(plugin.name, operation, f"{type(e).__name__}: {e}")
            logger.error(
                "plugin_failed",
                plugin=plugin.name,
                operation=operation,
                document=document_id,
                error=str(error),
                exc_info=True,
            )
            return default
