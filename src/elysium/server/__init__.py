"""Document store, project scan and plugin dispatch.

The pygls adapter lives in ``elysium.server.lsp``.
"""

from elysium.server.dispatcher import DiagnosticBatch, PluginDispatcher, WorkspaceStats
from elysium.server.documents import Document, DocumentOrigin, DocumentStore
from elysium.server.workspace import ProjectScanner, document_id_for

__all__ = [
    "DiagnosticBatch",
    "Document",
    "DocumentOrigin",
    "DocumentStore",
    "PluginDispatcher",
    "ProjectScanner",
    "WorkspaceStats",
    "document_id_for",
]
