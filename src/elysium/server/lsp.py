"""pygls adapter between the language-server protocol and the dispatcher.

The adapter converts URIs to document ids and protocol types to core types
and back; all behaviour lives in ``PluginDispatcher``. After every document
event it pulls project-wide diagnostics and publishes them, clearing files
whose diagnostics went away (an edit in one file can fix or break
references in another).
"""

from __future__ import annotations

from pathlib import Path

import structlog
from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer
from pygls.uris import from_fs_path, to_fs_path

from elysium import __version__
from elysium.config.constants import COMPLETION_TRIGGER_CHARACTERS, SERVER_NAME
from elysium.config.models import ElysiumConfig
from elysium.core.logging import request_context
from elysium.index.models import (
    CandidateKind,
    CompletionCandidate,
    Diagnostic,
    DocumentId,
    Position,
    Span,
)
from elysium.plugins import instantiate_plugins
from elysium.server.dispatcher import DiagnosticBatch, PluginDispatcher
from elysium.server.workspace import ProjectScanner, document_id_for

logger = structlog.get_logger()

_CANDIDATE_KINDS = {
    CandidateKind.DEPENDENCY: lsp.CompletionItemKind.Constant,
    CandidateKind.HOOK: lsp.CompletionItemKind.Function,
}


def uri_to_document_id(uri: str) -> DocumentId:
    path = to_fs_path(uri)
    return document_id_for(path) if path else uri


def document_id_to_uri(document_id: DocumentId) -> str:
    if "://" in document_id:
        return document_id
    return from_fs_path(document_id) or document_id


def to_lsp_range(span: Span) -> lsp.Range:
    return lsp.Range(
        start=lsp.Position(line=span.start.line, character=span.start.character),
        end=lsp.Position(line=span.end.line, character=span.end.character),
    )


def to_lsp_diagnostic(diagnostic: Diagnostic) -> lsp.Diagnostic:
    related = [
        lsp.DiagnosticRelatedInformation(
            location=lsp.Location(
                uri=document_id_to_uri(location.document_id),
                range=to_lsp_range(location.span),
            ),
            message="first declared here",
        )
        for location in diagnostic.related
    ]
    return lsp.Diagnostic(
        range=to_lsp_range(diagnostic.span),
        message=diagnostic.message,
        severity=lsp.DiagnosticSeverity(int(diagnostic.severity)),
        code=diagnostic.code.value,
        source=diagnostic.source,
        related_information=related or None,
    )


def to_lsp_completion(candidate: CompletionCandidate) -> lsp.CompletionItem:
    return lsp.CompletionItem(
        label=candidate.label,
        kind=_CANDIDATE_KINDS.get(candidate.kind),
        detail=candidate.detail,
    )


class ElysiumLanguageServer(LanguageServer):
    """Language server bound to one dispatcher."""

    def __init__(self, dispatcher: PluginDispatcher) -> None:
        super().__init__(
            SERVER_NAME,
            f"v{__version__}",
            text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
        )
        self.dispatcher = dispatcher
        self.published: set[DocumentId] = set()

    def publish_all_diagnostics(self) -> None:
        batches = self.dispatcher.request_all_diagnostics()
        current: set[DocumentId] = set()
        for batch in batches:
            if batch.stale:
                continue
            current.add(batch.document_id)
            self._publish(batch)

        for document_id in sorted(self.published - current):
            self._publish(DiagnosticBatch(document_id, None, ()))
        self.published = current

    def _publish(self, batch: DiagnosticBatch) -> None:
        self.text_document_publish_diagnostics(
            lsp.PublishDiagnosticsParams(
                uri=document_id_to_uri(batch.document_id),
                diagnostics=[to_lsp_diagnostic(d) for d in batch.diagnostics],
            )
        )


def create_server(dispatcher: PluginDispatcher) -> ElysiumLanguageServer:
    """Build a server with every handled feature registered."""
    server = ElysiumLanguageServer(dispatcher)

    @server.feature(lsp.INITIALIZED)
    def initialized(ls: ElysiumLanguageServer, params: lsp.InitializedParams) -> None:
        with request_context(lsp.INITIALIZED):
            ls.dispatcher.load_workspace()
            ls.publish_all_diagnostics()

    @server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
    def did_open(ls: ElysiumLanguageServer, params: lsp.DidOpenTextDocumentParams) -> None:
        document = params.text_document
        with request_context(lsp.TEXT_DOCUMENT_DID_OPEN):
            ls.dispatcher.document_opened(
                uri_to_document_id(document.uri), document.text, document.version
            )
            ls.publish_all_diagnostics()

    @server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
    def did_change(ls: ElysiumLanguageServer, params: lsp.DidChangeTextDocumentParams) -> None:
        if not params.content_changes:
            return
        # Full sync: the last change carries the whole text
        text = params.content_changes[-1].text
        with request_context(lsp.TEXT_DOCUMENT_DID_CHANGE):
            ls.dispatcher.document_changed(
                uri_to_document_id(params.text_document.uri), text, params.text_document.version
            )
            ls.publish_all_diagnostics()

    @server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
    def did_close(ls: ElysiumLanguageServer, params: lsp.DidCloseTextDocumentParams) -> None:
        with request_context(lsp.TEXT_DOCUMENT_DID_CLOSE):
            ls.dispatcher.document_closed(uri_to_document_id(params.text_document.uri))
            ls.publish_all_diagnostics()

    @server.feature(lsp.WORKSPACE_DID_CHANGE_WATCHED_FILES)
    def did_change_watched_files(
        ls: ElysiumLanguageServer, params: lsp.DidChangeWatchedFilesParams
    ) -> None:
        with request_context(lsp.WORKSPACE_DID_CHANGE_WATCHED_FILES):
            for change in params.changes:
                document_id = uri_to_document_id(change.uri)
                if change.type == lsp.FileChangeType.Deleted:
                    ls.dispatcher.file_deleted_on_disk(document_id)
                else:
                    ls.dispatcher.file_changed_on_disk(document_id)
            ls.publish_all_diagnostics()

    @server.feature(
        lsp.TEXT_DOCUMENT_COMPLETION,
        lsp.CompletionOptions(trigger_characters=list(COMPLETION_TRIGGER_CHARACTERS)),
    )
    def completion(
        ls: ElysiumLanguageServer, params: lsp.CompletionParams
    ) -> lsp.CompletionList | None:
        with request_context(lsp.TEXT_DOCUMENT_COMPLETION):
            candidates = ls.dispatcher.request_completions(
                uri_to_document_id(params.text_document.uri),
                Position(params.position.line, params.position.character),
            )
        if not candidates:
            return None
        return lsp.CompletionList(
            is_incomplete=False, items=[to_lsp_completion(c) for c in candidates]
        )

    return server


def build_dispatcher(config: ElysiumConfig, project_root: Path) -> PluginDispatcher:
    plugins = instantiate_plugins(config.plugins.enabled, config.index.extensions)
    scanner = ProjectScanner.from_config(project_root, config.index)
    return PluginDispatcher(plugins, scanner=scanner)


def serve(config: ElysiumConfig, project_root: Path) -> None:
    """Run the language server until the client disconnects."""
    server = create_server(build_dispatcher(config, project_root))
    logger.info(
        "server_starting",
        project_root=str(project_root),
        plugins=config.plugins.enabled,
        transport=config.server.transport,
    )
    if config.server.transport == "tcp":
        server.start_tcp(config.server.host, config.server.port)
    else:
        server.start_io()
