"""Plugin contract for macro families.

A plugin declares which macros it recognises and what each argument slot
means (``MacroSpec``), turns scanned calls into ``MacroInvocation`` values,
and owns one ``SymbolIndex``. Diagnostics and completions are derived from
that index's snapshot by the shared derivers in ``elysium.index``.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import PurePath

from elysium.index.completion import completions_at
from elysium.index.diagnostics import DiagnosticMessages, derive_all, diagnostics_for
from elysium.index.models import (
    CandidateKind,
    CompletionCandidate,
    Diagnostic,
    DocumentId,
    MacroArgument,
    MacroCall,
    MacroInvocation,
    MacroKind,
    Position,
    SlotRole,
)
from elysium.index.scanner import scan_calls
from elysium.index.symbols import IndexSnapshot, SymbolIndex

_IDENTIFIER_RE = re.compile(r"[A-Za-z_]\w*")


@dataclass(frozen=True, slots=True)
class MacroSpec:
    """Shape and slot roles of one recognised macro."""

    name: str
    kind: MacroKind
    min_args: int = 1
    max_args: int | None = None
    definition_slot: int | None = None
    reference_slots: tuple[int, ...] = ()
    references_from: int | None = None  # every slot from here on is a reference
    detail_slots: tuple[int, ...] = ()

    def accepts(self, argument_count: int) -> bool:
        if argument_count < self.min_args:
            return False
        return self.max_args is None or argument_count <= self.max_args

    def role_of(self, index: int) -> SlotRole:
        if index == self.definition_slot:
            return SlotRole.DEFINITION
        if index in self.reference_slots:
            return SlotRole.REFERENCE
        if self.references_from is not None and index >= self.references_from:
            return SlotRole.REFERENCE
        if index in self.detail_slots:
            return SlotRole.DETAIL
        return SlotRole.IGNORED


def identifier(argument: MacroArgument) -> str | None:
    """The argument's name when it is exactly one identifier token."""
    if len(argument.tokens) != 1:
        return None
    token = argument.tokens[0]
    if token.is_string or not _IDENTIFIER_RE.fullmatch(token.text):
        return None
    return token.text


def unquote(literal: str) -> str:
    if len(literal) >= 2 and literal[0] == '"' and literal[-1] == '"':
        return literal[1:-1]
    return literal.lstrip('"')


class MacroPlugin(ABC):
    """Base class for a macro family.

    Subclasses set ``name``, ``candidate_kind``, ``messages`` and ``specs``
    and implement ``build_invocation``.
    """

    name: str
    candidate_kind: CandidateKind
    messages: DiagnosticMessages
    specs: tuple[MacroSpec, ...]

    def __init__(self, extensions: tuple[str, ...] = (".c",)) -> None:
        self.extensions = extensions
        self.index = SymbolIndex(self.name)
        self._specs = {spec.name: spec for spec in self.specs}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    @abstractmethod
    def build_invocation(
        self, document_id: DocumentId, call: MacroCall, spec: MacroSpec
    ) -> MacroInvocation | None:
        """Map a scanned call onto an invocation, or None to skip it."""
        ...

    # -- scanning and index maintenance ------------------------------------

    def accepts(self, document_id: DocumentId) -> bool:
        return PurePath(document_id).suffix in self.extensions

    def scan(self, document_id: DocumentId, text: str) -> list[MacroInvocation]:
        invocations: list[MacroInvocation] = []
        for call in scan_calls(text, self._specs):
            spec = self._specs[call.macro]
            if not spec.accepts(len(call.arguments)):
                continue
            invocation = self.build_invocation(document_id, call, spec)
            if invocation is not None:
                invocations.append(invocation)
        return invocations

    def update_document(self, document_id: DocumentId, text: str) -> bool:
        """Rescan a document and swap its contribution in the index."""
        return self.index.apply_document_update(document_id, self.scan(document_id, text))

    def remove_document(self, document_id: DocumentId) -> bool:
        return self.index.remove_document(document_id)

    def snapshot(self) -> IndexSnapshot:
        return self.index.snapshot()

    def role_of(self, macro: str, index: int) -> SlotRole:
        spec = self._specs.get(macro)
        return spec.role_of(index) if spec is not None else SlotRole.IGNORED

    # -- queries ------------------------------------------------------------

    def diagnostics_for(
        self, document_id: DocumentId, snapshot: IndexSnapshot | None = None
    ) -> list[Diagnostic]:
        snapshot = snapshot or self.snapshot()
        found = diagnostics_for(document_id, snapshot, self.messages)
        found.extend(self.extra_diagnostics(document_id, snapshot))
        return _ordered(found)

    def all_diagnostics(
        self, snapshot: IndexSnapshot | None = None
    ) -> dict[DocumentId, list[Diagnostic]]:
        snapshot = snapshot or self.snapshot()
        grouped = derive_all(snapshot, self.messages)
        for document_id in snapshot.documents():
            extra = self.extra_diagnostics(document_id, snapshot)
            if extra:
                grouped[document_id] = _ordered(grouped.get(document_id, []) + extra)
        return grouped

    def extra_diagnostics(
        self, document_id: DocumentId, snapshot: IndexSnapshot
    ) -> list[Diagnostic]:
        """Family-specific checks beyond the shared rules."""
        return []

    def completions_at(
        self,
        document_id: DocumentId,
        position: Position,
        snapshot: IndexSnapshot | None = None,
    ) -> list[CompletionCandidate]:
        return completions_at(
            document_id,
            position,
            snapshot or self.snapshot(),
            role_of=self.role_of,
            kind=self.candidate_kind,
            describe=self.describe,
        )

    def describe(self, name: str, snapshot: IndexSnapshot) -> str | None:
        """Completion detail: the canonical declaration's detail and file."""
        location = snapshot.canonical_declaration(name)
        if location is None:
            return None
        invocation = snapshot.declaration_at(location)
        detail = invocation.detail if invocation is not None else None
        filename = PurePath(location.document_id).name
        return f"{detail} ({filename})" if detail else filename


def _ordered(diagnostics: list[Diagnostic]) -> list[Diagnostic]:
    return sorted(diagnostics, key=lambda d: (d.span, d.code.value, d.message))
