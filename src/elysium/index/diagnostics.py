"""Diagnostic derivation from an index snapshot.

Diagnostics are recomputed from scratch on every call; the incremental work
already happened when the snapshot's tables were updated.

Rules, per macro family:
- duplicate declaration: a name with several declaring locations is flagged
  at every location but the canonical (first-ordered by document path, then
  span) one
- unknown reference: every reference to a name with no declaration
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import PurePath

from elysium.index.models import (
    Diagnostic,
    DiagnosticCode,
    DocumentId,
    Location,
    Severity,
)
from elysium.index.symbols import IndexSnapshot


@dataclass(frozen=True, slots=True)
class DiagnosticMessages:
    """Per-family wording. Templates receive ``name`` (and ``path``/``line``)."""

    source: str
    unknown_reference: str
    duplicate_declaration: str


def diagnostics_for(
    document_id: DocumentId, snapshot: IndexSnapshot, messages: DiagnosticMessages
) -> list[Diagnostic]:
    """Diagnostics located in ``document_id``, ordered by position."""
    found = [diag for doc, diag in _iter_diagnostics(snapshot, messages) if doc == document_id]
    return sorted(found, key=_sort_key)


def derive_all(
    snapshot: IndexSnapshot, messages: DiagnosticMessages
) -> dict[DocumentId, list[Diagnostic]]:
    """Project-wide diagnostics grouped by document."""
    grouped: defaultdict[DocumentId, list[Diagnostic]] = defaultdict(list)
    for document_id, diag in _iter_diagnostics(snapshot, messages):
        grouped[document_id].append(diag)
    return {doc: sorted(diags, key=_sort_key) for doc, diags in grouped.items()}


def _iter_diagnostics(
    snapshot: IndexSnapshot, messages: DiagnosticMessages
) -> Iterator[tuple[DocumentId, Diagnostic]]:
    for name, locations in snapshot.definitions.items():
        if len(locations) < 2:
            continue
        canonical, *duplicates = locations
        for location in duplicates:
            yield location.document_id, Diagnostic(
                severity=Severity.ERROR,
                message=messages.duplicate_declaration.format(
                    name=name,
                    path=PurePath(canonical.document_id).name,
                    line=canonical.span.start.line + 1,
                ),
                span=location.span,
                code=DiagnosticCode.DUPLICATE_DECLARATION,
                source=messages.source,
                related=(canonical,),
            )

    for name, locations in snapshot.references.items():
        if snapshot.is_defined(name):
            continue
        for location in locations:
            yield location.document_id, _unknown_reference(name, location, messages)


def _unknown_reference(name: str, location: Location, messages: DiagnosticMessages) -> Diagnostic:
    return Diagnostic(
        severity=Severity.ERROR,
        message=messages.unknown_reference.format(name=name),
        span=location.span,
        code=DiagnosticCode.UNKNOWN_REFERENCE,
        source=messages.source,
    )


def _sort_key(diag: Diagnostic) -> tuple[object, ...]:
    return (diag.span, diag.code.value, diag.message)
