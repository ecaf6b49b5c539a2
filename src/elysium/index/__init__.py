"""Macro index: scanner, per-plugin symbol tables and query derivation."""

from elysium.index.completion import completions_at, merge_candidates
from elysium.index.diagnostics import DiagnosticMessages, derive_all, diagnostics_for
from elysium.index.models import (
    CandidateKind,
    CompletionCandidate,
    Diagnostic,
    DiagnosticCode,
    DocumentId,
    Location,
    MacroArgument,
    MacroCall,
    MacroInvocation,
    MacroKind,
    NameSlot,
    Position,
    Severity,
    SlotRole,
    Span,
)
from elysium.index.scanner import scan_calls, tokenize
from elysium.index.symbols import IndexSnapshot, SymbolIndex

__all__ = [
    "CandidateKind",
    "CompletionCandidate",
    "Diagnostic",
    "DiagnosticCode",
    "DiagnosticMessages",
    "DocumentId",
    "IndexSnapshot",
    "Location",
    "MacroArgument",
    "MacroCall",
    "MacroInvocation",
    "MacroKind",
    "NameSlot",
    "Position",
    "Severity",
    "SlotRole",
    "Span",
    "SymbolIndex",
    "completions_at",
    "derive_all",
    "diagnostics_for",
    "merge_candidates",
    "scan_calls",
    "tokenize",
]
