"""Completion derivation from an index snapshot."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from elysium.index.models import (
    CandidateKind,
    CompletionCandidate,
    DocumentId,
    MacroArgument,
    MacroInvocation,
    Position,
    SlotRole,
)
from elysium.index.symbols import IndexSnapshot

SlotRoleResolver = Callable[[str, int], SlotRole]
"""``(macro name, argument index) -> role`` as declared by a plugin."""

DetailResolver = Callable[[str, IndexSnapshot], str | None]


def find_slot(
    invocations: Iterable[MacroInvocation], position: Position
) -> tuple[MacroInvocation, MacroArgument] | None:
    """The invocation and argument whose slot region holds the cursor."""
    for invocation in invocations:
        if not invocation.span.contains(position):
            continue
        for argument in invocation.arguments:
            if argument.region.contains(position):
                return invocation, argument
    return None


def completions_at(
    document_id: DocumentId,
    position: Position,
    snapshot: IndexSnapshot,
    *,
    role_of: SlotRoleResolver,
    kind: CandidateKind,
    describe: DetailResolver | None = None,
) -> list[CompletionCandidate]:
    """Every declared name when the cursor is in a reference slot, else nothing."""
    hit = find_slot(snapshot.invocations_in(document_id), position)
    if hit is None:
        return []
    invocation, argument = hit
    if role_of(invocation.macro, argument.index) is not SlotRole.REFERENCE:
        return []
    return [
        CompletionCandidate(
            label=name,
            kind=kind,
            detail=describe(name, snapshot) if describe is not None else None,
        )
        for name in sorted(snapshot.definitions)
    ]


def merge_candidates(
    groups: Iterable[Sequence[CompletionCandidate]],
) -> list[CompletionCandidate]:
    """Deduplicate by label across plugins; the first plugin to offer a label wins.

    Groups are given in plugin dispatch order. The result is sorted by label.
    """
    seen: dict[str, CompletionCandidate] = {}
    for group in groups:
        for candidate in group:
            seen.setdefault(candidate.label, candidate)
    return [seen[label] for label in sorted(seen)]
