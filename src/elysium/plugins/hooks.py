"""Hook family: ``HOOK(name, ...)`` definitions and ``HOOK_RUN(name, ...)`` lists."""

from __future__ import annotations

from elysium.config.constants import (
    HOOK_MACRO,
    HOOK_RUN_MACRO,
    HOOKS_DIAGNOSTIC_SOURCE,
    HOOKS_PLUGIN,
)
from elysium.index.diagnostics import DiagnosticMessages
from elysium.index.models import (
    CandidateKind,
    DocumentId,
    MacroCall,
    MacroInvocation,
    MacroKind,
    NameSlot,
    SlotRole,
)
from elysium.plugins.base import MacroPlugin, MacroSpec, identifier


class HookPlugin(MacroPlugin):
    """Indexes hook definitions and the hook names passed to ``HOOK_RUN``.

    Every ``HOOK_RUN`` argument names a hook; an empty argument is still a
    completion position but references nothing.
    """

    name = HOOKS_PLUGIN
    candidate_kind = CandidateKind.HOOK
    messages = DiagnosticMessages(
        source=HOOKS_DIAGNOSTIC_SOURCE,
        unknown_reference="Unknown hook '{name}'",
        duplicate_declaration="Duplicate hook '{name}' (first declared in {path}:{line})",
    )
    specs = (
        MacroSpec(name=HOOK_MACRO, kind=MacroKind.HOOK_DEFINITION, definition_slot=0),
        MacroSpec(name=HOOK_RUN_MACRO, kind=MacroKind.HOOK_REFERENCE_LIST, references_from=0),
    )

    def build_invocation(
        self, document_id: DocumentId, call: MacroCall, spec: MacroSpec
    ) -> MacroInvocation | None:
        declared: NameSlot | None = None
        references: list[NameSlot] = []
        for argument in call.arguments:
            role = spec.role_of(argument.index)
            name = identifier(argument)
            if name is None:
                continue
            if role is SlotRole.DEFINITION:
                declared = NameSlot(name, argument.span)
            elif role is SlotRole.REFERENCE:
                references.append(NameSlot(name, argument.span))

        if spec.kind is MacroKind.HOOK_DEFINITION and declared is None:
            return None

        return MacroInvocation(
            kind=spec.kind,
            macro=call.macro,
            document_id=document_id,
            span=call.span,
            arguments=call.arguments,
            declared=declared,
            references=tuple(references),
            detail="hook" if declared is not None else None,
        )
