"""Dependency-declaration family: ``INIT_TARGET(name, stage, scope, deps...)``.

Slot 0 declares the target name. Slots 1 and 2 are the stage and scope
expressions, shown as completion detail. Every string literal in slot 3 or
later names a dependency, e.g.::

    INIT_TARGET(vfs, STAGE_CORE, SCOPE_GLOBAL, INIT_DEPS("mm", "sched"))
"""

from __future__ import annotations

from collections import Counter

from elysium.config.constants import (
    INIT_DEPS_PLUGIN,
    INIT_DIAGNOSTIC_SOURCE,
    INIT_TARGET_MACRO,
    INIT_TARGET_MIN_ARGS,
)
from elysium.index.diagnostics import DiagnosticMessages
from elysium.index.models import (
    CandidateKind,
    Diagnostic,
    DiagnosticCode,
    DocumentId,
    MacroArgument,
    MacroCall,
    MacroInvocation,
    MacroKind,
    NameSlot,
    Severity,
)
from elysium.index.symbols import IndexSnapshot
from elysium.plugins.base import MacroPlugin, MacroSpec, unquote


class InitDependencyPlugin(MacroPlugin):
    """Indexes init targets and the dependencies they list."""

    name = INIT_DEPS_PLUGIN
    candidate_kind = CandidateKind.DEPENDENCY
    messages = DiagnosticMessages(
        source=INIT_DIAGNOSTIC_SOURCE,
        unknown_reference="Unknown init dependency '{name}'",
        duplicate_declaration="Duplicate init target '{name}' (first declared in {path}:{line})",
    )
    specs = (
        MacroSpec(
            name=INIT_TARGET_MACRO,
            kind=MacroKind.DEPENDENCY_DECLARATION,
            min_args=INIT_TARGET_MIN_ARGS,
            definition_slot=0,
            detail_slots=(1, 2),
            references_from=3,
        ),
    )

    def build_invocation(
        self, document_id: DocumentId, call: MacroCall, spec: MacroSpec
    ) -> MacroInvocation | None:
        target = _target_name(call.arguments[0])
        if not target:
            return None
        stage, scope = call.arguments[1].text, call.arguments[2].text

        dependencies = [
            NameSlot(unquote(token.text), token.span)
            for argument in call.arguments[spec.references_from or 0 :]
            for token in argument.tokens
            if token.is_string and unquote(token.text)
        ]

        return MacroInvocation(
            kind=spec.kind,
            macro=call.macro,
            document_id=document_id,
            span=call.span,
            arguments=call.arguments,
            declared=NameSlot(target, call.arguments[0].span),
            references=tuple(dependencies),
            detail=f"{stage}/{scope}",
        )

    def extra_diagnostics(
        self, document_id: DocumentId, snapshot: IndexSnapshot
    ) -> list[Diagnostic]:
        """Every mention of a known dependency listed more than once by one target.

        Unknown names already carry an unknown-reference error and are not
        flagged again.
        """
        found: list[Diagnostic] = []
        for invocation in snapshot.invocations_in(document_id):
            counts = Counter(ref.name for ref in invocation.references)
            target = invocation.declared.name if invocation.declared else "?"
            for ref in invocation.references:
                if counts[ref.name] > 1 and snapshot.is_defined(ref.name):
                    found.append(
                        Diagnostic(
                            severity=Severity.WARNING,
                            message=f"Duplicate dependency '{ref.name}' in {target}",
                            span=ref.span,
                            code=DiagnosticCode.DUPLICATE_DEPENDENCY,
                            source=self.messages.source,
                        )
                    )
        return found


def _target_name(argument: MacroArgument) -> str:
    if len(argument.tokens) == 1 and argument.tokens[0].is_string:
        return unquote(argument.tokens[0].text)
    return argument.text
