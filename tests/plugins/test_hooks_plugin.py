"""Tests for the hook macro family."""

from __future__ import annotations

import pytest

from elysium.index.models import DiagnosticCode, MacroKind, Position, SlotRole
from elysium.plugins.hooks import HookPlugin


@pytest.fixture
def plugin() -> HookPlugin:
    return HookPlugin()


class TestScan:
    """Invocation building tests."""

    def test_definitions_and_runs(self, plugin: HookPlugin) -> None:
        # Given
        text = "HOOK(boot)\nHOOK_RUN(boot, late)\n"

        # When
        invocations = plugin.scan("/p/a.c", text)

        # Then
        assert [i.kind for i in invocations] == [
            MacroKind.HOOK_DEFINITION,
            MacroKind.HOOK_REFERENCE_LIST,
        ]
        assert invocations[0].declared is not None
        assert invocations[0].declared.name == "boot"
        assert [r.name for r in invocations[1].references] == ["boot", "late"]

    @pytest.mark.parametrize("text", ["HOOK()", 'HOOK("boot")', "HOOK(a + b)"])
    def test_definition_without_identifier_is_skipped(self, plugin: HookPlugin, text: str) -> None:
        assert plugin.scan("/p/a.c", text) == []

    def test_empty_run_slot_references_nothing(self, plugin: HookPlugin) -> None:
        (invocation,) = plugin.scan("/p/a.c", "HOOK_RUN(boot, )")
        assert [r.name for r in invocation.references] == ["boot"]
        assert len(invocation.arguments) == 2

    def test_slot_roles(self, plugin: HookPlugin) -> None:
        assert plugin.role_of("HOOK", 0) is SlotRole.DEFINITION
        assert plugin.role_of("HOOK", 1) is SlotRole.IGNORED
        assert plugin.role_of("HOOK_RUN", 0) is SlotRole.REFERENCE
        assert plugin.role_of("HOOK_RUN", 7) is SlotRole.REFERENCE
        assert plugin.role_of("OTHER", 0) is SlotRole.IGNORED


class TestQueries:
    """Diagnostics and completion through the plugin."""

    def test_unknown_hook_reported(self, plugin: HookPlugin) -> None:
        plugin.update_document("/p/a.c", "HOOK(boot)\nHOOK_RUN(boot, missing)\n")

        (diag,) = plugin.diagnostics_for("/p/a.c")

        assert diag.code is DiagnosticCode.UNKNOWN_REFERENCE
        assert diag.message == "Unknown hook 'missing'"
        assert diag.source == "elysium-hooks"

    def test_completion_in_run_slot(self, plugin: HookPlugin) -> None:
        plugin.update_document("/p/b.c", "HOOK(late)\n")
        plugin.update_document("/p/a.c", "HOOK(boot)\nHOOK_RUN()\n")

        candidates = plugin.completions_at("/p/a.c", Position(1, 9))

        assert [(c.label, c.detail) for c in candidates] == [
            ("boot", "hook (a.c)"),
            ("late", "hook (b.c)"),
        ]

    def test_accepts_configured_extensions_only(self) -> None:
        plugin = HookPlugin(extensions=(".c", ".h"))
        assert plugin.accepts("/p/a.h")
        assert not plugin.accepts("/p/a.py")
