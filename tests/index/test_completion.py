"""Tests for completion derivation and cross-plugin merging."""

from __future__ import annotations

from elysium.index.completion import completions_at, find_slot, merge_candidates
from elysium.index.models import CandidateKind, CompletionCandidate, Position, SlotRole
from elysium.plugins.hooks import HookPlugin

SOURCE = "HOOK(beta)\nHOOK(alpha)\nHOOK_RUN(alpha, )\n"


def _indexed_plugin() -> HookPlugin:
    plugin = HookPlugin()
    plugin.update_document("/p/a.c", SOURCE)
    return plugin


class TestFindSlot:
    """Slot lookup tests."""

    def test_cursor_in_empty_trailing_slot(self) -> None:
        plugin = _indexed_plugin()
        invocations = plugin.snapshot().invocations_in("/p/a.c")

        hit = find_slot(invocations, Position(2, 16))

        assert hit is not None
        invocation, argument = hit
        assert invocation.macro == "HOOK_RUN"
        assert argument.index == 1

    def test_cursor_on_macro_name_is_not_a_slot(self) -> None:
        plugin = _indexed_plugin()
        invocations = plugin.snapshot().invocations_in("/p/a.c")

        assert find_slot(invocations, Position(2, 3)) is None


class TestCompletionsAt:
    """Candidate derivation tests."""

    def test_reference_slot_offers_every_definition_sorted(self) -> None:
        """Names come back in lexical order with their declaring file."""
        # Given
        plugin = _indexed_plugin()

        # When
        candidates = completions_at(
            "/p/a.c",
            Position(2, 16),
            plugin.snapshot(),
            role_of=plugin.role_of,
            kind=CandidateKind.HOOK,
            describe=plugin.describe,
        )

        # Then
        assert [c.label for c in candidates] == ["alpha", "beta"]
        assert all(c.kind is CandidateKind.HOOK for c in candidates)
        assert candidates[0].detail == "hook (a.c)"

    def test_definition_slot_offers_nothing(self) -> None:
        plugin = _indexed_plugin()

        candidates = completions_at(
            "/p/a.c",
            Position(0, 7),
            plugin.snapshot(),
            role_of=plugin.role_of,
            kind=CandidateKind.HOOK,
        )

        assert candidates == []

    def test_outside_any_call_offers_nothing(self) -> None:
        plugin = _indexed_plugin()

        candidates = completions_at(
            "/p/a.c",
            Position(3, 0),
            plugin.snapshot(),
            role_of=lambda macro, index: SlotRole.REFERENCE,
            kind=CandidateKind.HOOK,
        )

        assert candidates == []

    def test_unknown_document_offers_nothing(self) -> None:
        plugin = _indexed_plugin()

        candidates = completions_at(
            "/p/other.c",
            Position(2, 16),
            plugin.snapshot(),
            role_of=plugin.role_of,
            kind=CandidateKind.HOOK,
        )

        assert candidates == []


class TestMergeCandidates:
    """Cross-plugin merge tests."""

    def test_first_group_wins_and_result_is_sorted(self) -> None:
        first = [
            CompletionCandidate("mm", CandidateKind.DEPENDENCY, "core/early"),
            CompletionCandidate("boot", CandidateKind.DEPENDENCY, "core/early"),
        ]
        second = [
            CompletionCandidate("boot", CandidateKind.HOOK, "hook"),
            CompletionCandidate("late", CandidateKind.HOOK, "hook"),
        ]

        merged = merge_candidates([first, second])

        assert [c.label for c in merged] == ["boot", "late", "mm"]
        assert merged[0].kind is CandidateKind.DEPENDENCY

    def test_empty_groups(self) -> None:
        assert merge_candidates([[], []]) == []
