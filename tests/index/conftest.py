"""Shared fixtures for index tests."""

from __future__ import annotations

import pytest

from elysium.index.models import (
    MacroInvocation,
    MacroKind,
    NameSlot,
    Position,
    Span,
)


def span(line: int, start: int, end: int) -> Span:
    return Span(Position(line, start), Position(line, end))


def hook_definition(document_id: str, name: str, line: int = 0) -> MacroInvocation:
    return MacroInvocation(
        kind=MacroKind.HOOK_DEFINITION,
        macro="HOOK",
        document_id=document_id,
        span=span(line, 0, 7 + len(name)),
        arguments=(),
        declared=NameSlot(name, span(line, 5, 5 + len(name))),
        detail="hook",
    )


def hook_run(document_id: str, *names: str, line: int = 0) -> MacroInvocation:
    refs = []
    col = 9
    for name in names:
        refs.append(NameSlot(name, span(line, col, col + len(name))))
        col += len(name) + 2
    return MacroInvocation(
        kind=MacroKind.HOOK_REFERENCE_LIST,
        macro="HOOK_RUN",
        document_id=document_id,
        span=span(line, 0, col),
        arguments=(),
        references=tuple(refs),
    )


@pytest.fixture
def make_definition():
    return hook_definition


@pytest.fixture
def make_run():
    return hook_run
