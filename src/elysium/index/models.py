"""Value types shared by the scanner, the symbol index and the derivers.

Everything here is immutable. A scan produces fresh objects; an update
replaces a document's whole contribution rather than mutating it.

Positions are zero-based ``(line, character)`` pairs, ordered so that spans
and locations sort by document, then start, then end.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum

DocumentId = str
"""Stable document identity: the canonical filesystem path as a string."""


@dataclass(frozen=True, slots=True, order=True)
class Position:
    line: int
    character: int


@dataclass(frozen=True, slots=True, order=True)
class Span:
    """Half-open text range ``[start, end)``."""

    start: Position
    end: Position

    def contains(self, position: Position) -> bool:
        """Inclusive containment; a cursor sitting on either edge is inside."""
        return self.start <= position <= self.end

    @classmethod
    def empty_at(cls, position: Position) -> Span:
        return cls(position, position)


@dataclass(frozen=True, slots=True, order=True)
class Location:
    document_id: DocumentId
    span: Span


class MacroKind(str, Enum):
    """Tagged macro variants recognised by the plugins."""

    DEPENDENCY_DECLARATION = "dependency-declaration"
    HOOK_DEFINITION = "hook-definition"
    HOOK_REFERENCE_LIST = "hook-reference-list"


class SlotRole(str, Enum):
    """What a macro argument slot means to its plugin."""

    DEFINITION = "definition"
    REFERENCE = "reference"
    DETAIL = "detail"
    IGNORED = "ignored"


@dataclass(frozen=True, slots=True)
class ArgumentToken:
    """One lexical token inside a macro argument."""

    text: str
    span: Span
    is_string: bool = False


@dataclass(frozen=True, slots=True)
class MacroArgument:
    """A single comma-separated argument of a macro call.

    ``span`` covers the argument's tokens (zero-width at the slot start when
    the argument is empty). ``region`` runs from just after the preceding
    delimiter to just before the following one and is what completion
    containment is tested against.
    """

    index: int
    text: str
    span: Span
    region: Span
    tokens: tuple[ArgumentToken, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.tokens


@dataclass(frozen=True, slots=True)
class MacroCall:
    """A syntactically complete ``NAME(args...)`` call found by the scanner."""

    macro: str
    span: Span
    name_span: Span
    arguments: tuple[MacroArgument, ...]


@dataclass(frozen=True, slots=True)
class NameSlot:
    """A declared or referenced name with the span it was written at."""

    name: str
    span: Span


@dataclass(frozen=True, slots=True)
class MacroInvocation:
    """A recognised macro call with its plugin-assigned meaning."""

    kind: MacroKind
    macro: str
    document_id: DocumentId
    span: Span
    arguments: tuple[MacroArgument, ...]
    declared: NameSlot | None = None
    references: tuple[NameSlot, ...] = ()
    detail: str | None = None

    def declaration_location(self) -> Location | None:
        if self.declared is None:
            return None
        return Location(self.document_id, self.declared.span)

    def reference_locations(self) -> list[tuple[str, Location]]:
        return [(ref.name, Location(self.document_id, ref.span)) for ref in self.references]


class Severity(IntEnum):
    """Diagnostic severity, numbered as the language-server protocol numbers it."""

    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


class DiagnosticCode(str, Enum):
    UNKNOWN_REFERENCE = "unknown-reference"
    DUPLICATE_DECLARATION = "duplicate-declaration"
    DUPLICATE_DEPENDENCY = "duplicate-dependency"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    severity: Severity
    message: str
    span: Span
    code: DiagnosticCode
    source: str
    related: tuple[Location, ...] = field(default=())


class CandidateKind(str, Enum):
    DEPENDENCY = "dependency"
    HOOK = "hook"


@dataclass(frozen=True, slots=True)
class CompletionCandidate:
    label: str
    kind: CandidateKind
    detail: str | None = None
