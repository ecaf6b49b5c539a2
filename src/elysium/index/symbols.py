"""Per-plugin symbol index with atomic per-document contributions.

Each plugin owns one ``SymbolIndex``. A document's contribution is the tuple
of invocations last scanned from it; the aggregate tables (name -> declaring
locations, name -> referencing locations) are the union over all
contributions.

All writes go through ``apply_document_update`` / ``remove_document``, which
swap a document's whole contribution under the index lock. Readers take a
``snapshot()``: an immutable view built under the same lock, so a query
never observes a half-applied update.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import structlog

from elysium.index.models import DocumentId, Location, MacroInvocation

logger = structlog.get_logger()


@dataclass(frozen=True)
class IndexSnapshot:
    """Read-only, fully-applied view of one plugin's index."""

    generation: int
    contributions: Mapping[DocumentId, tuple[MacroInvocation, ...]]
    definitions: Mapping[str, tuple[Location, ...]]
    references: Mapping[str, tuple[Location, ...]]

    def documents(self) -> frozenset[DocumentId]:
        return frozenset(self.contributions)

    def invocations_in(self, document_id: DocumentId) -> tuple[MacroInvocation, ...]:
        return self.contributions.get(document_id, ())

    def locations_in(self, document_id: DocumentId) -> list[Location]:
        """Every definition and reference location attributed to a document."""
        found = [
            loc
            for table in (self.definitions, self.references)
            for locations in table.values()
            for loc in locations
            if loc.document_id == document_id
        ]
        return sorted(found)

    def is_defined(self, name: str) -> bool:
        return name in self.definitions

    def canonical_declaration(self, name: str) -> Location | None:
        """First-ordered declaring location (by document path, then span)."""
        locations = self.definitions.get(name)
        return locations[0] if locations else None

    def declaration_at(self, location: Location) -> MacroInvocation | None:
        """The invocation that declares a name at ``location``, if any."""
        for invocation in self.invocations_in(location.document_id):
            if invocation.declaration_location() == location:
                return invocation
        return None


_EMPTY_SNAPSHOT = IndexSnapshot(
    generation=0,
    contributions=MappingProxyType({}),
    definitions=MappingProxyType({}),
    references=MappingProxyType({}),
)


@dataclass
class SymbolIndex:
    """Incremental name index for one macro family.

    Thread-safe: mutation and snapshot construction share one lock.
    """

    name: str

    _contributions: dict[DocumentId, tuple[MacroInvocation, ...]] = field(
        default_factory=dict, init=False
    )
    _definitions: defaultdict[str, set[Location]] = field(
        default_factory=lambda: defaultdict(set), init=False
    )
    _references: defaultdict[str, set[Location]] = field(
        default_factory=lambda: defaultdict(set), init=False
    )
    _generation: int = field(default=0, init=False)
    _snapshot: IndexSnapshot = field(default=_EMPTY_SNAPSHOT, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def apply_document_update(
        self, document_id: DocumentId, invocations: Iterable[MacroInvocation]
    ) -> bool:
        """Replace a document's contribution. Returns False when nothing changed."""
        new = tuple(invocations)
        with self._lock:
            old = self._contributions.get(document_id, ())
            if old == new:
                return False
            self._retract(old)
            if new:
                self._contributions[document_id] = new
                self._assert(new)
            else:
                self._contributions.pop(document_id, None)
            self._generation += 1
            generation = self._generation

        logger.debug(
            "contribution_replaced",
            index=self.name,
            document=document_id,
            removed=len(old),
            added=len(new),
            generation=generation,
        )
        return True

    def remove_document(self, document_id: DocumentId) -> bool:
        """Drop a document's contribution. Returns False if it had none."""
        with self._lock:
            old = self._contributions.pop(document_id, None)
            if old is None:
                return False
            self._retract(old)
            self._generation += 1
            generation = self._generation

        logger.debug(
            "contribution_removed",
            index=self.name,
            document=document_id,
            removed=len(old),
            generation=generation,
        )
        return True

    def snapshot(self) -> IndexSnapshot:
        """Current fully-applied state; cached until the next change."""
        with self._lock:
            if self._snapshot.generation != self._generation:
                self._snapshot = IndexSnapshot(
                    generation=self._generation,
                    contributions=MappingProxyType(dict(self._contributions)),
                    definitions=_freeze(self._definitions),
                    references=_freeze(self._references),
                )
            return self._snapshot

    def _retract(self, invocations: tuple[MacroInvocation, ...]) -> None:
        for invocation in invocations:
            location = invocation.declaration_location()
            if location is not None and invocation.declared is not None:
                _discard(self._definitions, invocation.declared.name, location)
            for name, ref_location in invocation.reference_locations():
                _discard(self._references, name, ref_location)

    def _assert(self, invocations: tuple[MacroInvocation, ...]) -> None:
        for invocation in invocations:
            location = invocation.declaration_location()
            if location is not None and invocation.declared is not None:
                self._definitions[invocation.declared.name].add(location)
            for name, ref_location in invocation.reference_locations():
                self._references[name].add(ref_location)


def _discard(table: defaultdict[str, set[Location]], name: str, location: Location) -> None:
    locations = table.get(name)
    if locations is None:
        return
    locations.discard(location)
    if not locations:
        del table[name]


def _freeze(table: Mapping[str, set[Location]]) -> Mapping[str, tuple[Location, ...]]:
    return MappingProxyType({name: tuple(sorted(locs)) for name, locs in table.items()})
