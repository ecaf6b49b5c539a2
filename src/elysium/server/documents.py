"""Authoritative document text and versions.

Two origins are tracked:

- ``OPEN``: the client owns the text (didOpen/didChange); versions come from
  the client and must increase
- ``DISK``: indexed from the project tree; version 0, replaced whenever the
  file changes on disk while it is not open

Client and disk versions overlap (a client may open at version 0), so every
stored document also carries a store-wide ``revision`` that no other copy of
any document shares. Staleness checks compare revisions, never versions.

The store is the only place a document's text changes.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

import structlog

from elysium.core.errors import DocumentError
from elysium.index.models import DocumentId

logger = structlog.get_logger()

DISK_VERSION = 0


class DocumentOrigin(Enum):
    OPEN = "open"
    DISK = "disk"


@dataclass(frozen=True, slots=True)
class Document:
    document_id: DocumentId
    text: str
    version: int
    origin: DocumentOrigin
    revision: int = 0

    @property
    def is_open(self) -> bool:
        return self.origin is DocumentOrigin.OPEN


@dataclass
class DocumentStore:
    """Thread-safe map of tracked documents."""

    _documents: dict[DocumentId, Document] = field(default_factory=dict, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False)
    _revisions: Iterator[int] = field(default_factory=lambda: itertools.count(1), init=False)

    def open(self, document_id: DocumentId, text: str, version: int) -> Document:
        """Start tracking a client buffer. Replaces any disk copy."""
        with self._lock:
            document = self._stamp(document_id, text, version, DocumentOrigin.OPEN)
            self._documents[document_id] = document
        return document

    def change(self, document_id: DocumentId, text: str, version: int) -> Document | None:
        """Replace a buffer's text. Returns None when ``version`` is not newer."""
        with self._lock:
            current = self._documents.get(document_id)
            if current is not None and current.is_open and version <= current.version:
                logger.warning(
                    "out_of_order_change_ignored",
                    document=document_id,
                    version=version,
                    current_version=current.version,
                )
                return None
            document = self._stamp(document_id, text, version, DocumentOrigin.OPEN)
            self._documents[document_id] = document
        return document

    def load_from_disk(self, document_id: DocumentId, text: str) -> Document | None:
        """Track on-disk text. Returns None if the client has the document open."""
        with self._lock:
            current = self._documents.get(document_id)
            if current is not None and current.is_open:
                return None
            document = self._stamp(document_id, text, DISK_VERSION, DocumentOrigin.DISK)
            self._documents[document_id] = document
        return document

    def close(self, document_id: DocumentId) -> Document | None:
        """Stop tracking a document. Returns what was removed."""
        with self._lock:
            return self._documents.pop(document_id, None)

    def discard_disk_copy(self, document_id: DocumentId) -> Document | None:
        """Forget a disk document; open buffers are left alone."""
        with self._lock:
            current = self._documents.get(document_id)
            if current is None or current.is_open:
                return None
            return self._documents.pop(document_id)

    def find(self, document_id: DocumentId) -> Document | None:
        with self._lock:
            return self._documents.get(document_id)

    def get(self, document_id: DocumentId) -> Document:
        """Raises DocumentError if the document is not tracked."""
        document = self.find(document_id)
        if document is None:
            raise DocumentError.not_tracked(document_id)
        return document

    def version_of(self, document_id: DocumentId) -> int | None:
        document = self.find(document_id)
        return document.version if document is not None else None

    def revision_of(self, document_id: DocumentId) -> int | None:
        """Identity of the stored copy; a new one is issued whenever it is replaced."""
        document = self.find(document_id)
        return document.revision if document is not None else None

    def ids(self) -> list[DocumentId]:
        with self._lock:
            return sorted(self._documents)

    def __contains__(self, document_id: object) -> bool:
        with self._lock:
            return document_id in self._documents

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)

    def __iter__(self) -> Iterator[Document]:
        with self._lock:
            documents = list(self._documents.values())
        return iter(documents)

    def _stamp(
        self, document_id: DocumentId, text: str, version: int, origin: DocumentOrigin
    ) -> Document:
        # Caller holds _lock
        return Document(document_id, text, version, origin, next(self._revisions))
