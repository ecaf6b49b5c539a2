"""Project tree discovery for the startup scan and watched-file events."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from elysium.config.models import IndexConfig
from elysium.core.errors import DocumentError
from elysium.core.excludes import build_prune_set
from elysium.index.models import DocumentId

logger = structlog.get_logger()


def document_id_for(path: str | os.PathLike[str]) -> DocumentId:
    """Canonical identity for a file: its resolved absolute path."""
    return str(Path(path).expanduser().resolve())


@dataclass
class ProjectScanner:
    """Finds and reads the macro-bearing sources under a project root."""

    root: Path
    extensions: tuple[str, ...] = (".c",)
    exclude_dirs: Iterable[str] = ()
    max_file_size_bytes: int = 4 * 1024 * 1024

    _prune: frozenset[str] = field(default=frozenset(), init=False)

    def __post_init__(self) -> None:
        self.root = Path(self.root).resolve()
        self.extensions = tuple(self.extensions)
        self._prune = build_prune_set(self.exclude_dirs)

    @classmethod
    def from_config(cls, root: Path, config: IndexConfig) -> ProjectScanner:
        return cls(
            root=root,
            extensions=tuple(config.extensions),
            exclude_dirs=tuple(config.exclude_dirs),
            max_file_size_bytes=config.max_file_size_mb * 1024 * 1024,
        )

    def iter_sources(self) -> Iterator[Path]:
        """Walk the tree, pruning excluded directories, in a stable order."""
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(d for d in dirnames if d not in self._prune)
            for filename in sorted(filenames):
                if Path(filename).suffix in self.extensions:
                    yield Path(dirpath) / filename

    def contains(self, document_id: DocumentId) -> bool:
        path = Path(document_id)
        if path.suffix not in self.extensions:
            return False
        try:
            relative = path.relative_to(self.root)
        except ValueError:
            return False
        return not any(part in self._prune for part in relative.parts[:-1])

    def read(self, path: str | os.PathLike[str]) -> str | None:
        """File text, or None when missing, oversized or unreadable."""
        path = Path(path)
        try:
            size = path.stat().st_size
            if size > self.max_file_size_bytes:
                logger.info("file_skipped_too_large", path=str(path), size=size)
                return None
            return path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return None
        except OSError as e:
            error = DocumentError.unreadable(str(path), str(e))
            logger.warning("file_read_failed", path=str(path), error=str(error))
            return None
