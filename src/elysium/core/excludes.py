"""Directory exclude rules for the startup project scan.

Tier 0 (HARDCODED_DIRS): Never traversed, not user-configurable.
    - VCS internals, Elysium's own data directory

Tier 1 (DEFAULT_PRUNABLE_DIRS): Excluded by default.
    - Build outputs, caches, editor state
    - ``index.exclude_dirs`` in config adds more names; ``!name`` re-enables a
      Tier 1 directory
"""

from __future__ import annotations

from collections.abc import Iterable

HARDCODED_DIRS: frozenset[str] = frozenset(
    (
        # VCS internals
        ".git",
        ".svn",
        ".hg",
        ".bzr",
        # Elysium data
        ".elysium",
    )
)

DEFAULT_PRUNABLE_DIRS: frozenset[str] = frozenset(
    (
        # Kernel / C build outputs
        "build",
        "out",
        "obj",
        "_build",
        ".cache",  # clangd index
        ".ccls-cache",
        # Tooling that lives next to the sources
        "__pycache__",
        ".venv",
        "venv",
        "node_modules",
        "target",
        # IDE/Editor directories
        ".idea",
        ".vscode",
        ".vs",
        # Misc
        "tmp",
        "temp",
    )
)

PRUNABLE_DIRS: frozenset[str] = HARDCODED_DIRS | DEFAULT_PRUNABLE_DIRS


def is_hardcoded_dir(dirname: str) -> bool:
    """Check if directory is hardcoded (never traversable, not overridable)."""
    return dirname in HARDCODED_DIRS


def is_default_prunable(dirname: str) -> bool:
    """Check if directory is prunable by default (but user can override)."""
    return dirname in DEFAULT_PRUNABLE_DIRS


def build_prune_set(patterns: Iterable[str] = ()) -> frozenset[str]:
    """Combine defaults with configured directory names.

    ``name`` adds a directory to the prune set. ``!name`` removes a Tier 1
    directory from it; Tier 0 directories cannot be re-enabled.
    """
    pruned = set(PRUNABLE_DIRS)
    for raw in patterns:
        pattern = raw.strip().strip("/")
        if not pattern:
            continue
        if pattern.startswith("!"):
            name = pattern[1:].strip("/")
            if not is_hardcoded_dir(name):
                pruned.discard(name)
        else:
            pruned.add(pattern)
    return frozenset(pruned)
