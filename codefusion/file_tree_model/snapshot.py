"""Snapshots of a built file tree plus the settings it was built with."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from ..exclusions import ExclusionMatcher
from .fs import TREE_BUILD_MAX_WORKERS, build_file_tree
from .types import FileNode, iter_files


@dataclass(frozen=True)
class FileTreeSnapshot:
    """Immutable tree for one root, tagged with the exclusions applied."""

    root_path: Path
    exclusions: tuple[str, ...]
    root_entry: FileNode | None
    file_paths: frozenset[Path]

    @property
    def is_empty(self) -> bool:
        return self.root_entry is None


def build_file_tree_snapshot(
    root: Path,
    exclusions: Iterable[str] = (),
    *,
    max_workers: int = TREE_BUILD_MAX_WORKERS,
) -> FileTreeSnapshot:
    """Resolve ``root`` and build a fresh snapshot under ``exclusions``."""
    root = root.resolve()
    patterns = tuple(exclusions)
    root_entry = build_file_tree(root, ExclusionMatcher(patterns), max_workers=max_workers)
    return FileTreeSnapshot(
        root_path=root,
        exclusions=patterns,
        root_entry=root_entry,
        file_paths=frozenset(iter_files(root_entry)),
    )


__all__ = [
    "FileTreeSnapshot",
    "build_file_tree_snapshot",
]
