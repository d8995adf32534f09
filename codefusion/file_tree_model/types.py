"""Domain datatypes for filesystem-backed file trees."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class FileNode:
    """Immutable file or directory node; directories own their children.

    ``children`` is empty for files. Exposed trees never contain a directory
    with an empty ``children`` tuple.
    """

    path: Path
    is_dir: bool
    children: tuple["FileNode", ...] = ()

    @property
    def name(self) -> str:
        return self.path.name


def iter_nodes(node: FileNode) -> Iterator[FileNode]:
    """Yield ``node`` and all descendants in pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def iter_files(node: FileNode | None) -> Iterator[Path]:
    """Yield every file path under ``node`` in tree order."""
    if node is None:
        return
    for current in iter_nodes(node):
        if not current.is_dir:
            yield current.path


def count_files(node: FileNode | None) -> int:
    return sum(1 for _ in iter_files(node))


def find_node(node: FileNode | None, path: Path) -> FileNode | None:
    """Return the node for ``path`` under ``node``, descending only along its ancestors."""
    current = node
    while current is not None:
        if current.path == path:
            return current
        if not current.is_dir or not path.is_relative_to(current.path):
            return None
        current = next(
            (child for child in current.children if path.is_relative_to(child.path)),
            None,
        )
    return None


def sorted_children(node: FileNode) -> list[FileNode]:
    """Return children in display order: directories first, then case-insensitive name."""
    return sorted(node.children, key=lambda child: (not child.is_dir, child.name.lower()))


__all__ = [
    "FileNode",
    "count_files",
    "find_node",
    "iter_files",
    "iter_nodes",
    "sorted_children",
]
