"""Domain model for filesystem file/directory trees.

This package contains non-UI tree primitives:
- immutable file/directory nodes with nested children
- filesystem scanning/build helpers honoring exclusion patterns
- snapshots tagged with the settings they were built from
"""

from __future__ import annotations

from .types import FileNode, count_files, find_node, iter_files, iter_nodes, sorted_children
from .fs import (
    TREE_BUILD_MAX_WORKERS,
    DirectoryChild,
    build_file_tree,
    list_directory_children,
    safe_mtime_ns,
)
from .snapshot import FileTreeSnapshot, build_file_tree_snapshot

__all__ = [
    "FileNode",
    "count_files",
    "find_node",
    "iter_files",
    "iter_nodes",
    "sorted_children",
    "TREE_BUILD_MAX_WORKERS",
    "DirectoryChild",
    "build_file_tree",
    "list_directory_children",
    "safe_mtime_ns",
    "FileTreeSnapshot",
    "build_file_tree_snapshot",
]
