"""Filesystem scanning and immutable tree construction."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from ..exclusions import ExclusionMatcher
from .types import FileNode

logger = logging.getLogger(__name__)

TREE_BUILD_MAX_WORKERS = 8


@dataclass(frozen=True)
class DirectoryChild:
    """One directory listing row."""

    name: str
    path: Path
    is_dir: bool


def safe_mtime_ns(path: Path) -> int | None:
    """Return ``st_mtime_ns`` for ``path`` or ``None`` on stat failure."""
    try:
        return int(path.stat().st_mtime_ns)
    except OSError:
        return None


def list_directory_children(directory: Path) -> tuple[list[DirectoryChild], OSError | None]:
    """List immediate children of ``directory`` ordered by name.

    Returns ``(children, scan_error)``. Symlinks are reported as files so the
    tree walk never follows them.
    """
    children: list[DirectoryChild] = []
    try:
        with os.scandir(directory) as entries:
            for child in entries:
                try:
                    is_dir = child.is_dir(follow_symlinks=False)
                except OSError:
                    is_dir = False
                children.append(DirectoryChild(name=child.name, path=Path(child.path), is_dir=is_dir))
    except OSError as exc:
        return [], exc

    children.sort(key=lambda item: item.name)
    return children, None


def _build_node(path: Path, is_dir: bool, matcher: ExclusionMatcher) -> FileNode | None:
    """Build the subtree at ``path`` sequentially."""
    if matcher.is_excluded(path.name):
        return None
    if not is_dir:
        return FileNode(path=path, is_dir=False)

    children, scan_error = list_directory_children(path)
    if scan_error is not None:
        logger.debug("skipping unreadable directory %s: %s", path, scan_error)
        return None

    nodes: list[FileNode] = []
    for child in children:
        node = _build_node(child.path, child.is_dir, matcher)
        if node is not None:
            nodes.append(node)
    if not nodes:
        return None
    return FileNode(path=path, is_dir=True, children=tuple(nodes))


def build_file_tree(
    root: Path,
    matcher: ExclusionMatcher | None = None,
    max_workers: int = TREE_BUILD_MAX_WORKERS,
) -> FileNode | None:
    """Build an immutable tree rooted at ``root``.

    Excluded names and directories without any surviving file are dropped.
    Returns ``None`` when ``root`` itself is excluded, missing, or empty.

    Subdirectories of ``root`` are built in parallel; results are gathered in
    listing order so the tree only depends on filesystem state and patterns.
    """
    matcher = matcher or ExclusionMatcher()
    if not root.exists():
        return None
    if matcher.is_excluded(root.name):
        return None
    if not root.is_dir():
        return FileNode(path=root, is_dir=False)

    children, scan_error = list_directory_children(root)
    if scan_error is not None:
        logger.debug("cannot scan root %s: %s", root, scan_error)
        return None

    subdirs = [child for child in children if child.is_dir]
    built: dict[Path, FileNode | None] = {}
    if len(subdirs) > 1 and max_workers > 1:
        with ThreadPoolExecutor(
            max_workers=min(max_workers, len(subdirs)),
            thread_name_prefix="codefusion-tree-build",
        ) as executor:
            futures = {
                child.path: executor.submit(_build_node, child.path, True, matcher)
                for child in subdirs
            }
            for path, future in futures.items():
                try:
                    built[path] = future.result()
                except Exception:
                    logger.debug("tree build failed under %s", path, exc_info=True)
                    built[path] = None

    nodes: list[FileNode] = []
    for child in children:
        if child.path in built:
            node = built[child.path]
        else:
            node = _build_node(child.path, child.is_dir, matcher)
        if node is not None:
            nodes.append(node)
    if not nodes:
        return None
    return FileNode(path=root, is_dir=True, children=tuple(nodes))


__all__ = [
    "DirectoryChild",
    "TREE_BUILD_MAX_WORKERS",
    "build_file_tree",
    "list_directory_children",
    "safe_mtime_ns",
]
