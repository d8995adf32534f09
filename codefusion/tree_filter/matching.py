"""Pure tree reductions for name and content filtering."""

from __future__ import annotations

from collections.abc import Callable, Collection
from dataclasses import dataclass
from pathlib import Path

from ..file_tree_model import FileNode


@dataclass(frozen=True)
class FilterQuery:
    """Name/content query pair; an empty string means no constraint."""

    name_query: str = ""
    name_case_sensitive: bool = False
    content_query: str = ""
    content_case_sensitive: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.name_query and not self.content_query

    @property
    def needs_content_search(self) -> bool:
        return bool(self.content_query)


def name_matches(name: str, query: str, case_sensitive: bool) -> bool:
    """Return whether base name ``name`` contains ``query`` under the case rule."""
    if not query:
        return True
    if case_sensitive:
        return query in name
    return query.lower() in name.lower()


def _reduce(node: FileNode, keep_file: Callable[[FileNode], bool]) -> FileNode | None:
    if not node.is_dir:
        return FileNode(path=node.path, is_dir=False) if keep_file(node) else None
    children = tuple(
        reduced
        for reduced in (_reduce(child, keep_file) for child in node.children)
        if reduced is not None
    )
    if not children:
        return None
    return FileNode(path=node.path, is_dir=True, children=children)


def filter_tree(
    tree: FileNode | None,
    query: FilterQuery,
    content_matches: Collection[Path] | None = None,
) -> FileNode | None:
    """Reduce ``tree`` to files satisfying every non-empty part of ``query``.

    ``content_matches`` is the search result for ``query.content_query``; it
    is ignored when the content query is empty. A directory survives when at
    least one descendant file does. Always returns freshly built nodes.
    """
    if tree is None:
        return None
    name_query = query.name_query
    match_set = frozenset(content_matches or ()) if query.content_query else None

    def keep_file(node: FileNode) -> bool:
        if not name_matches(node.name, name_query, query.name_case_sensitive):
            return False
        return match_set is None or node.path in match_set

    return _reduce(tree, keep_file)


def filter_tree_by_name(tree: FileNode | None, query: str, case_sensitive: bool = False) -> FileNode | None:
    return filter_tree(tree, FilterQuery(name_query=query, name_case_sensitive=case_sensitive))


def filter_tree_by_paths(tree: FileNode | None, matched_paths: Collection[Path]) -> FileNode | None:
    """Keep only files whose path is in ``matched_paths`` plus their ancestors."""
    if tree is None:
        return None
    match_set = frozenset(matched_paths)
    return _reduce(tree, lambda node: node.path in match_set)


__all__ = [
    "FilterQuery",
    "filter_tree",
    "filter_tree_by_name",
    "filter_tree_by_paths",
    "name_matches",
]
