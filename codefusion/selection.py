"""File-level selection with tri-state status derived for directories."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from pathlib import Path

from .file_tree_model import FileNode, iter_files


class SelectionMark(Enum):
    UNSELECTED = "unselected"
    PARTIAL = "partial"
    SELECTED = "selected"


class SelectionState:
    """Set of selected file paths.

    Directories are never members; their mark is derived from descendant
    files on every read. Toggling a directory that is not fully selected
    selects every descendant file, so a partial directory toggles to
    selected rather than cleared.
    """

    def __init__(self, paths: Iterable[Path] = ()) -> None:
        self._selected: set[Path] = set(paths)

    def __contains__(self, path: object) -> bool:
        return path in self._selected

    def __len__(self) -> int:
        return len(self._selected)

    @property
    def paths(self) -> list[Path]:
        """Selected paths in stable (sorted) order."""
        return sorted(self._selected)

    def is_selected(self, path: Path) -> bool:
        return path in self._selected

    def state_of(self, node: FileNode) -> SelectionMark:
        if not node.is_dir:
            return SelectionMark.SELECTED if node.path in self._selected else SelectionMark.UNSELECTED
        seen_selected = False
        seen_unselected = False
        for path in iter_files(node):
            if path in self._selected:
                seen_selected = True
            else:
                seen_unselected = True
            if seen_selected and seen_unselected:
                return SelectionMark.PARTIAL
        if seen_selected:
            return SelectionMark.SELECTED
        return SelectionMark.UNSELECTED

    def toggle(self, node: FileNode) -> set[Path]:
        """Toggle ``node`` and return the paths whose membership changed."""
        if not node.is_dir:
            if node.path in self._selected:
                self._selected.discard(node.path)
            else:
                self._selected.add(node.path)
            return {node.path}
        if self.state_of(node) is SelectionMark.SELECTED:
            return self.deselect_all(node)
        return self.select_all(node)

    def select_all(self, node: FileNode) -> set[Path]:
        added = {path for path in iter_files(node) if path not in self._selected}
        self._selected |= added
        return added

    def deselect_all(self, node: FileNode) -> set[Path]:
        removed = {path for path in iter_files(node) if path in self._selected}
        self._selected -= removed
        return removed

    def discard(self, paths: Iterable[Path]) -> set[Path]:
        removed = {path for path in paths if path in self._selected}
        self._selected -= removed
        return removed

    def clear(self) -> set[Path]:
        removed = set(self._selected)
        self._selected.clear()
        return removed


__all__ = ["SelectionMark", "SelectionState"]
