"""Coordinator-owned engine state."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..file_tree_model import FileNode, FileTreeSnapshot


@dataclass
class EngineState:
    """Published state; only the coordinator thread mutates it."""

    root: Path | None = None
    snapshot: FileTreeSnapshot | None = None
    filtered_tree: FileNode | None = None
    build_generation: int = 0
    building: bool = False
    filtering: bool = False
    content_loading: bool = False
    token_count: int = 0
