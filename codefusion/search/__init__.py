"""Search package exports."""

from __future__ import annotations

from .content import (
    SearchPrimitive,
    build_grep_command,
    grep_exclude_args,
    is_directory_pattern,
    search_files_grep,
    search_files_in_process,
)

__all__ = [
    "SearchPrimitive",
    "build_grep_command",
    "grep_exclude_args",
    "is_directory_pattern",
    "search_files_grep",
    "search_files_in_process",
]
