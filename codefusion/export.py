"""Rendering selected file contents into one delimited text block."""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from enum import Enum
from pathlib import Path


class PathOption(Enum):
    FULL = "full"
    RELATIVE = "relative"

    @classmethod
    def parse(cls, value: object, default: "PathOption | None" = None) -> "PathOption":
        """Parse a persisted ``"full"``/``"relative"`` flag, falling back to ``default``."""
        if isinstance(value, PathOption):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            for option in cls:
                if option.value == normalized:
                    return option
        return default if default is not None else cls.FULL


def display_path(path: Path, root: Path | None, option: PathOption) -> str:
    """Return ``path`` as shown in export headers.

    ``RELATIVE`` strips the root directory and its trailing separator; paths
    outside the root keep their absolute form.
    """
    text = str(path)
    if option is PathOption.RELATIVE and root is not None:
        prefix = str(root).rstrip(os.sep) + os.sep
        if text.startswith(prefix):
            return text[len(prefix):]
    return text


def format_file_block(display: str, content: str) -> str:
    return f"### START OF FILE: {display} ###\n{content}\n### END OF FILE: {display} ###\n\n"


def render_selection(
    paths: Iterable[Path],
    contents: Mapping[Path, str],
    root: Path | None,
    option: PathOption = PathOption.FULL,
) -> str:
    """Concatenate one block per path in ``paths`` that has loaded content."""
    parts: list[str] = []
    for path in paths:
        content = contents.get(path)
        if content is None:
            continue
        parts.append(format_file_block(display_path(path, root, option), content))
    return "".join(parts)


__all__ = [
    "PathOption",
    "display_path",
    "format_file_block",
    "render_selection",
]
