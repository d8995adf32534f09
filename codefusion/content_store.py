"""Lazily loaded, mtime-tracked file contents for selected files."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .file_tree_model import safe_mtime_ns

logger = logging.getLogger(__name__)

STALENESS_POLL_SECONDS = 2.0

TEXT = "text"
BINARY = "binary"
UNAVAILABLE = "unavailable"


def binary_placeholder(path: Path) -> str:
    return f"Binary file skipped: {path.name}"


def unavailable_placeholder(path: Path) -> str:
    return f"Content unavailable: {path.name}"


@dataclass(frozen=True)
class ContentEntry:
    """Cached content for one path.

    ``text`` holds the decoded file for ``kind == "text"`` and a readable
    placeholder otherwise. ``mtime_ns`` is the modification time observed
    just before the read.
    """

    path: Path
    text: str
    kind: str = TEXT
    mtime_ns: int | None = None

    @property
    def is_binary(self) -> bool:
        return self.kind == BINARY


def read_content_entry(path: Path) -> ContentEntry:
    """Read and classify ``path``; never raises."""
    mtime_ns = safe_mtime_ns(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        logger.debug("cannot read %s: %s", path, exc)
        return ContentEntry(path=path, text=unavailable_placeholder(path), kind=UNAVAILABLE, mtime_ns=mtime_ns)
    if b"\0" in data:
        return ContentEntry(path=path, text=binary_placeholder(path), kind=BINARY, mtime_ns=mtime_ns)
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("cannot decode %s as utf-8", path)
        return ContentEntry(path=path, text=unavailable_placeholder(path), kind=UNAVAILABLE, mtime_ns=mtime_ns)
    return ContentEntry(path=path, text=text, kind=TEXT, mtime_ns=mtime_ns)


def collect_mtimes(paths: Iterable[Path]) -> dict[Path, int]:
    """Stat ``paths``, skipping any that cannot be stat'ed."""
    observed: dict[Path, int] = {}
    for path in paths:
        mtime_ns = safe_mtime_ns(path)
        if mtime_ns is not None:
            observed[path] = mtime_ns
    return observed


class ContentStore:
    """Path -> ``ContentEntry`` cache plus per-path modification baselines.

    Entries are never evicted on their own; ``clear`` drops everything when
    a new root is opened.
    """

    def __init__(self) -> None:
        self._entries: dict[Path, ContentEntry] = {}
        self._baselines: dict[Path, int] = {}

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, path: Path) -> ContentEntry | None:
        return self._entries.get(path)

    def text_for(self, path: Path) -> str | None:
        entry = self._entries.get(path)
        return entry.text if entry is not None else None

    def contents_for(self, paths: Iterable[Path]) -> dict[Path, str]:
        """Return loaded text (or placeholder) for each of ``paths`` that has an entry."""
        out: dict[Path, str] = {}
        for path in paths:
            entry = self._entries.get(path)
            if entry is not None:
                out[path] = entry.text
        return out

    def apply(self, entry: ContentEntry) -> None:
        self._entries[entry.path] = entry
        if entry.mtime_ns is not None:
            self._baselines[entry.path] = entry.mtime_ns

    def needs_load(self, path: Path, current_mtime_ns: int | None = None) -> bool:
        """Return whether ``path`` is missing or its cached entry is outdated.

        Binary entries are never reloaded.
        """
        entry = self._entries.get(path)
        if entry is None:
            return True
        if entry.is_binary:
            return False
        if current_mtime_ns is None:
            current_mtime_ns = safe_mtime_ns(path)
        if current_mtime_ns is None or entry.mtime_ns is None:
            return False
        return current_mtime_ns > entry.mtime_ns

    def load(self, path: Path) -> ContentEntry:
        """Return cached content, reading from disk only when needed."""
        if not self.needs_load(path):
            return self._entries[path]
        entry = read_content_entry(path)
        self.apply(entry)
        return entry

    def refresh_if_stale(self, path: Path) -> bool:
        """Reload ``path`` if its on-disk mtime has advanced; return whether it did."""
        if path not in self._entries or not self.needs_load(path):
            return False
        self.apply(read_content_entry(path))
        return True

    def observe_mtimes(self, observed: dict[Path, int]) -> list[Path]:
        """Advance baselines to ``observed`` and return paths that moved forward.

        A path seen for the first time only establishes its baseline.
        """
        stale: list[Path] = []
        for path, mtime_ns in observed.items():
            previous = self._baselines.get(path)
            self._baselines[path] = mtime_ns
            if previous is not None and mtime_ns > previous:
                entry = self._entries.get(path)
                if entry is not None and entry.is_binary:
                    continue
                stale.append(path)
        return stale

    def clear(self) -> None:
        self._entries.clear()
        self._baselines.clear()


__all__ = [
    "BINARY",
    "STALENESS_POLL_SECONDS",
    "TEXT",
    "UNAVAILABLE",
    "ContentEntry",
    "ContentStore",
    "binary_placeholder",
    "collect_mtimes",
    "read_content_entry",
    "unavailable_placeholder",
]
