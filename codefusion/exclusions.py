"""Name-based exclusion patterns for tree building and content search.

Patterns are either exact names or ``*`` globs and are matched against the
last path component only. ``ExclusionList`` keeps the ordered, user-editable
pattern list; ``ExclusionMatcher`` is the compiled, immutable view of it.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path


def exclusion_pattern_to_regex(pattern: str) -> str:
    """Translate one exclusion pattern to a regular expression source.

    The result is meant for ``fullmatch`` against a base name.
    """
    return re.escape(pattern).replace(r"\*", ".*")


@dataclass(frozen=True)
class ExclusionMatcher:
    """Compiled exclusion patterns; a name is excluded if any pattern matches."""

    patterns: tuple[str, ...] = ()
    _compiled: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        compiled = tuple(re.compile(exclusion_pattern_to_regex(pattern)) for pattern in self.patterns)
        object.__setattr__(self, "_compiled", compiled)

    def is_excluded(self, name: str) -> bool:
        """Return whether base name ``name`` matches any active pattern."""
        return any(regex.fullmatch(name) is not None for regex in self._compiled)

    def is_path_excluded(self, path: Path) -> bool:
        return self.is_excluded(path.name)


def parse_exclusion_list(text: str) -> list[str]:
    """Parse a persisted comma-joined pattern list, dropping blanks and duplicates."""
    patterns: list[str] = []
    for raw in text.split(","):
        item = raw.strip()
        if item and item not in patterns:
            patterns.append(item)
    return patterns


def join_exclusion_list(patterns: Iterable[str]) -> str:
    return ",".join(patterns)


def extension_pattern(path: Path) -> str | None:
    """Return ``*.ext`` for ``path``, or ``None`` when it has no extension."""
    suffix = path.suffix
    if not suffix or suffix == ".":
        return None
    return f"*{suffix}"


def name_pattern(path: Path) -> str:
    return path.name


class ExclusionList:
    """Ordered, de-duplicated exclusion patterns with a change hook.

    ``on_change`` receives the full ordered list after every effective
    add/remove so callers can persist it.
    """

    def __init__(
        self,
        patterns: Iterable[str] = (),
        on_change: Callable[[list[str]], None] | None = None,
    ) -> None:
        self._patterns: list[str] = []
        for pattern in patterns:
            stripped = pattern.strip()
            if stripped and stripped not in self._patterns:
                self._patterns.append(stripped)
        self._on_change = on_change
        self._matcher = ExclusionMatcher(tuple(self._patterns))

    @property
    def patterns(self) -> list[str]:
        return list(self._patterns)

    def __contains__(self, pattern: object) -> bool:
        return pattern in self._patterns

    def __len__(self) -> int:
        return len(self._patterns)

    def matcher(self) -> ExclusionMatcher:
        return self._matcher

    def add(self, pattern: str) -> bool:
        """Append ``pattern`` unless blank or already present; return whether added."""
        stripped = pattern.strip()
        if not stripped or stripped in self._patterns:
            return False
        self._patterns.append(stripped)
        self._changed()
        return True

    def remove(self, pattern: str) -> bool:
        """Remove every occurrence of ``pattern``; return whether anything changed."""
        stripped = pattern.strip()
        if stripped not in self._patterns:
            return False
        self._patterns = [item for item in self._patterns if item != stripped]
        self._changed()
        return True

    def _changed(self) -> None:
        self._matcher = ExclusionMatcher(tuple(self._patterns))
        if self._on_change is not None:
            self._on_change(list(self._patterns))


__all__ = [
    "ExclusionList",
    "ExclusionMatcher",
    "exclusion_pattern_to_regex",
    "extension_pattern",
    "join_exclusion_list",
    "name_pattern",
    "parse_exclusion_list",
]
