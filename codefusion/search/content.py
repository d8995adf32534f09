"""Recursive file-content substring search.

``search_files_grep`` shells out to ``grep -rlF``; ``search_files_in_process``
is a pure-Python equivalent. Both return the set of absolute file paths that
contain the query at least once and never raise: any failure means no matches.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from ..exclusions import ExclusionMatcher

logger = logging.getLogger(__name__)

SearchPrimitive = Callable[[Path, str, bool, Sequence[str]], frozenset[Path]]

_DIRECTORY_SUFFIXES = tuple({"/", os.sep})


def is_directory_pattern(pattern: str) -> bool:
    return pattern.endswith(_DIRECTORY_SUFFIXES)


def grep_exclude_args(patterns: Iterable[str]) -> list[str]:
    """Translate exclusion patterns into grep ``--exclude``/``--exclude-dir`` flags."""
    args: list[str] = []
    for pattern in patterns:
        if is_directory_pattern(pattern):
            name = pattern.rstrip("/" + os.sep)
            if name:
                args.append(f"--exclude-dir={name}")
        else:
            args.append(f"--exclude={pattern}")
    return args


def build_grep_command(
    root: Path,
    query: str,
    case_sensitive: bool,
    exclusions: Iterable[str] = (),
    grep: str = "grep",
) -> list[str]:
    cmd = [grep, "-r", "-l", "-F"]
    if not case_sensitive:
        cmd.append("-i")
    cmd.extend(grep_exclude_args(exclusions))
    cmd.extend(["-e", query, "--", str(root)])
    return cmd


def _parse_grep_output(root: Path, output: str) -> frozenset[Path]:
    paths: set[Path] = set()
    for line in output.splitlines():
        text = line.rstrip("\r")
        if not text:
            continue
        path = Path(text)
        paths.add(path if path.is_absolute() else root / path)
    return frozenset(paths)


def search_files_grep(
    root: Path,
    query: str,
    case_sensitive: bool,
    exclusions: Sequence[str] = (),
) -> frozenset[Path]:
    """Return files under ``root`` whose content contains ``query``.

    A missing grep binary, a non-zero exit status, or undecodable output all
    yield an empty set.
    """
    if not query:
        return frozenset()
    grep = shutil.which("grep")
    if grep is None:
        logger.warning("grep is not installed; content search returns no matches")
        return frozenset()

    root = root.resolve()
    cmd = build_grep_command(root, query, case_sensitive, exclusions, grep=grep)
    logger.debug("running content search: %s", cmd)
    try:
        proc = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="surrogateescape",
            check=False,
        )
    except Exception as exc:
        logger.debug("failed to run grep: %s", exc)
        return frozenset()

    if proc.returncode != 0:
        logger.debug("grep exited with status %s", proc.returncode)
        return frozenset()
    return _parse_grep_output(root, proc.stdout or "")


def _file_contains(path: Path, needle: bytes, case_sensitive: bool) -> bool:
    try:
        data = path.read_bytes()
    except OSError:
        return False
    if case_sensitive:
        return needle in data
    return needle in data.lower()


def search_files_in_process(
    root: Path,
    query: str,
    case_sensitive: bool,
    exclusions: Sequence[str] = (),
) -> frozenset[Path]:
    """Pure-Python search with the same contract as ``search_files_grep``.

    Directory patterns (trailing separator) prune directories by name; all
    other patterns exclude files by name, mirroring grep's flags.
    """
    if not query:
        return frozenset()
    root = root.resolve()
    dir_matcher = ExclusionMatcher(
        tuple(pattern.rstrip("/" + os.sep) for pattern in exclusions if is_directory_pattern(pattern))
    )
    file_matcher = ExclusionMatcher(tuple(pattern for pattern in exclusions if not is_directory_pattern(pattern)))
    needle = query.encode("utf-8")
    if not case_sensitive:
        needle = needle.lower()

    matches: set[Path] = set()
    if root.is_file():
        if _file_contains(root, needle, case_sensitive):
            matches.add(root)
        return frozenset(matches)

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [name for name in dirnames if not dir_matcher.is_excluded(name)]
        for filename in filenames:
            if file_matcher.is_excluded(filename):
                continue
            path = Path(dirpath) / filename
            if _file_contains(path, needle, case_sensitive):
                matches.add(path)
    return frozenset(matches)


__all__ = [
    "SearchPrimitive",
    "build_grep_command",
    "grep_exclude_args",
    "is_directory_pattern",
    "search_files_grep",
    "search_files_in_process",
]
