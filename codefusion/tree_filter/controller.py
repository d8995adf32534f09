"""Debounced, versioned tree-filter controller.

Name filtering runs synchronously on the coordinator. Content filtering
submits a search to the background pool tagged with the query version at
submission time; a result is only applied if no newer query was issued
since. The previously published tree stays visible while a search runs.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable, Collection
from dataclasses import replace
from pathlib import Path

from ..file_tree_model import FileNode, FileTreeSnapshot
from ..runtime.tasks import BackgroundTasks, TaskResult
from ..search.content import SearchPrimitive, search_files_grep
from .debounce import FILTER_DEBOUNCE_SECONDS, Debouncer
from .matching import FilterQuery, filter_tree

logger = logging.getLogger(__name__)

CONTENT_SEARCH_TASK = "content_search"
CONTENT_SEARCH_CACHE_MAX_QUERIES = 64

ContentSearchKey = tuple[str, str, bool, tuple[str, ...]]


class TreeFilterController:
    """Owns query state, the debounce window, and the published filtered tree."""

    def __init__(
        self,
        *,
        tasks: BackgroundTasks,
        search_primitive: SearchPrimitive = search_files_grep,
        monotonic: Callable[[], float] = time.monotonic,
        debounce_seconds: float = FILTER_DEBOUNCE_SECONDS,
        on_published: Callable[[FileNode | None], None] | None = None,
        on_filtering_change: Callable[[bool], None] | None = None,
    ) -> None:
        self.tasks = tasks
        self.search_primitive = search_primitive
        self.monotonic = monotonic
        self.debouncer = Debouncer(debounce_seconds)
        self.on_published = on_published
        self.on_filtering_change = on_filtering_change
        self.query = FilterQuery()
        self.query_version = 0
        self.filter_passes = 0
        self.snapshot: FileTreeSnapshot | None = None
        self.filtered_tree: FileNode | None = None
        self.filtering = False
        self._awaiting_version: int | None = None
        self._snapshot_version = 0
        self.content_search_cache: OrderedDict[ContentSearchKey, frozenset[Path]] = OrderedDict()

    @staticmethod
    def apply(
        tree: FileNode | None,
        query: FilterQuery,
        content_matches: Collection[Path] | None = None,
    ) -> FileNode | None:
        """Pure filter over ``tree``; see ``filter_tree``."""
        return filter_tree(tree, query, content_matches)

    # query state
    def set_query(self, query: FilterQuery, now: float | None = None) -> None:
        """Replace query state and (re)start the debounce window."""
        if query == self.query:
            return
        self.query = query
        self.notify_query_changed(now)

    def update_query(self, now: float | None = None, **changes: object) -> None:
        self.set_query(replace(self.query, **changes), now)

    def notify_query_changed(self, now: float | None = None) -> None:
        """Bump the query epoch and push the debounce deadline out."""
        self.query_version += 1
        self.debouncer.notify(self.monotonic() if now is None else now)

    def reset_query(self) -> None:
        """Clear queries without scheduling a pass."""
        self.query = FilterQuery()
        self.query_version += 1
        self.debouncer.cancel()

    # snapshot
    def set_snapshot(self, snapshot: FileTreeSnapshot | None) -> None:
        """Install a rebuilt tree and filter it immediately."""
        self.snapshot = snapshot
        self.content_search_cache.clear()
        self.query_version += 1
        self._snapshot_version = self.query_version
        self.debouncer.cancel()
        self.run_filter_pass()

    # passes
    def poll(self, now: float | None = None) -> bool:
        """Run a filter pass if the debounce window has elapsed."""
        if not self.debouncer.poll(self.monotonic() if now is None else now):
            return False
        self.run_filter_pass()
        return True

    def run_filter_pass(self) -> None:
        """Filter the current snapshot with the current query."""
        self.filter_passes += 1
        snapshot = self.snapshot
        query = self.query
        if snapshot is None or snapshot.root_entry is None:
            self._publish(None)
            return
        if not query.needs_content_search:
            self._publish(filter_tree(snapshot.root_entry, query))
            return

        key = self.content_search_cache_key(snapshot, query)
        cached = self.content_search_cache.get(key)
        if cached is not None:
            self.content_search_cache.move_to_end(key)
            self._publish(filter_tree(snapshot.root_entry, query, cached))
            return

        version = self.query_version
        self._awaiting_version = version
        self._set_filtering(True)
        self.tasks.submit(
            CONTENT_SEARCH_TASK,
            (key, version),
            version,
            self.search_primitive,
            snapshot.root_path,
            query.content_query,
            query.content_case_sensitive,
            list(snapshot.exclusions),
        )

    @staticmethod
    def content_search_cache_key(snapshot: FileTreeSnapshot, query: FilterQuery) -> ContentSearchKey:
        return (
            str(snapshot.root_path),
            query.content_query,
            query.content_case_sensitive,
            snapshot.exclusions,
        )

    def handle_result(self, result: TaskResult) -> bool:
        """Consume a finished content search; return whether it was ours."""
        if result.kind != CONTENT_SEARCH_TASK:
            return False
        key, version = result.key
        if result.error is not None:
            logger.debug("content search failed: %r", result.error)
            matches: frozenset[Path] = frozenset()
        else:
            matches = frozenset(result.value or ())
            if version >= self._snapshot_version:
                self._store_content_search_cache(key, matches)

        if version != self.query_version or version != self._awaiting_version:
            logger.debug("discarding superseded content search (version %s, current %s)", version, self.query_version)
            return True

        snapshot = self.snapshot
        root_entry = snapshot.root_entry if snapshot is not None else None
        self._publish(filter_tree(root_entry, self.query, matches))
        return True

    def _store_content_search_cache(self, key: ContentSearchKey, matches: frozenset[Path]) -> None:
        """Insert a search result into the LRU cache and enforce max size."""
        self.content_search_cache[key] = matches
        self.content_search_cache.move_to_end(key)
        while len(self.content_search_cache) > CONTENT_SEARCH_CACHE_MAX_QUERIES:
            self.content_search_cache.popitem(last=False)

    def _publish(self, tree: FileNode | None) -> None:
        self._awaiting_version = None
        self.filtered_tree = tree
        self._set_filtering(False)
        if self.on_published is not None:
            self.on_published(tree)

    def _set_filtering(self, filtering: bool) -> None:
        if self.filtering == filtering:
            return
        self.filtering = filtering
        if self.on_filtering_change is not None:
            self.on_filtering_change(filtering)


__all__ = [
    "CONTENT_SEARCH_CACHE_MAX_QUERIES",
    "CONTENT_SEARCH_TASK",
    "TreeFilterController",
]
