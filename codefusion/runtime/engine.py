"""Single-threaded coordinator wiring tree, filter, selection, and content.

All published state is mutated here, either inside a public method or while
``tick`` applies results drained from the background pool. Callers drive
``tick`` from the thread that owns the engine, the same way a UI main loop
polls worker queues between frames.
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from ..content_store import (
    STALENESS_POLL_SECONDS,
    UNAVAILABLE,
    ContentEntry,
    ContentStore,
    collect_mtimes,
    read_content_entry,
    unavailable_placeholder,
)
from ..exclusions import ExclusionList, extension_pattern, name_pattern
from ..export import PathOption, render_selection
from ..file_tree_model import (
    TREE_BUILD_MAX_WORKERS,
    FileNode,
    FileTreeSnapshot,
    build_file_tree_snapshot,
    find_node,
)
from ..search.content import SearchPrimitive, search_files_grep
from ..selection import SelectionMark, SelectionState
from ..tokens import estimate_tokens
from ..tree_filter import CONTENT_SEARCH_TASK, FILTER_DEBOUNCE_SECONDS, FilterQuery, TreeFilterController
from . import events
from .staleness import StalenessPollContext
from .state import EngineState
from .tasks import BACKGROUND_MAX_WORKERS, BackgroundTasks, TaskResult

logger = logging.getLogger(__name__)

TREE_BUILD_TASK = "tree_build"
CONTENT_LOAD_TASK = "content_load"
MTIME_POLL_TASK = "mtime_poll"

IDLE_WAIT_SLICE_SECONDS = 0.05

RESULT_ORDER = {TREE_BUILD_TASK: 0, CONTENT_SEARCH_TASK: 1, CONTENT_LOAD_TASK: 2, MTIME_POLL_TASK: 3}


def _default_path_option() -> PathOption:
    return PathOption.FULL


class Engine:
    """Owns tree snapshot, filtered tree, selection set, and content cache."""

    def __init__(
        self,
        *,
        exclusions: ExclusionList | Iterable[str] | None = None,
        search_primitive: SearchPrimitive = search_files_grep,
        monotonic: Callable[[], float] = time.monotonic,
        load_path_option: Callable[[], PathOption] = _default_path_option,
        max_workers: int = BACKGROUND_MAX_WORKERS,
        tree_build_workers: int = TREE_BUILD_MAX_WORKERS,
        debounce_seconds: float = FILTER_DEBOUNCE_SECONDS,
        staleness_poll_seconds: float = STALENESS_POLL_SECONDS,
    ) -> None:
        if isinstance(exclusions, ExclusionList):
            self.exclusions = exclusions
        else:
            self.exclusions = ExclusionList(exclusions or ())
        self.monotonic = monotonic
        self.load_path_option = load_path_option
        self.tree_build_workers = tree_build_workers
        self.state = EngineState()
        self.events = events.EventBus()
        self.tasks = BackgroundTasks(max_workers=max_workers)
        self.selection = SelectionState()
        self.content = ContentStore()
        self.staleness = StalenessPollContext(poll_seconds=staleness_poll_seconds)
        self.tree_filter = TreeFilterController(
            tasks=self.tasks,
            search_primitive=search_primitive,
            monotonic=monotonic,
            debounce_seconds=debounce_seconds,
            on_published=self._on_filter_published,
            on_filtering_change=self._on_filtering_change,
        )

    # lifecycle
    def __enter__(self) -> "Engine":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def close(self) -> None:
        self.tasks.shutdown()

    def subscribe(self, callback: events.Subscriber) -> Callable[[], None]:
        return self.events.subscribe(callback)

    # read-only views
    @property
    def query(self) -> FilterQuery:
        return self.tree_filter.query

    @property
    def snapshot(self) -> FileTreeSnapshot | None:
        return self.state.snapshot

    @property
    def filtered_tree(self) -> FileNode | None:
        return self.state.filtered_tree

    @property
    def filtering(self) -> bool:
        """Whether a build or content-search pass is still pending."""
        return self.state.building or self.state.filtering

    # directory
    def open_directory(self, root: Path | str) -> None:
        """Switch to ``root``: clear selection, queries, and content, then rebuild."""
        self.state.root = Path(root).resolve()
        cleared = self.selection.clear()
        self.content.clear()
        self.tree_filter.reset_query()
        self.staleness.reset(self.monotonic())
        if cleared:
            self.events.emit(events.SELECTION_CHANGED, frozenset(cleared))
        self.events.emit(events.QUERY_CHANGED, self.query)
        self._update_token_count()
        self._start_build()

    def reload(self) -> None:
        """Rebuild the current root with the current exclusions."""
        if self.state.root is not None:
            self._start_build()

    def _start_build(self) -> None:
        assert self.state.root is not None
        self.state.build_generation += 1
        generation = self.state.build_generation
        self.state.building = True
        self.tasks.submit(
            TREE_BUILD_TASK,
            generation,
            generation,
            functools.partial(
                build_file_tree_snapshot,
                self.state.root,
                tuple(self.exclusions.patterns),
                max_workers=self.tree_build_workers,
            ),
        )

    # queries
    def set_name_query(self, text: str) -> None:
        self._update_query(name_query=text)

    def set_content_query(self, text: str) -> None:
        self._update_query(content_query=text)

    def set_name_case_sensitive(self, value: bool) -> None:
        self._update_query(name_case_sensitive=bool(value))

    def set_content_case_sensitive(self, value: bool) -> None:
        self._update_query(content_case_sensitive=bool(value))

    def set_query(self, query: FilterQuery) -> None:
        if query == self.query:
            return
        self.tree_filter.set_query(query)
        self.events.emit(events.QUERY_CHANGED, query)

    def _update_query(self, **changes: object) -> None:
        previous = self.query
        self.tree_filter.update_query(**changes)
        if self.query != previous:
            self.events.emit(events.QUERY_CHANGED, self.query)

    def notify_query_changed(self) -> None:
        """Restart the debounce window without changing query text."""
        self.tree_filter.notify_query_changed()

    # exclusions
    def add_exclusion(self, pattern: str) -> bool:
        if not self.exclusions.add(pattern):
            return False
        self.events.emit(events.EXCLUSIONS_CHANGED, self.exclusions.patterns)
        self._deselect_excluded()
        self.reload()
        return True

    def remove_exclusion(self, pattern: str) -> bool:
        if not self.exclusions.remove(pattern):
            return False
        self.events.emit(events.EXCLUSIONS_CHANGED, self.exclusions.patterns)
        self.reload()
        return True

    def _deselect_excluded(self) -> set[Path]:
        """Drop selected files whose name the current patterns now exclude."""
        matcher = self.exclusions.matcher()
        excluded = [path for path in self.selection.paths if matcher.is_excluded(path.name)]
        return self._apply_selection_change(self.selection.discard(excluded))

    def exclude_extension_of(self, path: Path) -> bool:
        """Exclude every file sharing ``path``'s extension (``*.ext``)."""
        pattern = extension_pattern(path)
        return pattern is not None and self.add_exclusion(pattern)

    def exclude_name_of(self, path: Path) -> bool:
        return self.add_exclusion(name_pattern(path))

    # selection
    def resolve_node(self, target: FileNode | Path | str) -> FileNode | None:
        """Return the node for ``target``, preferring the filtered (visible) tree."""
        if isinstance(target, FileNode):
            return target
        path = Path(target)
        if not path.is_absolute() and self.state.root is not None:
            path = self.state.root / path
        node = find_node(self.state.filtered_tree, path)
        if node is None and self.state.snapshot is not None:
            node = find_node(self.state.snapshot.root_entry, path)
        return node

    def toggle(self, target: FileNode | Path | str) -> set[Path]:
        """Toggle selection for a file or directory; return changed paths."""
        node = self.resolve_node(target)
        if node is None:
            return set()
        return self._apply_selection_change(self.selection.toggle(node))

    def select_all(self) -> set[Path]:
        """Select every file in the visible (filtered) tree."""
        if self.state.filtered_tree is None:
            return set()
        return self._apply_selection_change(self.selection.select_all(self.state.filtered_tree))

    def deselect_all(self) -> set[Path]:
        return self._apply_selection_change(self.selection.clear())

    def _apply_selection_change(self, changed: set[Path]) -> set[Path]:
        if not changed:
            return changed
        self.events.emit(events.SELECTION_CHANGED, frozenset(changed))
        for path in sorted(changed):
            if self.selection.is_selected(path):
                self._schedule_load(path)
        self._update_token_count()
        return changed

    def is_selected(self, path: Path) -> bool:
        return self.selection.is_selected(path)

    def state_of(self, target: FileNode | Path | str) -> SelectionMark:
        node = self.resolve_node(target)
        if node is None:
            return SelectionMark.UNSELECTED
        return self.selection.state_of(node)

    # content
    def load_selected_contents(self) -> None:
        for path in self.selection.paths:
            self._schedule_load(path)

    def _schedule_load(self, path: Path, force: bool = False) -> None:
        if self.tasks.in_flight(CONTENT_LOAD_TASK, path):
            return
        if not force and not self.content.needs_load(path):
            return
        self.tasks.submit(CONTENT_LOAD_TASK, path, 0, read_content_entry, path)
        self._update_content_loading()

    def _update_content_loading(self) -> None:
        loading = self.tasks.in_flight(CONTENT_LOAD_TASK)
        if loading == self.state.content_loading:
            return
        self.state.content_loading = loading
        self.events.emit(events.CONTENT_LOADING_CHANGED, loading)

    # export
    def export_text(self, option: PathOption | None = None) -> str:
        """Render loaded content of every selected file in path order."""
        paths = self.selection.paths
        return render_selection(
            paths,
            self.content.contents_for(paths),
            self.state.root,
            option if option is not None else self.load_path_option(),
        )

    def token_count(self, option: PathOption | None = None) -> int:
        return estimate_tokens(self.export_text(option))

    def _update_token_count(self) -> None:
        count = self.token_count()
        if count == self.state.token_count:
            return
        self.state.token_count = count
        self.events.emit(events.TOKENS_CHANGED, count)

    # coordinator loop
    def tick(self, now: float | None = None) -> bool:
        """Apply finished background work and fire due timers.

        Returns whether anything was processed.
        """
        processed = False
        results = sorted(self.tasks.drain(), key=lambda result: RESULT_ORDER.get(result.kind, len(RESULT_ORDER)))
        for result in results:
            self._handle_result(result)
            processed = True
        now = self.monotonic() if now is None else now
        if self.tree_filter.poll(now):
            processed = True
        if self.staleness.due(now):
            self._start_staleness_poll()
            processed = True
        return processed

    def flush(self) -> None:
        """Run any debounced filter pass immediately."""
        if self.tree_filter.debouncer.pending:
            self.tree_filter.debouncer.cancel()
            self.tree_filter.run_filter_pass()

    def wait_until_idle(self, timeout_seconds: float = 10.0, flush_debounce: bool = True) -> bool:
        """Tick until no background work or pending filter pass remains.

        Uses the wall clock for the timeout. Returns ``False`` on timeout.
        """
        deadline = time.monotonic() + timeout_seconds
        while True:
            if flush_debounce:
                self.flush()
            self.tick()
            if self.tasks.idle and not self.tree_filter.debouncer.pending:
                return True
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            result = self.tasks.wait(min(remaining, IDLE_WAIT_SLICE_SECONDS))
            if result is not None:
                self._handle_result(result)

    def _start_staleness_poll(self) -> None:
        paths = self.selection.paths
        if not paths:
            return
        self.tasks.submit(MTIME_POLL_TASK, "selected", 0, collect_mtimes, paths)

    def _handle_result(self, result: TaskResult) -> None:
        if result.kind == TREE_BUILD_TASK:
            self._apply_tree_build(result)
        elif result.kind == CONTENT_SEARCH_TASK:
            self.tree_filter.handle_result(result)
        elif result.kind == CONTENT_LOAD_TASK:
            self._apply_content_load(result)
        elif result.kind == MTIME_POLL_TASK:
            self._apply_mtime_poll(result)
        else:
            logger.debug("ignoring unknown task result %s", result.kind)

    def _apply_tree_build(self, result: TaskResult) -> None:
        if result.version != self.state.build_generation:
            logger.debug("discarding superseded tree build %s", result.version)
            return
        snapshot = result.value if result.error is None else None
        if result.error is not None:
            logger.debug("tree build failed: %r", result.error)
        if not isinstance(snapshot, FileTreeSnapshot):
            assert self.state.root is not None
            snapshot = FileTreeSnapshot(
                root_path=self.state.root,
                exclusions=tuple(self.exclusions.patterns),
                root_entry=None,
                file_paths=frozenset(),
            )
        self.state.snapshot = snapshot
        self.state.building = False
        self.events.emit(events.TREE_BUILT, snapshot)
        self.tree_filter.set_snapshot(snapshot)

    def _apply_content_load(self, result: TaskResult) -> None:
        path = result.key
        assert isinstance(path, Path)
        entry = result.value
        if result.error is not None or not isinstance(entry, ContentEntry):
            logger.debug("content load failed for %s: %r", path, result.error)
            entry = ContentEntry(path=path, text=unavailable_placeholder(path), kind=UNAVAILABLE)
        self.content.apply(entry)
        self.events.emit(events.CONTENT_LOADED, path)
        self._update_content_loading()
        if self.selection.is_selected(path):
            self._update_token_count()

    def _apply_mtime_poll(self, result: TaskResult) -> None:
        if result.error is not None or not isinstance(result.value, dict):
            return
        observed = {path: mtime for path, mtime in result.value.items() if self.selection.is_selected(path)}
        for path in self.content.observe_mtimes(observed):
            logger.debug("reloading modified file %s", path)
            self._schedule_load(path, force=True)

    def _on_filter_published(self, tree: FileNode | None) -> None:
        self.state.filtered_tree = tree
        self.events.emit(events.TREE_FILTERED, tree)

    def _on_filtering_change(self, filtering: bool) -> None:
        self.state.filtering = filtering
        self.events.emit(events.FILTERING_CHANGED, filtering)


__all__ = [
    "CONTENT_LOAD_TASK",
    "MTIME_POLL_TASK",
    "TREE_BUILD_TASK",
    "Engine",
]
