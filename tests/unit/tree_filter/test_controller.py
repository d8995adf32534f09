"""Tests for the debounced, versioned tree-filter controller.

A fake task pool records submissions so tests control exactly when and in
which order content-search results come back.
"""

from __future__ import annotations

import unittest
from pathlib import Path

from codefusion.file_tree_model import FileNode, FileTreeSnapshot, iter_files
from codefusion.runtime.tasks import TaskResult
from codefusion.tree_filter import CONTENT_SEARCH_TASK, FilterQuery, TreeFilterController

ROOT = Path("/project")
ALPHA = ROOT / "alpha.py"
BETA = ROOT / "beta.md"


class _FakeTasks:
    def __init__(self) -> None:
        self.submitted: list[tuple] = []

    def submit(self, kind, key, version, fn, *args) -> bool:
        self.submitted.append((kind, key, version, fn, args))
        return True


def _snapshot() -> FileTreeSnapshot:
    tree = FileNode(
        path=ROOT,
        is_dir=True,
        children=(FileNode(path=ALPHA, is_dir=False), FileNode(path=BETA, is_dir=False)),
    )
    return FileTreeSnapshot(root_path=ROOT, exclusions=(".git",), root_entry=tree, file_paths=frozenset({ALPHA, BETA}))


def _result(submission: tuple, value=None, error=None) -> TaskResult:
    kind, key, version, _fn, _args = submission
    return TaskResult(kind=kind, key=key, version=version, value=value, error=error)


class TreeFilterControllerTests(unittest.TestCase):
    def _controller(self) -> tuple[TreeFilterController, _FakeTasks, list]:
        tasks = _FakeTasks()
        published: list = []
        controller = TreeFilterController(
            tasks=tasks,
            monotonic=lambda: 0.0,
            debounce_seconds=0.25,
            on_published=published.append,
        )
        controller.set_snapshot(_snapshot())
        return controller, tasks, published

    def test_snapshot_install_publishes_unfiltered_tree(self) -> None:
        controller, tasks, published = self._controller()
        self.assertEqual(published, [_snapshot().root_entry])
        self.assertEqual(controller.filter_passes, 1)
        self.assertEqual(tasks.submitted, [])

    def test_name_query_runs_once_after_debounce(self) -> None:
        controller, _tasks, published = self._controller()
        for step in range(5):
            controller.update_query(now=step * 0.125, name_query="alpha"[: step + 1])

        self.assertFalse(controller.poll(0.5))
        self.assertTrue(controller.poll(0.75))
        self.assertFalse(controller.poll(10.0))

        self.assertEqual(controller.filter_passes, 2)
        self.assertEqual(list(iter_files(published[-1])), [ALPHA])

    def test_unchanged_query_does_not_restart_debounce(self) -> None:
        controller, _tasks, _published = self._controller()
        version = controller.query_version
        controller.set_query(FilterQuery(), now=0.0)
        self.assertEqual(controller.query_version, version)
        self.assertFalse(controller.debouncer.pending)

    def test_content_search_submits_background_task_with_exclusions(self) -> None:
        controller, tasks, _published = self._controller()
        controller.update_query(now=0.0, content_query="needle", content_case_sensitive=True)
        controller.poll(1.0)

        self.assertTrue(controller.filtering)
        self.assertEqual(len(tasks.submitted), 1)
        kind, _key, version, _fn, args = tasks.submitted[0]
        self.assertEqual(kind, CONTENT_SEARCH_TASK)
        self.assertEqual(version, controller.query_version)
        self.assertEqual(args, (ROOT, "needle", True, [".git"]))

    def test_superseded_result_is_discarded(self) -> None:
        controller, tasks, published = self._controller()
        controller.update_query(now=0.0, content_query="a")
        controller.poll(1.0)
        controller.update_query(now=1.0, content_query="b")
        controller.poll(2.0)
        first, second = tasks.submitted

        controller.handle_result(_result(first, value=frozenset({ALPHA})))
        self.assertEqual(len(published), 1)
        self.assertTrue(controller.filtering)

        controller.handle_result(_result(second, value=frozenset({BETA})))
        self.assertEqual(list(iter_files(published[-1])), [BETA])
        self.assertFalse(controller.filtering)

    def test_late_result_after_newer_publish_is_ignored(self) -> None:
        controller, tasks, published = self._controller()
        controller.update_query(now=0.0, content_query="a")
        controller.poll(1.0)
        stale = tasks.submitted[0]
        controller.update_query(now=1.0, content_query="")
        controller.poll(2.0)
        self.assertEqual(published[-1], _snapshot().root_entry)

        controller.handle_result(_result(stale, value=frozenset({ALPHA})))
        self.assertEqual(published[-1], _snapshot().root_entry)

    def test_cached_search_result_is_reused(self) -> None:
        controller, tasks, published = self._controller()
        controller.update_query(now=0.0, content_query="a")
        controller.poll(1.0)
        controller.handle_result(_result(tasks.submitted[0], value=frozenset({ALPHA})))

        controller.update_query(now=2.0, content_query="b")
        controller.update_query(now=2.0, content_query="a")
        controller.poll(3.0)

        self.assertEqual(len(tasks.submitted), 1)
        self.assertEqual(list(iter_files(published[-1])), [ALPHA])

    def test_failed_search_publishes_no_matches(self) -> None:
        controller, tasks, published = self._controller()
        controller.update_query(now=0.0, content_query="a")
        controller.poll(1.0)
        controller.handle_result(_result(tasks.submitted[0], error=RuntimeError("boom")))

        self.assertIsNone(published[-1])
        self.assertFalse(controller.filtering)

    def test_apply_is_pure(self) -> None:
        tree = _snapshot().root_entry
        filtered = TreeFilterController.apply(tree, FilterQuery(name_query="beta"))
        self.assertEqual(list(iter_files(filtered)), [BETA])
        self.assertEqual(list(iter_files(tree)), [ALPHA, BETA])


if __name__ == "__main__":
    unittest.main()
