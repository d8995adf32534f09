"""Tests for the single-flight background task pool."""

from __future__ import annotations

import threading
import unittest

from codefusion.runtime.tasks import BackgroundTasks


class BackgroundTasksTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tasks = BackgroundTasks(max_workers=2)
        self.addCleanup(self.tasks.shutdown)

    def test_same_kind_and_key_is_single_flight(self) -> None:
        started = threading.Event()
        release = threading.Event()

        def blocking() -> str:
            started.set()
            release.wait(5.0)
            return "done"

        self.assertTrue(self.tasks.submit("load", "a.py", 0, blocking))
        self.assertTrue(started.wait(5.0))
        self.assertFalse(self.tasks.submit("load", "a.py", 1, lambda: "again"))
        self.assertTrue(self.tasks.in_flight("load", "a.py"))
        self.assertTrue(self.tasks.in_flight("load"))
        self.assertFalse(self.tasks.idle)

        release.set()
        result = self.tasks.wait(5.0)
        assert result is not None
        self.assertEqual((result.kind, result.key, result.version, result.value), ("load", "a.py", 0, "done"))
        self.assertFalse(self.tasks.in_flight("load", "a.py"))
        self.assertTrue(self.tasks.idle)

        self.assertTrue(self.tasks.submit("load", "a.py", 2, lambda: "next"))
        result = self.tasks.wait(5.0)
        assert result is not None
        self.assertEqual(result.value, "next")

    def test_other_key_runs_while_first_is_in_flight(self) -> None:
        release = threading.Event()
        self.assertTrue(self.tasks.submit("load", "a.py", 0, release.wait, 5.0))
        self.assertTrue(self.tasks.submit("load", "b.py", 0, lambda: "b"))

        result = self.tasks.wait(5.0)
        assert result is not None
        self.assertEqual(result.key, "b.py")
        release.set()
        self.assertIsNotNone(self.tasks.wait(5.0))

    def test_raising_task_reports_error(self) -> None:
        def boom() -> None:
            raise OSError("denied")

        self.assertTrue(self.tasks.submit("load", "x", 0, boom))
        result = self.tasks.wait(5.0)
        assert result is not None
        self.assertIsInstance(result.error, OSError)
        self.assertIsNone(result.value)

    def test_submit_after_shutdown_is_refused(self) -> None:
        self.tasks.shutdown()
        self.assertFalse(self.tasks.submit("load", "a.py", 0, lambda: None))
        self.assertEqual(self.tasks.drain(), [])


if __name__ == "__main__":
    unittest.main()
