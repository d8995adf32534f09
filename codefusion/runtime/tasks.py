"""Background worker pool that hands results back through a queue.

Work runs on a ``ThreadPoolExecutor``; completions are posted to a result
queue that only the coordinator drains, so shared state is never written
from worker threads.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Hashable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from queue import Empty, Queue

logger = logging.getLogger(__name__)

BACKGROUND_MAX_WORKERS = 4


@dataclass(frozen=True)
class TaskResult:
    """Completed background task payload.

    ``version`` is whatever epoch the submitter attached, compared by the
    coordinator at completion time. ``error`` is set instead of ``value``
    when the task raised.
    """

    kind: str
    key: Hashable
    version: int
    value: object = None
    error: BaseException | None = None


class BackgroundTasks:
    """Single-flight task submission keyed by ``(kind, key)``."""

    def __init__(self, max_workers: int = BACKGROUND_MAX_WORKERS) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_workers),
            thread_name_prefix="codefusion-worker",
        )
        self._lock = threading.Lock()
        self._in_flight: set[tuple[str, Hashable]] = set()
        self._results: Queue[TaskResult] = Queue()
        self._closed = False

    def submit(
        self,
        kind: str,
        key: Hashable,
        version: int,
        fn: Callable[..., object],
        *args: object,
    ) -> bool:
        """Run ``fn(*args)`` off-thread unless the same ``(kind, key)`` is running.

        Returns whether a new task was started.
        """
        token = (kind, key)
        with self._lock:
            if self._closed or token in self._in_flight:
                return False
            self._in_flight.add(token)

        def run() -> None:
            try:
                value = fn(*args)
            except Exception as exc:
                result = TaskResult(kind=kind, key=key, version=version, error=exc)
            else:
                result = TaskResult(kind=kind, key=key, version=version, value=value)
            with self._lock:
                self._in_flight.discard(token)
                self._results.put(result)

        try:
            self._executor.submit(run)
        except RuntimeError:
            with self._lock:
                self._in_flight.discard(token)
            return False
        return True

    def in_flight(self, kind: str, key: Hashable | None = None) -> bool:
        with self._lock:
            if key is not None:
                return (kind, key) in self._in_flight
            return any(token[0] == kind for token in self._in_flight)

    @property
    def idle(self) -> bool:
        with self._lock:
            return not self._in_flight and self._results.empty()

    def drain(self) -> list[TaskResult]:
        """Drain all completed results without blocking."""
        out: list[TaskResult] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out

    def wait(self, timeout_seconds: float) -> TaskResult | None:
        """Block up to ``timeout_seconds`` for one result."""
        try:
            return self._results.get(timeout=timeout_seconds)
        except Empty:
            return None

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)


__all__ = ["BACKGROUND_MAX_WORKERS", "BackgroundTasks", "TaskResult"]
