"""Quiet-period debouncing driven by an injected monotonic clock."""

from __future__ import annotations

FILTER_DEBOUNCE_SECONDS = 0.3


class Debouncer:
    """Coalesce bursts of notifications into one firing after a quiet window.

    Every ``notify`` pushes the deadline out to ``now + window_seconds``;
    ``poll`` returns ``True`` exactly once when the deadline has passed.
    """

    def __init__(self, window_seconds: float = FILTER_DEBOUNCE_SECONDS) -> None:
        self.window_seconds = window_seconds
        self._deadline: float | None = None

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    @property
    def deadline(self) -> float | None:
        return self._deadline

    def notify(self, now: float) -> None:
        self._deadline = now + self.window_seconds

    def cancel(self) -> None:
        self._deadline = None

    def poll(self, now: float) -> bool:
        if self._deadline is None or now < self._deadline:
            return False
        self._deadline = None
        return True


__all__ = ["Debouncer", "FILTER_DEBOUNCE_SECONDS"]
