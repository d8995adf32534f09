"""Periodic poll timing for selected-file staleness checks."""

from __future__ import annotations

from dataclasses import dataclass

from ..content_store import STALENESS_POLL_SECONDS


@dataclass
class StalenessPollContext:
    last_poll: float | None = None
    poll_seconds: float = STALENESS_POLL_SECONDS

    def due(self, now: float) -> bool:
        """Return whether a poll should start at ``now``; records the poll time."""
        if self.last_poll is None:
            self.last_poll = now
            return False
        if (now - self.last_poll) < self.poll_seconds:
            return False
        self.last_poll = now
        return True

    def reset(self, now: float | None = None) -> None:
        self.last_poll = now
