"""Change notifications emitted by the coordinator to its subscribers."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

TREE_BUILT = "tree_built"
TREE_FILTERED = "tree_filtered"
FILTERING_CHANGED = "filtering_changed"
QUERY_CHANGED = "query_changed"
SELECTION_CHANGED = "selection_changed"
CONTENT_LOADED = "content_loaded"
CONTENT_LOADING_CHANGED = "content_loading_changed"
TOKENS_CHANGED = "tokens_changed"
EXCLUSIONS_CHANGED = "exclusions_changed"


@dataclass(frozen=True)
class EngineEvent:
    kind: str
    payload: object = None


Subscriber = Callable[[EngineEvent], None]


class EventBus:
    """Synchronous fan-out; subscribers run on the emitting (coordinator) thread."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` and return a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def emit(self, kind: str, payload: object = None) -> None:
        event = EngineEvent(kind=kind, payload=payload)
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("subscriber failed handling %s", kind)


__all__ = [
    "CONTENT_LOADED",
    "CONTENT_LOADING_CHANGED",
    "EXCLUSIONS_CHANGED",
    "FILTERING_CHANGED",
    "QUERY_CHANGED",
    "SELECTION_CHANGED",
    "TOKENS_CHANGED",
    "TREE_BUILT",
    "TREE_FILTERED",
    "EngineEvent",
    "EventBus",
    "Subscriber",
]
