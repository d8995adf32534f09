"""Tree filtering: pure reductions, debounce, and the versioned controller."""

from __future__ import annotations

from .controller import CONTENT_SEARCH_CACHE_MAX_QUERIES, CONTENT_SEARCH_TASK, TreeFilterController
from .debounce import FILTER_DEBOUNCE_SECONDS, Debouncer
from .matching import FilterQuery, filter_tree, filter_tree_by_name, filter_tree_by_paths, name_matches

__all__ = [
    "CONTENT_SEARCH_CACHE_MAX_QUERIES",
    "CONTENT_SEARCH_TASK",
    "FILTER_DEBOUNCE_SECONDS",
    "Debouncer",
    "FilterQuery",
    "TreeFilterController",
    "filter_tree",
    "filter_tree_by_name",
    "filter_tree_by_paths",
    "name_matches",
]
