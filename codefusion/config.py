"""Persistent JSON config helpers.

Stores the comma-joined exclusion list and the export path-display option.
Malformed or missing config falls back to defaults.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from platformdirs import user_config_dir

from .exclusions import join_exclusion_list, parse_exclusion_list
from .export import PathOption

APP_NAME = "codefusion"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

EXCLUDED_ITEMS_KEY = "excluded_items"
PATH_OPTION_KEY = "path_option"


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Any filesystem/serialization error is ignored to keep runtime behavior
    non-fatal when config cannot be written.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except Exception:
        pass


def load_excluded_items() -> list[str]:
    """Return the persisted exclusion patterns in their stored order."""
    value = load_config().get(EXCLUDED_ITEMS_KEY)
    if not isinstance(value, str):
        return []
    return parse_exclusion_list(value)


def save_excluded_items(patterns: Iterable[str]) -> None:
    """Persist exclusion patterns as one comma-joined string."""
    config = load_config()
    config[EXCLUDED_ITEMS_KEY] = join_exclusion_list(patterns)
    save_config(config)


def load_path_option() -> PathOption:
    """Return the persisted path-display option, defaulting to ``FULL``."""
    return PathOption.parse(load_config().get(PATH_OPTION_KEY), PathOption.FULL)


def save_path_option(option: PathOption) -> None:
    config = load_config()
    config[PATH_OPTION_KEY] = option.value
    save_config(config)
