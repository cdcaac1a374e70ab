"""Persistent JSON config helpers.

Stores hidden-file, color and indicator preferences plus editor and opener
overrides. A missing or malformed file reads as an empty config; failed
writes are logged and otherwise ignored.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir, user_log_dir

LOGGER = logging.getLogger(__name__)

APP_NAME = "peekdir"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
LOG_PATH = Path(user_log_dir(APP_NAME, appauthor=False)) / "peekdir.log"
DEBUG_ENV = "PEEKDIR_DEBUG"


def load_config() -> dict[str, object]:
    """Read the config file; anything unusable reads as ``{}``."""
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    # A list or scalar at the top level counts as no config.
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Write ``data`` back, creating the config directory on first use.

    Failures (read-only home, full disk) are logged at debug level and
    dropped; the browser keeps running with its in-memory options.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError):
        LOGGER.debug("could not write %s", CONFIG_PATH, exc_info=True)


def config_bool(data: dict[str, object], key: str, default: bool) -> bool:
    """Only explicit booleans count; anything else yields ``default``."""
    value = data.get(key)
    return value if isinstance(value, bool) else default


def config_command(data: dict[str, object], key: str) -> str | None:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def save_show_hidden(show_hidden: bool) -> None:
    config = load_config()
    config["show_hidden"] = bool(show_hidden)
    save_config(config)
