"""Configuration file management for streaker.

Reads and writes ~/.streaker/config.json for settings that don't belong in the DB
(database location, logging, page size).
"""
from __future__ import annotations

import json
from pathlib import Path

DEFAULT_CONFIG_PATH: Path = Path.home() / ".streaker" / "config.json"
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_FORMAT = "text"
DEFAULT_PAGE_SIZE = 7

LOG_FORMATS = ("text", "json")
CONFIG_KEYS = ("db_path", "log_level", "log_format", "page_size")


def load_config(config_path: Path | None = None) -> dict:
    """Load config from JSON file. Returns {} if file missing or invalid."""
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict, config_path: Path | None = None) -> None:
    """Write config dict to JSON file. Creates parent dirs if needed."""
    path = config_path or DEFAULT_CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def set_config_value(key: str, value: object, config_path: Path | None = None) -> None:
    """Persist a single key, keeping the rest of the config."""
    config = load_config(config_path)
    config[key] = value
    save_config(config, config_path)


def get_db_path(config_path: Path | None = None) -> Path | None:
    """Return the configured database path, or None to use the default."""
    raw = load_config(config_path).get("db_path")
    if raw:
        return Path(raw).expanduser()
    return None


def get_log_level(config_path: Path | None = None) -> str:
    raw = load_config(config_path).get("log_level")
    return str(raw).upper() if raw else DEFAULT_LOG_LEVEL


def get_log_format(config_path: Path | None = None) -> str:
    raw = load_config(config_path).get("log_format")
    return raw if raw in LOG_FORMATS else DEFAULT_LOG_FORMAT


def get_page_size(config_path: Path | None = None) -> int:
    raw = load_config(config_path).get("page_size")
    try:
        size = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_PAGE_SIZE
    return size if size > 0 else DEFAULT_PAGE_SIZE
