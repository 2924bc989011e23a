"""Configuration file management for devtracker.

Reads and writes ~/.devtracker/config.json for settings that don't belong in
the DB (database location, default user).
"""
from __future__ import annotations

import json
import os
from pathlib import Path

DEFAULT_CONFIG_PATH: Path = Path.home() / ".devtracker" / "config.json"
DEFAULT_DB_PATH: Path = Path.home() / ".devtracker" / "data.db"
DEFAULT_USER = "local"
DB_ENV_VAR = "DEVTRACKER_DB"


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


def get_db_path(config_path: Path | None = None) -> Path:
    """Database path: $DEVTRACKER_DB, then the config file, then the default."""
    env = os.environ.get(DB_ENV_VAR)
    if env:
        return Path(env).expanduser()
    raw = load_config(config_path).get("db_path")
    if raw:
        return Path(raw).expanduser()
    return DEFAULT_DB_PATH


def set_db_path(db_path: Path, config_path: Path | None = None) -> None:
    config = load_config(config_path)
    config["db_path"] = str(db_path)
    save_config(config, config_path)


def get_default_user(config_path: Path | None = None) -> str:
    """Return the configured user id, or 'local' if not set."""
    return load_config(config_path).get("user") or DEFAULT_USER


def set_default_user(user_id: str, config_path: Path | None = None) -> None:
    """Persist the default user id to config."""
    config = load_config(config_path)
    config["user"] = user_id
    save_config(config, config_path)
