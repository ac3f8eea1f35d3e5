"""Configuration file management for hours-rank.

Reads and writes ~/.hours-rank/config.json for settings that don't belong in the DB
(database location and the local caller identity).
"""
from __future__ import annotations

import json
from pathlib import Path

from hours_rank.models import RequestContext

DEFAULT_CONFIG_PATH: Path = Path.home() / ".hours-rank" / "config.json"


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


def get_db_path(config_path: Path | None = None) -> Path | None:
    """Return the configured database path, or None to use the default."""
    raw = load_config(config_path).get("db_path")
    if raw:
        return Path(raw).expanduser()
    return None


def get_caller(config_path: Path | None = None) -> RequestContext:
    """Build the request context for the locally configured user."""
    config = load_config(config_path)
    return RequestContext(
        caller_id=config.get("user_id") or None,
        caller_email=config.get("user_email") or None,
    )


def set_caller(user_id: str, email: str | None = None, config_path: Path | None = None) -> None:
    """Persist the local user identity, keeping other config keys."""
    config = load_config(config_path)
    config["user_id"] = user_id
    if email:
        config["user_email"] = email
    else:
        config.pop("user_email", None)
    save_config(config, config_path)
