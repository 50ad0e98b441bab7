"""weekgoals configuration management.

Loads configuration from .weekgoals/config.yaml with sensible defaults.
All settings can be overridden via environment variables (WEEKGOALS_*).

Config locations (in priority order):
1. Explicit path passed to load_config()
2. .weekgoals/config.yaml (project-local)
3. ~/.weekgoals/config.yaml (user-global)
4. Built-in defaults
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from weekgoals.foundation.errors import ConfigError, ErrorCode

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL_DAYS = 30


@dataclass
class StorageConfig:
    """Where goals are persisted."""

    backend: str = "json"
    """One of: json, sqlite, memory."""

    json_path: str = "~/.weekgoals/goals.json"
    """Local single-user document, keyed by week."""

    sqlite_path: str = "~/.weekgoals/weekgoals.db"
    """Multi-user database used by the HTTP server."""


@dataclass
class AuthConfig:
    """Session settings for the server."""

    session_ttl_days: int = DEFAULT_SESSION_TTL_DAYS
    """Days before a login token expires."""


@dataclass
class ServerConfig:
    """HTTP server settings."""

    host: str = "127.0.0.1"
    port: int = 3001
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])

    log_file: str = ""
    """Extra DEBUG-level log file written by the server; empty disables it."""


@dataclass
class WeekGoalsConfig:
    """Root configuration for weekgoals."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    debug: bool = False
    """Enable debug logging by default."""


_SECTIONS: dict[str, type] = {
    "storage": StorageConfig,
    "auth": AuthConfig,
    "server": ServerConfig,
}

_BACKENDS = frozenset({"json", "sqlite", "memory"})

# Global config instance (lazy-loaded, thread-safe)
_config: WeekGoalsConfig | None = None
_config_lock = threading.Lock()


def _deep_update(base: dict, updates: dict) -> dict:
    """Recursively update a dict with another dict."""
    for key, value in updates.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_update(base[key], value)
        else:
            base[key] = value
    return base


def _coerce(value: str) -> Any:
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit() or (value.startswith("-") and value[1:].isdigit()):
        return int(value)
    try:
        return float(value)
    except ValueError:
        return value


def _apply_env_overrides(config_dict: dict, environ: dict[str, str] | None = None) -> dict:
    """Apply environment variable overrides.

    Environment variables follow pattern: WEEKGOALS_SECTION_KEY

    Examples:
        WEEKGOALS_STORAGE_BACKEND=sqlite
        WEEKGOALS_AUTH_SESSION_TTL_DAYS=7
        WEEKGOALS_SERVER_PORT=8080
        WEEKGOALS_DEBUG=true
    """
    prefix = "WEEKGOALS_"
    environ = os.environ if environ is None else environ

    for key, value in environ.items():
        if not key.startswith(prefix):
            continue

        path_str = key[len(prefix):].lower()

        if path_str == "debug":
            config_dict["debug"] = _coerce(value)
            continue

        for section in _SECTIONS:
            if path_str.startswith(section + "_"):
                sub_key = path_str[len(section) + 1:]
                if sub_key in config_dict.get(section, {}):
                    if sub_key == "cors_origins":
                        config_dict[section][sub_key] = [
                            origin.strip() for origin in value.split(",") if origin.strip()
                        ]
                    else:
                        config_dict[section][sub_key] = _coerce(value)
                break

    return config_dict


def _dict_to_config(data: dict) -> WeekGoalsConfig:
    """Convert a dict to WeekGoalsConfig."""
    try:
        storage = StorageConfig(**data.get("storage", {}))
        auth = AuthConfig(**data.get("auth", {}))
        server = ServerConfig(**data.get("server", {}))
    except TypeError as e:
        raise ConfigError(ErrorCode.CONFIG_INVALID, {"key": "config", "detail": str(e)}) from e

    if storage.backend not in _BACKENDS:
        raise ConfigError(
            ErrorCode.CONFIG_INVALID,
            {"key": "storage.backend", "detail": f"unknown backend '{storage.backend}'"},
        )

    # Non-positive TTL falls back to the default rather than failing
    if not isinstance(auth.session_ttl_days, int) or auth.session_ttl_days <= 0:
        auth.session_ttl_days = DEFAULT_SESSION_TTL_DAYS

    return WeekGoalsConfig(
        storage=storage,
        auth=auth,
        server=server,
        debug=bool(data.get("debug", False)),
    )


def _defaults() -> dict[str, Any]:
    return {
        "storage": {
            "backend": "json",
            "json_path": "~/.weekgoals/goals.json",
            "sqlite_path": "~/.weekgoals/weekgoals.db",
        },
        "auth": {
            "session_ttl_days": DEFAULT_SESSION_TTL_DAYS,
        },
        "server": {
            "host": "127.0.0.1",
            "port": 3001,
            "cors_origins": ["http://localhost:5173"],
            "log_file": "",
        },
        "debug": False,
    }


def load_config(path: str | Path | None = None) -> WeekGoalsConfig:
    """Load configuration from file with defaults and env overrides.

    Priority (highest to lowest):
    1. Environment variables (WEEKGOALS_*)
    2. Explicit path if provided
    3. .weekgoals/config.yaml (project-local)
    4. ~/.weekgoals/config.yaml (user-global)
    5. Built-in defaults

    Args:
        path: Optional explicit config file path.

    Returns:
        Merged WeekGoalsConfig instance.
    """
    global _config

    config_dict = _defaults()

    config_paths = []
    if path:
        config_paths.append(Path(path))
    config_paths.extend([
        Path(".weekgoals/config.yaml"),
        Path.home() / ".weekgoals" / "config.yaml",
    ])

    for config_path in config_paths:
        if config_path.exists():
            try:
                with open(config_path, encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning("Skipping unreadable config %s: %s", config_path, e)
                continue
            if isinstance(file_config, dict):
                _deep_update(config_dict, file_config)
                logger.debug("Loaded config from %s", config_path)
                break

    config_dict = _apply_env_overrides(config_dict)

    _config = _dict_to_config(config_dict)
    return _config


def get_config() -> WeekGoalsConfig:
    """Get the current configuration, loading if needed."""
    global _config

    if _config is not None:
        return _config

    with _config_lock:
        if _config is None:
            _config = load_config()
        return _config


def reset_config() -> None:
    """Reset the global config (useful for testing)."""
    global _config
    with _config_lock:
        _config = None


def save_default_config(path: str | Path) -> Path:
    """Write the built-in defaults to a YAML file and return its path."""
    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        yaml.safe_dump(_defaults(), f, sort_keys=False, allow_unicode=True)
    return target
