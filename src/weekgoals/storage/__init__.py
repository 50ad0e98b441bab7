"""Goal and account persistence.

Three interchangeable backends implement the repository protocols:
- memory: in-process dicts (tests, throwaway servers)
- json: one local document keyed by week (single-user CLI)
- sqlite: multi-user database with accounts and sessions (HTTP server)
"""

import logging
from pathlib import Path

from weekgoals.foundation.config import StorageConfig
from weekgoals.foundation.errors import ConfigError, ErrorCode
from weekgoals.storage.json_store import JsonGoalRepository
from weekgoals.storage.memory import MemoryAccountRepository, MemoryGoalRepository
from weekgoals.storage.protocol import AccountRepository, GoalRepository, SessionRecord, User
from weekgoals.storage.sqlite import SqliteStore

logger = logging.getLogger(__name__)

SQLITE_SUFFIXES = frozenset({".db", ".sqlite", ".sqlite3"})


def is_sqlite_path(path: str | Path) -> bool:
    return Path(path).suffix.lower() in SQLITE_SUFFIXES


def open_goal_store(config: StorageConfig, path: str | Path | None = None) -> GoalRepository:
    """Build the goal repository selected by ``config.backend``.

    Args:
        config: Storage section of the configuration
        path: Overrides the configured file path for json/sqlite backends
    """
    if config.backend == "memory":
        logger.info("Using in-memory goal store")
        return MemoryGoalRepository()
    if config.backend == "sqlite":
        target = path or config.sqlite_path
        logger.info("Using sqlite goal store at %s", target)
        return SqliteStore(target)
    target = path or config.json_path
    logger.info("Using json goal store at %s", target)
    return JsonGoalRepository(target)


def open_server_stores(
    config: StorageConfig, path: str | Path | None = None
) -> tuple[GoalRepository, AccountRepository]:
    """Goal and account repositories for the multi-user server.

    The server needs accounts, so the json backend is promoted to sqlite.
    With that promotion an explicit ``path`` must look like a database file;
    a json document is never opened as sqlite.

    Raises:
        ConfigError: json backend with a ``path`` that is not a database file
    """
    if config.backend == "memory":
        logger.info("Server using in-memory stores")
        return MemoryGoalRepository(), MemoryAccountRepository()
    if config.backend != "sqlite" and path is not None and not is_sqlite_path(path):
        raise ConfigError(
            ErrorCode.CONFIG_INVALID,
            {
                "key": "storage.path",
                "detail": (
                    f"the server stores data in sqlite; '{path}' is not a database file "
                    f"(use one of {', '.join(sorted(SQLITE_SUFFIXES))})"
                ),
            },
        )
    target = path or config.sqlite_path
    logger.info("Server using sqlite store at %s", target)
    store = SqliteStore(target)
    return store, store


__all__ = [
    "SQLITE_SUFFIXES",
    "AccountRepository",
    "GoalRepository",
    "JsonGoalRepository",
    "MemoryAccountRepository",
    "MemoryGoalRepository",
    "SessionRecord",
    "SqliteStore",
    "User",
    "is_sqlite_path",
    "open_goal_store",
    "open_server_stores",
]
