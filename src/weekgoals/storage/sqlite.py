"""SqliteStore: multi-user goal, account and session storage.

Backs the HTTP server. Goals are rows keyed by week and owner; sub-items are
flat rows with a ``parent_id`` and are materialized into nested trees on read.
Deletes cascade through foreign keys, so removing a goal or a sub-item
removes its whole subtree.

Every public method is one transaction: ownership check and mutation run
under the same lock and commit together.
"""

import logging
import sqlite3
import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from weekgoals.foundation.errors import ConflictError, ErrorCode, storage_error
from weekgoals.goals.tree import build_tree, find_node_by_id
from weekgoals.goals.types import Goal, SubItem, SubItemType
from weekgoals.storage.protocol import SessionRecord, User

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    username TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS sessions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    token_hash TEXT NOT NULL UNIQUE,
    expires_at TEXT NOT NULL,
    last_used_at TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_sessions_user ON sessions(user_id);

CREATE TABLE IF NOT EXISTS goals (
    id TEXT PRIMARY KEY,
    owner_id TEXT REFERENCES users(id) ON DELETE CASCADE,
    week_key TEXT NOT NULL,
    text TEXT NOT NULL,
    checked INTEGER NOT NULL DEFAULT 0,
    sort_order INTEGER NOT NULL DEFAULT 0,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_goals_week ON goals(week_key, owner_id);

CREATE TABLE IF NOT EXISTS sub_items (
    id TEXT PRIMARY KEY,
    goal_id TEXT NOT NULL REFERENCES goals(id) ON DELETE CASCADE,
    parent_id TEXT REFERENCES sub_items(id) ON DELETE CASCADE,
    text TEXT NOT NULL,
    type TEXT NOT NULL DEFAULT 'checkbox',
    checked INTEGER NOT NULL DEFAULT 0,
    sort_order INTEGER NOT NULL DEFAULT 0,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_sub_items_goal ON sub_items(goal_id);
CREATE INDEX IF NOT EXISTS idx_sub_items_parent ON sub_items(parent_id);
"""

# Visible when no owner filter is given, or when the owner matches
_OWNER_FILTER = "(? IS NULL OR owner_id = ?)"


def _to_iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def _from_iso(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _row_to_sub(row: sqlite3.Row) -> SubItem:
    return SubItem(
        id=row["id"],
        text=row["text"],
        type=SubItemType(row["type"]),
        checked=bool(row["checked"]),
        order=row["sort_order"],
    )


def _row_to_goal(row: sqlite3.Row, subs: list[SubItem]) -> Goal:
    return Goal(
        id=row["id"],
        text=row["text"],
        week_key=row["week_key"],
        checked=bool(row["checked"]),
        order=row["sort_order"],
        subs=subs,
        owner_id=row["owner_id"],
    )


class SqliteStore:
    """SQLite implementation of GoalRepository and AccountRepository.

    Usage:
        store = SqliteStore("~/.weekgoals/weekgoals.db")
        goals = store.find_goals_by_week("2024-01-15", owner_id=user.id)

    Pass ``":memory:"`` for a throwaway database (tests).
    """

    def __init__(self, path: str | Path) -> None:
        self.path = str(path) if str(path) == ":memory:" else str(Path(path).expanduser())
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None

    def _get_connection(self) -> sqlite3.Connection:
        """Open the shared connection on first use and ensure the schema."""
        if self._conn is None:
            if self.path != ":memory:":
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path, timeout=30.0, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys=ON")
            if self.path != ":memory:":
                conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(SCHEMA)
            conn.commit()
            self._conn = conn
            logger.debug("Opened goal database at %s", self.path)
        return self._conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Serialize access and commit (or roll back) as one unit."""
        with self._lock:
            try:
                conn = self._get_connection()
                with conn:
                    yield conn
            except sqlite3.IntegrityError:
                raise
            except sqlite3.Error as e:
                logger.warning("SQLite error on %s: %s", self.path, e)
                raise storage_error(str(e), cause=e) from e

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    # ─────────────────────────────────────────────────────────────────
    # Tree loading
    # ─────────────────────────────────────────────────────────────────

    def _load_subs(self, conn: sqlite3.Connection, goal_ids: list[str]) -> dict[str, list[SubItem]]:
        if not goal_ids:
            return {}
        placeholders = ",".join("?" for _ in goal_ids)
        rows = conn.execute(
            f"SELECT * FROM sub_items WHERE goal_id IN ({placeholders}) "
            "ORDER BY sort_order, rowid",
            goal_ids,
        ).fetchall()

        by_goal: dict[str, list[sqlite3.Row]] = {}
        for row in rows:
            by_goal.setdefault(row["goal_id"], []).append(row)

        return {
            goal_id: build_tree(
                by_goal.get(goal_id, []),
                make=_row_to_sub,
                parent_of=lambda r: r["parent_id"],
            )
            for goal_id in goal_ids
        }

    def _load_goal(self, conn: sqlite3.Connection, goal_id: str, owner_id: str | None) -> Goal | None:
        row = conn.execute(
            f"SELECT * FROM goals WHERE id = ? AND {_OWNER_FILTER}",
            (goal_id, owner_id, owner_id),
        ).fetchone()
        if row is None:
            return None
        return _row_to_goal(row, self._load_subs(conn, [goal_id])[goal_id])

    def _goal_id_for_sub(self, conn: sqlite3.Connection, sub_id: str, owner_id: str | None) -> str | None:
        row = conn.execute(
            f"SELECT s.goal_id FROM sub_items s JOIN goals g ON g.id = s.goal_id "
            f"WHERE s.id = ? AND (? IS NULL OR g.owner_id = ?)",
            (sub_id, owner_id, owner_id),
        ).fetchone()
        return row["goal_id"] if row else None

    def _insert_subs(
        self,
        conn: sqlite3.Connection,
        goal_id: str,
        parent_id: str | None,
        subs: list[SubItem],
        start_order: int = 0,
    ) -> None:
        for index, sub in enumerate(subs):
            sub.order = start_order + index
            conn.execute(
                "INSERT INTO sub_items (id, goal_id, parent_id, text, type, checked, sort_order) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (sub.id, goal_id, parent_id, sub.text, sub.type.value, int(sub.checked), sub.order),
            )
            if sub.subs:
                self._insert_subs(conn, goal_id, sub.id, sub.subs)

    # ─────────────────────────────────────────────────────────────────
    # Goals
    # ─────────────────────────────────────────────────────────────────

    def find_goals_by_week(self, week_key: str, owner_id: str | None = None) -> list[Goal]:
        with self._transaction() as conn:
            rows = conn.execute(
                f"SELECT * FROM goals WHERE week_key = ? AND {_OWNER_FILTER} "
                "ORDER BY sort_order, rowid",
                (week_key, owner_id, owner_id),
            ).fetchall()
            subs = self._load_subs(conn, [r["id"] for r in rows])
            return [_row_to_goal(r, subs[r["id"]]) for r in rows]

    def get_goal(self, goal_id: str, owner_id: str | None = None) -> Goal | None:
        with self._transaction() as conn:
            return self._load_goal(conn, goal_id, owner_id)

    def create_goal(self, goal: Goal) -> Goal:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS n FROM goals WHERE week_key = ? AND owner_id IS ?",
                (goal.week_key, goal.owner_id),
            ).fetchone()
            conn.execute(
                "INSERT INTO goals (id, owner_id, week_key, text, checked, sort_order) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (goal.id, goal.owner_id, goal.week_key, goal.text, int(goal.checked), row["n"]),
            )
            self._insert_subs(conn, goal.id, None, goal.subs)
            return self._load_goal(conn, goal.id, goal.owner_id)

    def update_goal(
        self,
        goal_id: str,
        *,
        text: str | None = None,
        checked: bool | None = None,
        owner_id: str | None = None,
    ) -> Goal | None:
        with self._transaction() as conn:
            if self._load_goal(conn, goal_id, owner_id) is None:
                return None
            if text is not None:
                conn.execute("UPDATE goals SET text = ? WHERE id = ?", (text, goal_id))
            if checked is not None:
                conn.execute("UPDATE goals SET checked = ? WHERE id = ?", (int(checked), goal_id))
            return self._load_goal(conn, goal_id, owner_id)

    def delete_goal(self, goal_id: str, owner_id: str | None = None) -> bool:
        with self._transaction() as conn:
            cursor = conn.execute(
                f"DELETE FROM goals WHERE id = ? AND {_OWNER_FILTER}",
                (goal_id, owner_id, owner_id),
            )
            return cursor.rowcount > 0

    # ─────────────────────────────────────────────────────────────────
    # Sub-items
    # ─────────────────────────────────────────────────────────────────

    def get_sub_item(self, sub_id: str, owner_id: str | None = None) -> SubItem | None:
        with self._transaction() as conn:
            goal_id = self._goal_id_for_sub(conn, sub_id, owner_id)
            if goal_id is None:
                return None
            subs = self._load_subs(conn, [goal_id])[goal_id]
            return find_node_by_id(subs, sub_id)

    def create_sub_item(
        self,
        goal_id: str,
        item: SubItem,
        parent_id: str | None = None,
        owner_id: str | None = None,
    ) -> SubItem | None:
        with self._transaction() as conn:
            goal = conn.execute(
                f"SELECT id FROM goals WHERE id = ? AND {_OWNER_FILTER}",
                (goal_id, owner_id, owner_id),
            ).fetchone()
            if goal is None:
                return None
            if parent_id is not None:
                parent = conn.execute(
                    "SELECT id FROM sub_items WHERE id = ? AND goal_id = ?",
                    (parent_id, goal_id),
                ).fetchone()
                if parent is None:
                    return None

            row = conn.execute(
                "SELECT COUNT(*) AS n FROM sub_items WHERE goal_id = ? AND parent_id IS ?",
                (goal_id, parent_id),
            ).fetchone()
            self._insert_subs(conn, goal_id, parent_id, [item], start_order=row["n"])
            subs = self._load_subs(conn, [goal_id])[goal_id]
            return find_node_by_id(subs, item.id)

    def update_sub_item(
        self,
        sub_id: str,
        *,
        text: str | None = None,
        checked: bool | None = None,
        owner_id: str | None = None,
    ) -> SubItem | None:
        with self._transaction() as conn:
            goal_id = self._goal_id_for_sub(conn, sub_id, owner_id)
            if goal_id is None:
                return None
            if text is not None:
                conn.execute("UPDATE sub_items SET text = ? WHERE id = ?", (text, sub_id))
            if checked is not None:
                conn.execute(
                    "UPDATE sub_items SET checked = ? WHERE id = ?", (int(checked), sub_id)
                )
            subs = self._load_subs(conn, [goal_id])[goal_id]
            return find_node_by_id(subs, sub_id)

    def delete_sub_item(self, sub_id: str, owner_id: str | None = None) -> bool:
        with self._transaction() as conn:
            if self._goal_id_for_sub(conn, sub_id, owner_id) is None:
                return False
            conn.execute("DELETE FROM sub_items WHERE id = ?", (sub_id,))
            return True

    # ─────────────────────────────────────────────────────────────────
    # Accounts
    # ─────────────────────────────────────────────────────────────────

    def create_user(self, username: str, password_hash: str) -> User:
        user = User(id=uuid.uuid4().hex, username=username, password_hash=password_hash)
        try:
            with self._transaction() as conn:
                conn.execute(
                    "INSERT INTO users (id, username, password_hash) VALUES (?, ?, ?)",
                    (user.id, user.username, user.password_hash),
                )
        except sqlite3.IntegrityError as e:
            raise ConflictError(ErrorCode.USERNAME_TAKEN, {"username": username}, cause=e) from e
        return user

    def get_user_by_username(self, username: str) -> User | None:
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM users WHERE username = ?", (username,)).fetchone()
            return User(row["id"], row["username"], row["password_hash"]) if row else None

    def get_user(self, user_id: str) -> User | None:
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            return User(row["id"], row["username"], row["password_hash"]) if row else None

    def create_session(self, user_id: str, token_hash: str, expires_at: datetime) -> SessionRecord:
        record = SessionRecord(
            id=uuid.uuid4().hex,
            user_id=user_id,
            token_hash=token_hash,
            expires_at=expires_at,
            last_used_at=datetime.now(timezone.utc),
        )
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO sessions (id, user_id, token_hash, expires_at, last_used_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    record.id,
                    record.user_id,
                    record.token_hash,
                    _to_iso(record.expires_at),
                    _to_iso(record.last_used_at),
                ),
            )
        return record

    def get_session_by_token_hash(self, token_hash: str) -> SessionRecord | None:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM sessions WHERE token_hash = ?", (token_hash,)
            ).fetchone()
            if row is None:
                return None
            return SessionRecord(
                id=row["id"],
                user_id=row["user_id"],
                token_hash=row["token_hash"],
                expires_at=_from_iso(row["expires_at"]),
                last_used_at=_from_iso(row["last_used_at"]),
            )

    def touch_session(self, session_id: str, when: datetime) -> None:
        with self._transaction() as conn:
            conn.execute(
                "UPDATE sessions SET last_used_at = ? WHERE id = ?", (_to_iso(when), session_id)
            )

    def delete_session(self, session_id: str) -> None:
        with self._transaction() as conn:
            conn.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
