"""In-process stores.

MemoryGoalRepository keeps every week's forest as nested Goal objects and
mutates them with the recursive helpers in ``weekgoals.goals.tree``. It is the
local, single-process deployment of the repository contract; the JSON store
builds on it by loading and saving the same structure around each call.

Returned objects are deep copies, so callers only ever see persisted state.
"""

import copy
import logging
import threading
import uuid
from datetime import datetime

from weekgoals.goals.tree import append_child, find_node_by_id, remove_node, sort_forest
from weekgoals.goals.types import Goal, SubItem
from weekgoals.storage.protocol import SessionRecord, User

logger = logging.getLogger(__name__)

Weeks = dict[str, list[Goal]]


def _visible(goal: Goal, owner_id: str | None) -> bool:
    return owner_id is None or goal.owner_id == owner_id


class MemoryGoalRepository:
    """Goal storage held in a dict keyed by week.

    Thread-safe via a single re-entrant lock around load/mutate/save.
    """

    def __init__(self) -> None:
        self._weeks: Weeks = {}
        self._lock = threading.RLock()

    # ─────────────────────────────────────────────────────────────────
    # Load/save hooks (overridden by file-backed subclasses)
    # ─────────────────────────────────────────────────────────────────

    def _load(self) -> Weeks:
        return self._weeks

    def _save(self, weeks: Weeks) -> None:
        self._weeks = weeks

    # ─────────────────────────────────────────────────────────────────
    # Lookup helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _find_goal(weeks: Weeks, goal_id: str, owner_id: str | None) -> Goal | None:
        for goals in weeks.values():
            for goal in goals:
                if goal.id == goal_id:
                    return goal if _visible(goal, owner_id) else None
        return None

    @staticmethod
    def _find_sub(
        weeks: Weeks, sub_id: str, owner_id: str | None
    ) -> tuple[Goal, SubItem] | None:
        for goals in weeks.values():
            for goal in goals:
                node = find_node_by_id(goal.subs, sub_id)
                if node is not None:
                    return (goal, node) if _visible(goal, owner_id) else None
        return None

    # ─────────────────────────────────────────────────────────────────
    # Goals
    # ─────────────────────────────────────────────────────────────────

    def find_goals_by_week(self, week_key: str, owner_id: str | None = None) -> list[Goal]:
        with self._lock:
            goals = [g for g in self._load().get(week_key, []) if _visible(g, owner_id)]
            return sort_forest(copy.deepcopy(goals))

    def get_goal(self, goal_id: str, owner_id: str | None = None) -> Goal | None:
        with self._lock:
            goal = self._find_goal(self._load(), goal_id, owner_id)
            return sort_forest([copy.deepcopy(goal)])[0] if goal else None

    def create_goal(self, goal: Goal) -> Goal:
        with self._lock:
            weeks = self._load()
            stored = copy.deepcopy(goal)
            stored.order = sum(
                1 for g in weeks.get(goal.week_key, []) if g.owner_id == goal.owner_id
            )
            weeks.setdefault(goal.week_key, []).append(stored)
            self._save(weeks)
            return copy.deepcopy(stored)

    def update_goal(
        self,
        goal_id: str,
        *,
        text: str | None = None,
        checked: bool | None = None,
        owner_id: str | None = None,
    ) -> Goal | None:
        with self._lock:
            weeks = self._load()
            goal = self._find_goal(weeks, goal_id, owner_id)
            if goal is None:
                return None
            if text is not None:
                goal.text = text
            if checked is not None:
                goal.checked = checked
            self._save(weeks)
            return copy.deepcopy(goal)

    def delete_goal(self, goal_id: str, owner_id: str | None = None) -> bool:
        with self._lock:
            weeks = self._load()
            goal = self._find_goal(weeks, goal_id, owner_id)
            if goal is None:
                return False
            weeks[goal.week_key] = [g for g in weeks[goal.week_key] if g.id != goal_id]
            self._save(weeks)
            return True

    # ─────────────────────────────────────────────────────────────────
    # Sub-items
    # ─────────────────────────────────────────────────────────────────

    def get_sub_item(self, sub_id: str, owner_id: str | None = None) -> SubItem | None:
        with self._lock:
            found = self._find_sub(self._load(), sub_id, owner_id)
            return copy.deepcopy(found[1]) if found else None

    def create_sub_item(
        self,
        goal_id: str,
        item: SubItem,
        parent_id: str | None = None,
        owner_id: str | None = None,
    ) -> SubItem | None:
        with self._lock:
            weeks = self._load()
            goal = self._find_goal(weeks, goal_id, owner_id)
            if goal is None:
                return None
            if parent_id is None:
                siblings = goal.subs
            else:
                parent = find_node_by_id(goal.subs, parent_id)
                if parent is None:
                    return None
                siblings = parent.subs
            stored = append_child(siblings, copy.deepcopy(item))
            self._save(weeks)
            return copy.deepcopy(stored)

    def update_sub_item(
        self,
        sub_id: str,
        *,
        text: str | None = None,
        checked: bool | None = None,
        owner_id: str | None = None,
    ) -> SubItem | None:
        with self._lock:
            weeks = self._load()
            found = self._find_sub(weeks, sub_id, owner_id)
            if found is None:
                return None
            node = found[1]
            if text is not None:
                node.text = text
            if checked is not None:
                node.checked = checked
            self._save(weeks)
            return copy.deepcopy(node)

    def delete_sub_item(self, sub_id: str, owner_id: str | None = None) -> bool:
        with self._lock:
            weeks = self._load()
            found = self._find_sub(weeks, sub_id, owner_id)
            if found is None:
                return False
            remove_node(found[0].subs, sub_id)
            self._save(weeks)
            return True


class MemoryAccountRepository:
    """Users and sessions held in dicts. Used by tests and the memory backend."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}
        self._sessions: dict[str, SessionRecord] = {}
        self._lock = threading.Lock()

    def create_user(self, username: str, password_hash: str) -> User:
        with self._lock:
            user = User(id=uuid.uuid4().hex, username=username, password_hash=password_hash)
            self._users[user.id] = user
            return user

    def get_user_by_username(self, username: str) -> User | None:
        with self._lock:
            return next((u for u in self._users.values() if u.username == username), None)

    def get_user(self, user_id: str) -> User | None:
        with self._lock:
            return self._users.get(user_id)

    def create_session(self, user_id: str, token_hash: str, expires_at: datetime) -> SessionRecord:
        with self._lock:
            record = SessionRecord(
                id=uuid.uuid4().hex,
                user_id=user_id,
                token_hash=token_hash,
                expires_at=expires_at,
                last_used_at=datetime.now(expires_at.tzinfo),
            )
            self._sessions[record.id] = record
            return record

    def get_session_by_token_hash(self, token_hash: str) -> SessionRecord | None:
        with self._lock:
            return next(
                (s for s in self._sessions.values() if s.token_hash == token_hash), None
            )

    def touch_session(self, session_id: str, when: datetime) -> None:
        with self._lock:
            record = self._sessions.get(session_id)
            if record is not None:
                self._sessions[session_id] = SessionRecord(
                    id=record.id,
                    user_id=record.user_id,
                    token_hash=record.token_hash,
                    expires_at=record.expires_at,
                    last_used_at=when,
                )

    def delete_session(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)
