"""Protocol definitions for goal and account persistence.

These protocols let the goal service and the auth service run unchanged on
top of an in-process store (local use, tests) or a database (server).

Ownership: every goal method takes an optional ``owner_id``. When given, rows
belonging to another owner behave exactly like missing rows (``None`` or
``False``), so callers cannot tell whether other users' data exists.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

from weekgoals.goals.types import Goal, SubItem


@dataclass(frozen=True, slots=True)
class User:
    """A registered account."""

    id: str
    username: str
    password_hash: str = ""

    def public(self) -> dict[str, str]:
        return {"id": self.id, "username": self.username}


@dataclass(frozen=True, slots=True)
class SessionRecord:
    """A stored login session. Only the token's hash is kept."""

    id: str
    user_id: str
    token_hash: str
    expires_at: datetime
    last_used_at: datetime


@runtime_checkable
class GoalRepository(Protocol):
    """Persistence contract consumed by GoalService."""

    def find_goals_by_week(self, week_key: str, owner_id: str | None = None) -> list[Goal]:
        """Goals of a week sorted by order, sub-trees sorted at every level."""
        ...

    def get_goal(self, goal_id: str, owner_id: str | None = None) -> Goal | None:
        ...

    def create_goal(self, goal: Goal) -> Goal:
        """Append a goal (and any sub-tree it carries) to its week.

        The store assigns ``order`` = current goal count for the week.
        """
        ...

    def update_goal(
        self,
        goal_id: str,
        *,
        text: str | None = None,
        checked: bool | None = None,
        owner_id: str | None = None,
    ) -> Goal | None:
        ...

    def delete_goal(self, goal_id: str, owner_id: str | None = None) -> bool:
        """Delete a goal and every sub-item under it."""
        ...

    def get_sub_item(self, sub_id: str, owner_id: str | None = None) -> SubItem | None:
        ...

    def create_sub_item(
        self,
        goal_id: str,
        item: SubItem,
        parent_id: str | None = None,
        owner_id: str | None = None,
    ) -> SubItem | None:
        """Append ``item`` (with its sub-tree) under a goal or a sub-item.

        The store assigns ``order`` = current sibling count. Returns None when
        the goal, or the parent within that goal, does not exist.
        """
        ...

    def update_sub_item(
        self,
        sub_id: str,
        *,
        text: str | None = None,
        checked: bool | None = None,
        owner_id: str | None = None,
    ) -> SubItem | None:
        ...

    def delete_sub_item(self, sub_id: str, owner_id: str | None = None) -> bool:
        """Delete a sub-item and its descendants."""
        ...


@runtime_checkable
class AccountRepository(Protocol):
    """Persistence contract consumed by AuthService."""

    def create_user(self, username: str, password_hash: str) -> User:
        ...

    def get_user_by_username(self, username: str) -> User | None:
        ...

    def get_user(self, user_id: str) -> User | None:
        ...

    def create_session(self, user_id: str, token_hash: str, expires_at: datetime) -> SessionRecord:
        ...

    def get_session_by_token_hash(self, token_hash: str) -> SessionRecord | None:
        ...

    def touch_session(self, session_id: str, when: datetime) -> None:
        ...

    def delete_session(self, session_id: str) -> None:
        ...
