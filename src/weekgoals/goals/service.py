"""GoalService: the tree-operations contract over a repository.

One service instance is bound to a repository and, for multi-user
deployments, to the requesting user's id. Every operation validates input
before touching storage, and turns "missing" or "not yours" into the same
NotFoundError so other users' ids stay indistinguishable from missing ones.

Usage:
    service = GoalService(JsonGoalRepository("~/.weekgoals/goals.json"))
    goal = service.add_goal(week_key(0), "Finish report")
    service.add_sub_item(goal.id, "Draft")
    print(service.export_markdown(week_key(0)))
"""

import logging

from weekgoals.foundation.errors import (
    ErrorCode,
    ValidationError,
    goal_not_found,
    sub_item_not_found,
)
from weekgoals.goals.markdown import decode_goals, encode_week
from weekgoals.goals.tree import node_depth
from weekgoals.goals.types import (
    MAX_DEPTH,
    Goal,
    Progress,
    SubItem,
    SubItemType,
    clean_text,
)
from weekgoals.goals.weeks import canonical_week_key, parse_week_key, week_range
from weekgoals.storage.protocol import GoalRepository

logger = logging.getLogger(__name__)


def _require_week_key(week_key: str | None) -> str:
    """Validate a week key and return the Monday key that buckets it."""
    if not week_key:
        raise ValidationError(ErrorCode.FIELD_REQUIRED, {"field": "weekKey"})
    return canonical_week_key(week_key)


class GoalService:
    """Goal and sub-item operations for one owner's weeks."""

    def __init__(self, repository: GoalRepository, owner_id: str | None = None) -> None:
        self.repository = repository
        self.owner_id = owner_id

    # ─────────────────────────────────────────────────────────────────
    # Goals
    # ─────────────────────────────────────────────────────────────────

    def list_goals(self, week_key: str) -> list[Goal]:
        """Goals for a week in display order; empty list when none exist."""
        week_key = _require_week_key(week_key)
        return self.repository.find_goals_by_week(week_key, self.owner_id)

    def add_goal(self, week_key: str, text: str) -> Goal:
        week_key = _require_week_key(week_key)
        cleaned = clean_text(text)
        goal = self.repository.create_goal(
            Goal(text=cleaned, week_key=week_key, owner_id=self.owner_id)
        )
        logger.debug("Added goal %s to %s at order %d", goal.id, week_key, goal.order)
        return goal

    def _get_goal(self, goal_id: str) -> Goal:
        goal = self.repository.get_goal(goal_id, self.owner_id)
        if goal is None:
            raise goal_not_found(goal_id)
        return goal

    def toggle_goal(self, goal_id: str) -> Goal:
        goal = self._get_goal(goal_id)
        updated = self.repository.update_goal(
            goal_id, checked=not goal.checked, owner_id=self.owner_id
        )
        if updated is None:
            raise goal_not_found(goal_id)
        return updated

    def set_goal_checked(self, goal_id: str, checked: bool) -> Goal:
        updated = self.repository.update_goal(goal_id, checked=checked, owner_id=self.owner_id)
        if updated is None:
            raise goal_not_found(goal_id)
        return updated

    def rename_goal(self, goal_id: str, text: str) -> Goal:
        """Replace a goal's text. No write happens when the text is unchanged."""
        cleaned = clean_text(text)
        goal = self._get_goal(goal_id)
        if goal.text == cleaned:
            return goal
        updated = self.repository.update_goal(goal_id, text=cleaned, owner_id=self.owner_id)
        if updated is None:
            raise goal_not_found(goal_id)
        return updated

    def delete_goal(self, goal_id: str) -> None:
        """Delete a goal and every sub-item beneath it."""
        if not self.repository.delete_goal(goal_id, self.owner_id):
            raise goal_not_found(goal_id)
        logger.debug("Deleted goal %s", goal_id)

    # ─────────────────────────────────────────────────────────────────
    # Sub-items
    # ─────────────────────────────────────────────────────────────────

    def add_sub_item(
        self,
        goal_id: str,
        text: str,
        type: str | SubItemType = SubItemType.CHECKBOX,
        parent_sub_id: str | None = None,
    ) -> SubItem:
        """Append a sub-item under a goal, or under ``parent_sub_id`` in that goal.

        Raises:
            ValidationError: bad text/type, or the parent is already at MAX_DEPTH
            NotFoundError: goal missing, or parent not inside that goal
        """
        cleaned = clean_text(text)
        item_type = SubItemType.parse(type or SubItemType.CHECKBOX)

        if parent_sub_id:
            goal = self._get_goal(goal_id)
            depth = node_depth(goal.subs, parent_sub_id)
            if depth is None:
                raise sub_item_not_found(parent_sub_id)
            if depth >= MAX_DEPTH:
                raise ValidationError(ErrorCode.DEPTH_LIMIT_REACHED, {"limit": MAX_DEPTH})

        created = self.repository.create_sub_item(
            goal_id,
            SubItem(text=cleaned, type=item_type),
            parent_id=parent_sub_id or None,
            owner_id=self.owner_id,
        )
        if created is None:
            if parent_sub_id:
                raise sub_item_not_found(parent_sub_id)
            raise goal_not_found(goal_id)
        logger.debug("Added %s sub-item %s to goal %s", item_type.value, created.id, goal_id)
        return created

    def _get_sub_item(self, sub_id: str) -> SubItem:
        sub = self.repository.get_sub_item(sub_id, self.owner_id)
        if sub is None:
            raise sub_item_not_found(sub_id)
        return sub

    def toggle_sub_item(self, sub_id: str) -> SubItem:
        sub = self._get_sub_item(sub_id)
        updated = self.repository.update_sub_item(
            sub_id, checked=not sub.checked, owner_id=self.owner_id
        )
        if updated is None:
            raise sub_item_not_found(sub_id)
        return updated

    def set_sub_item_checked(self, sub_id: str, checked: bool) -> SubItem:
        updated = self.repository.update_sub_item(sub_id, checked=checked, owner_id=self.owner_id)
        if updated is None:
            raise sub_item_not_found(sub_id)
        return updated

    def rename_sub_item(self, sub_id: str, text: str) -> SubItem:
        cleaned = clean_text(text)
        sub = self._get_sub_item(sub_id)
        if sub.text == cleaned:
            return sub
        updated = self.repository.update_sub_item(sub_id, text=cleaned, owner_id=self.owner_id)
        if updated is None:
            raise sub_item_not_found(sub_id)
        return updated

    def delete_sub_item(self, sub_id: str) -> None:
        """Delete a sub-item and its descendants; siblings keep their order."""
        if not self.repository.delete_sub_item(sub_id, self.owner_id):
            raise sub_item_not_found(sub_id)
        logger.debug("Deleted sub-item %s", sub_id)

    # ─────────────────────────────────────────────────────────────────
    # Import / export
    # ─────────────────────────────────────────────────────────────────

    def _clean_subs(self, subs: list[SubItem]) -> list[SubItem]:
        return [
            SubItem(
                text=clean_text(sub.text),
                type=SubItemType.parse(sub.type),
                checked=sub.checked,
                order=index,
                subs=self._clean_subs(sub.subs),
            )
            for index, sub in enumerate(subs)
        ]

    def _created_goals(self, week_key: str, goals: list[Goal]) -> list[Goal]:
        # Validate every node before the first write so a bad node aborts cleanly
        prepared = [
            Goal(
                text=clean_text(goal.text),
                week_key=week_key,
                checked=goal.checked,
                subs=self._clean_subs(goal.subs),
                owner_id=self.owner_id,
            )
            for goal in goals
        ]
        return [self.repository.create_goal(goal) for goal in prepared]

    def paste_goals(self, week_key: str, goals: list[Goal]) -> list[Goal]:
        """Append goals (with their sub-trees) after the week's existing goals.

        Checked state is kept as given. Returns the whole updated week.
        """
        week_key = _require_week_key(week_key)
        if not goals:
            raise ValidationError(ErrorCode.FIELD_REQUIRED, {"field": "goals"})
        self._created_goals(week_key, goals)
        logger.info("Pasted %d goal(s) into %s", len(goals), week_key)
        return self.list_goals(week_key)

    def import_markdown(self, week_key: str, markdown: str) -> list[Goal]:
        """Decode markdown and append it to the week.

        Returns only the newly created goals; an empty list means the text
        held nothing to import and nothing was written.
        """
        week_key = _require_week_key(week_key)
        parsed = decode_goals(markdown)
        if not parsed:
            return []
        created = self._created_goals(week_key, parsed)
        logger.info("Imported %d goal(s) into %s", len(created), week_key)
        return created

    def export_markdown(self, week_key: str) -> str:
        """The week encoded for the clipboard, header included."""
        week_key = _require_week_key(week_key)
        goals = self.list_goals(week_key)
        return encode_week(goals, week_range(0, today=parse_week_key(week_key)))

    def progress(self, week_key: str) -> Progress:
        goals = self.list_goals(week_key)
        return Progress(done=sum(1 for g in goals if g.checked), total=len(goals))
