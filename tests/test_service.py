"""Tests for GoalService, run against every repository backend."""

from unittest.mock import patch

import pytest

from weekgoals.foundation.errors import ErrorCode, NotFoundError, ValidationError
from weekgoals.goals.service import GoalService
from weekgoals.goals.types import MAX_DEPTH, MAX_TEXT_LENGTH, Goal, SubItem, SubItemType


class TestAddGoal:
    """Goal creation defaults and validation."""

    def test_new_goal_defaults(self, service: GoalService, week: str) -> None:
        goal = service.add_goal(week, "Finish report")
        assert goal.text == "Finish report"
        assert goal.checked is False
        assert goal.subs == []
        assert goal.order == 0

    def test_order_is_prior_count(self, service: GoalService, week: str) -> None:
        orders = [service.add_goal(week, f"g{i}").order for i in range(3)]
        assert orders == [0, 1, 2]

    def test_weeks_are_independent(self, service: GoalService, week: str) -> None:
        service.add_goal(week, "this week")
        other = service.add_goal("2024-01-22", "next week")
        assert other.order == 0
        assert [g.text for g in service.list_goals(week)] == ["this week"]

    def test_text_is_trimmed(self, service: GoalService, week: str) -> None:
        assert service.add_goal(week, "  padded  ").text == "padded"

    @pytest.mark.parametrize("text", ["", "   ", "\n"])
    def test_blank_text_rejected(self, service: GoalService, week: str, text: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            service.add_goal(week, text)
        assert exc_info.value.code is ErrorCode.TEXT_EMPTY
        assert service.list_goals(week) == []

    def test_too_long_text_rejected(self, service: GoalService, week: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            service.add_goal(week, "x" * (MAX_TEXT_LENGTH + 1))
        assert exc_info.value.code is ErrorCode.TEXT_TOO_LONG

    def test_week_key_required(self, service: GoalService) -> None:
        with pytest.raises(ValidationError) as exc_info:
            service.add_goal("", "text")
        assert exc_info.value.code is ErrorCode.FIELD_REQUIRED

    def test_week_key_must_be_date(self, service: GoalService) -> None:
        with pytest.raises(ValidationError) as exc_info:
            service.list_goals("soon")
        assert exc_info.value.code is ErrorCode.WEEK_KEY_INVALID

    @pytest.mark.parametrize("key", ["2024-01-17", "20240115", "2024-01-21"])
    def test_any_day_of_the_week_shares_the_monday_bucket(
        self, service: GoalService, week: str, key: str
    ) -> None:
        goal = service.add_goal(key, "Wednesday goal")
        assert goal.week_key == week
        assert [g.text for g in service.list_goals(week)] == ["Wednesday goal"]
        assert [g.id for g in service.list_goals(key)] == [goal.id]

    def test_mid_week_key_orders_after_monday_goals(self, service: GoalService, week: str) -> None:
        service.add_goal(week, "first")
        assert service.add_goal("2024-01-19", "second").order == 1


class TestGoalUpdates:
    """Toggle, rename, delete."""

    def test_toggle_flips(self, service: GoalService, week: str) -> None:
        goal = service.add_goal(week, "g")
        assert service.toggle_goal(goal.id).checked is True
        assert service.toggle_goal(goal.id).checked is False

    def test_set_checked_is_idempotent(self, service: GoalService, week: str) -> None:
        goal = service.add_goal(week, "g")
        service.set_goal_checked(goal.id, True)
        assert service.set_goal_checked(goal.id, True).checked is True

    def test_rename(self, service: GoalService, week: str) -> None:
        goal = service.add_goal(week, "old")
        service.rename_goal(goal.id, "new")
        assert service.list_goals(week)[0].text == "new"

    def test_rename_to_same_text_makes_no_write(self, service: GoalService, week: str) -> None:
        goal = service.add_goal(week, "same")
        with patch.object(service.repository, "update_goal") as update:
            result = service.rename_goal(goal.id, "  same ")
        update.assert_not_called()
        assert result.text == "same"

    def test_delete_twice_is_not_found(self, service: GoalService, week: str) -> None:
        goal = service.add_goal(week, "g")
        service.delete_goal(goal.id)
        assert service.list_goals(week) == []
        with pytest.raises(NotFoundError):
            service.delete_goal(goal.id)

    def test_unknown_id_is_not_found(self, service: GoalService) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            service.toggle_goal("missing")
        assert exc_info.value.code is ErrorCode.GOAL_NOT_FOUND

    def test_delete_goal_removes_sub_items(self, service: GoalService, week: str) -> None:
        goal = service.add_goal(week, "g")
        sub = service.add_sub_item(goal.id, "s")
        service.delete_goal(goal.id)
        with pytest.raises(NotFoundError):
            service.toggle_sub_item(sub.id)


class TestSubItems:
    """Nested sub-item operations."""

    def test_add_top_level_and_nested(self, service: GoalService, week: str) -> None:
        goal = service.add_goal(week, "Finish report")
        draft = service.add_sub_item(goal.id, "Draft")
        outline = service.add_sub_item(goal.id, "Outline", SubItemType.LIST)
        intro = service.add_sub_item(goal.id, "Intro", "list", parent_sub_id=draft.id)

        assert (draft.order, outline.order, intro.order) == (0, 1, 0)
        assert outline.type is SubItemType.LIST

        listed = service.list_goals(week)[0]
        assert [s.text for s in listed.subs] == ["Draft", "Outline"]
        assert [s.text for s in listed.subs[0].subs] == ["Intro"]

    def test_default_type_is_checkbox(self, service: GoalService, week: str) -> None:
        goal = service.add_goal(week, "g")
        assert service.add_sub_item(goal.id, "s").type is SubItemType.CHECKBOX

    def test_bad_type_rejected(self, service: GoalService, week: str) -> None:
        goal = service.add_goal(week, "g")
        with pytest.raises(ValidationError) as exc_info:
            service.add_sub_item(goal.id, "s", "bullet")
        assert exc_info.value.code is ErrorCode.SUB_ITEM_TYPE_INVALID

    def test_missing_goal(self, service: GoalService) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            service.add_sub_item("missing", "s")
        assert exc_info.value.code is ErrorCode.GOAL_NOT_FOUND

    def test_parent_must_belong_to_goal(self, service: GoalService, week: str) -> None:
        first = service.add_goal(week, "first")
        second = service.add_goal(week, "second")
        sub = service.add_sub_item(first.id, "s")
        with pytest.raises(NotFoundError) as exc_info:
            service.add_sub_item(second.id, "child", parent_sub_id=sub.id)
        assert exc_info.value.code is ErrorCode.SUB_ITEM_NOT_FOUND

    def test_depth_limit(self, service: GoalService, week: str) -> None:
        goal = service.add_goal(week, "g")
        parent = None
        for level in range(MAX_DEPTH):
            parent = service.add_sub_item(
                goal.id, f"level {level + 1}", parent_sub_id=parent.id if parent else None
            )
        with pytest.raises(ValidationError) as exc_info:
            service.add_sub_item(goal.id, "too deep", parent_sub_id=parent.id)
        assert exc_info.value.code is ErrorCode.DEPTH_LIMIT_REACHED

    def test_toggle_and_rename(self, service: GoalService, week: str) -> None:
        goal = service.add_goal(week, "g")
        sub = service.add_sub_item(goal.id, "s")
        assert service.toggle_sub_item(sub.id).checked is True
        assert service.rename_sub_item(sub.id, "renamed").text == "renamed"
        assert service.set_sub_item_checked(sub.id, False).checked is False

    def test_rename_sub_to_same_text_makes_no_write(self, service: GoalService, week: str) -> None:
        goal = service.add_goal(week, "g")
        sub = service.add_sub_item(goal.id, "s")
        with patch.object(service.repository, "update_sub_item") as update:
            service.rename_sub_item(sub.id, "s")
        update.assert_not_called()

    def test_delete_removes_subtree_and_keeps_sibling_orders(
        self, service: GoalService, week: str
    ) -> None:
        goal = service.add_goal(week, "g")
        a = service.add_sub_item(goal.id, "a")
        b = service.add_sub_item(goal.id, "b")
        service.add_sub_item(goal.id, "b1", parent_sub_id=b.id)
        c = service.add_sub_item(goal.id, "c")

        service.delete_sub_item(b.id)

        subs = service.list_goals(week)[0].subs
        assert [(s.id, s.order) for s in subs] == [(a.id, 0), (c.id, 2)]

    def test_delete_unknown_sub(self, service: GoalService) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            service.delete_sub_item("missing")
        assert exc_info.value.code is ErrorCode.SUB_ITEM_NOT_FOUND


class TestOwnerIsolation:
    """Another user's ids behave exactly like missing ids."""

    def test_foreign_ids_are_not_found(self, repository, make_owner, week: str) -> None:
        alice = GoalService(repository, owner_id=make_owner("alice"))
        bob = GoalService(repository, owner_id=make_owner("bob"))
        goal = alice.add_goal(week, "private")
        sub = alice.add_sub_item(goal.id, "secret")

        assert bob.list_goals(week) == []
        for attempt in (
            lambda: bob.toggle_goal(goal.id),
            lambda: bob.rename_goal(goal.id, "mine"),
            lambda: bob.delete_goal(goal.id),
            lambda: bob.add_sub_item(goal.id, "x"),
            lambda: bob.toggle_sub_item(sub.id),
            lambda: bob.rename_sub_item(sub.id, "mine"),
            lambda: bob.delete_sub_item(sub.id),
        ):
            with pytest.raises(NotFoundError):
                attempt()

        assert alice.list_goals(week)[0].subs[0].text == "secret"

    def test_orders_count_per_owner(self, repository, make_owner, week: str) -> None:
        alice = GoalService(repository, owner_id=make_owner("alice"))
        bob = GoalService(repository, owner_id=make_owner("bob"))
        alice.add_goal(week, "a0")
        alice.add_goal(week, "a1")
        assert bob.add_goal(week, "b0").order == 0


class TestPasteAndImport:
    """Appending decoded or pre-built trees."""

    def test_paste_appends_after_existing(self, service: GoalService, week: str) -> None:
        service.add_goal(week, "existing")
        pasted = [
            Goal(text="Read book", subs=[SubItem(text="Ch 1", subs=[SubItem(text="Notes", checked=True)])]),
            Goal(text="Gym", checked=True),
        ]
        goals = service.paste_goals(week, pasted)

        assert [(g.text, g.order) for g in goals] == [
            ("existing", 0),
            ("Read book", 1),
            ("Gym", 2),
        ]
        assert goals[2].checked is True
        assert goals[1].subs[0].subs[0].checked is True

    def test_paste_nothing_rejected(self, service: GoalService, week: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            service.paste_goals(week, [])
        assert exc_info.value.code is ErrorCode.FIELD_REQUIRED

    def test_paste_validates_before_writing(self, service: GoalService, week: str) -> None:
        bad = [Goal(text="ok"), Goal(text="also ok", subs=[SubItem(text="   ")])]
        with pytest.raises(ValidationError):
            service.paste_goals(week, bad)
        assert service.list_goals(week) == []

    def test_import_markdown(self, service: GoalService, week: str) -> None:
        created = service.import_markdown(
            week, "# header\n\n- [ ] Read book\n  - [ ] Chapter 1\n    - [x] Notes\n"
        )
        assert [g.text for g in created] == ["Read book"]
        stored = service.list_goals(week)[0]
        assert stored.subs[0].subs[0].text == "Notes"
        assert stored.subs[0].subs[0].checked is True

    def test_import_garbage_writes_nothing(self, service: GoalService, week: str) -> None:
        assert service.import_markdown(week, "hello\nworld") == []
        assert service.list_goals(week) == []

    def test_export_round_trip(self, service: GoalService, week: str) -> None:
        goal = service.add_goal(week, "Finish report")
        service.add_sub_item(goal.id, "Draft")
        service.add_sub_item(goal.id, "Outline", "list")

        markdown = service.export_markdown(week)

        assert markdown == (
            "# 2024 第 3 週目標（1/15 — 1/21）\n\n"
            "- [ ] Finish report\n"
            "  - [ ] Draft\n"
            "  - Outline\n"
        )
        service.import_markdown("2024-01-22", markdown)
        assert service.export_markdown("2024-01-22").split("\n\n", 1)[1] == markdown.split("\n\n", 1)[1]

    def test_export_mid_week_key_reads_the_monday_bucket(
        self, service: GoalService, week: str
    ) -> None:
        service.add_goal(week, "Gym")
        assert service.export_markdown("2024-01-18") == service.export_markdown(week)
        assert service.import_markdown("20240116", "- [ ] Swim\n")[0].week_key == week

    def test_export_empty_week(self, service: GoalService, week: str) -> None:
        assert service.export_markdown(week).endswith("（尚無目標）")

    def test_progress(self, service: GoalService, week: str) -> None:
        assert service.progress(week).percent == 0
        first = service.add_goal(week, "a")
        service.add_goal(week, "b")
        service.add_goal(week, "c")
        service.toggle_goal(first.id)
        progress = service.progress(week)
        assert (progress.done, progress.total, progress.percent) == (1, 3, 33)
