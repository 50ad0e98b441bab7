"""Shared Pydantic models for API routes.

All models inherit from CamelModel which converts snake_case Python fields
to camelCase in JSON (``week_key`` ↔ ``weekKey``) and accepts either form on
input.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from weekgoals.goals.types import Goal, SubItem, SubItemType


def _to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    parts = string.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


class CamelModel(BaseModel):
    """Base model with camelCase JSON serialization."""

    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
    )


# ═══════════════════════════════════════════════════════════════
# AUTH
# ═══════════════════════════════════════════════════════════════


class CredentialsRequest(CamelModel):
    username: str = ""
    password: str = ""


class UserResponse(CamelModel):
    id: str
    username: str


class AuthResponse(CamelModel):
    token: str
    user: UserResponse


# ═══════════════════════════════════════════════════════════════
# GOAL TREES
# ═══════════════════════════════════════════════════════════════


class SubItemResponse(CamelModel):
    """A sub-item with its children, in display order."""

    id: str
    text: str
    type: Literal["checkbox", "list"]
    checked: bool
    subs: list["SubItemResponse"] = Field(default_factory=list)

    @classmethod
    def from_item(cls, item: SubItem) -> "SubItemResponse":
        return cls(
            id=item.id,
            text=item.text,
            type=item.type.value,
            checked=item.checked,
            subs=[cls.from_item(s) for s in item.subs],
        )


class GoalResponse(CamelModel):
    id: str
    text: str
    checked: bool
    subs: list[SubItemResponse] = Field(default_factory=list)

    @classmethod
    def from_goal(cls, goal: Goal) -> "GoalResponse":
        return cls(
            id=goal.id,
            text=goal.text,
            checked=goal.checked,
            subs=[SubItemResponse.from_item(s) for s in goal.subs],
        )


class CreateGoalRequest(CamelModel):
    text: str | None = None
    week_key: str | None = None


class UpdateNodeRequest(CamelModel):
    """Partial update shared by goals and sub-items."""

    text: str | None = None
    checked: bool | None = None


class CreateSubItemRequest(CamelModel):
    text: str | None = None
    type: str | None = None
    parent_sub_id: str | None = None


class PasteSubItemInput(CamelModel):
    text: str
    type: Literal["checkbox", "list"] = "checkbox"
    checked: bool = False
    subs: list["PasteSubItemInput"] = Field(default_factory=list)

    def to_item(self) -> SubItem:
        return SubItem(
            text=self.text,
            type=SubItemType(self.type),
            checked=self.checked,
            subs=[s.to_item() for s in self.subs],
        )


class PasteGoalInput(CamelModel):
    text: str
    checked: bool = False
    subs: list[PasteSubItemInput] = Field(default_factory=list)

    def to_goal(self) -> Goal:
        return Goal(
            text=self.text,
            checked=self.checked,
            subs=[s.to_item() for s in self.subs],
        )


class PasteRequest(CamelModel):
    """Either pre-parsed goal trees or raw clipboard markdown."""

    week_key: str | None = None
    goals: list[PasteGoalInput] | None = None
    markdown: str | None = None


class ExportResponse(CamelModel):
    week_key: str
    markdown: str


class ProgressResponse(CamelModel):
    week_key: str
    done: int
    total: int
    percent: int


class OkResponse(CamelModel):
    ok: bool = True
