"""Goal and sub-item node types.

A week's goals form an ordered forest: each Goal owns an ordered list of
SubItem children, and each SubItem owns its own children. Parents exclusively
own their child lists, so there are no back references to keep in sync.
"""


import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from weekgoals.foundation.errors import ErrorCode, ValidationError

MAX_TEXT_LENGTH = 100
"""Longest goal/sub-item text accepted."""

MAX_DEPTH = 5
"""Deepest sub-item level that may still receive children (goal children are depth 1)."""


class SubItemType(str, Enum):
    """How a sub-item renders: with a checkbox, or as a plain bullet."""

    CHECKBOX = "checkbox"
    LIST = "list"

    @classmethod
    def parse(cls, value: "str | SubItemType") -> "SubItemType":
        if isinstance(value, SubItemType):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                ErrorCode.SUB_ITEM_TYPE_INVALID, {"value": value}
            ) from None


def new_id() -> str:
    """Opaque unique identifier for a freshly created node."""
    return uuid.uuid4().hex


def clean_text(text: str | None, field_name: str = "text") -> str:
    """Trim and validate display text.

    Raises:
        ValidationError: if the text is missing, blank, or too long.
    """
    if text is None:
        raise ValidationError(ErrorCode.FIELD_REQUIRED, {"field": field_name})
    # Line breaks would split the node when exported
    cleaned = " ".join(text.splitlines()).strip()
    if not cleaned:
        raise ValidationError(ErrorCode.TEXT_EMPTY, {"field": field_name})
    if len(cleaned) > MAX_TEXT_LENGTH:
        raise ValidationError(
            ErrorCode.TEXT_TOO_LONG, {"field": field_name, "limit": MAX_TEXT_LENGTH}
        )
    return cleaned


@dataclass(slots=True)
class SubItem:
    """A nested node under a Goal or another SubItem."""

    text: str
    type: SubItemType = SubItemType.CHECKBOX
    checked: bool = False
    order: int = 0
    subs: list["SubItem"] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    @property
    def is_checkbox(self) -> bool:
        return self.type is SubItemType.CHECKBOX

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "type": self.type.value,
            "checked": self.checked,
            "order": self.order,
            "subs": [s.to_dict() for s in self.subs],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SubItem":
        subs = [cls.from_dict(s) for s in data.get("subs") or []]
        return cls(
            id=data.get("id") or new_id(),
            text=data["text"],
            type=SubItemType.parse(data.get("type", SubItemType.CHECKBOX.value)),
            checked=bool(data.get("checked", False)),
            order=int(data.get("order", 0)),
            subs=subs,
        )


@dataclass(slots=True)
class Goal:
    """A top-level weekly objective."""

    text: str
    week_key: str = ""
    checked: bool = False
    order: int = 0
    subs: list[SubItem] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    owner_id: str | None = None
    """Owning user; None for single-user stores."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "checked": self.checked,
            "order": self.order,
            "subs": [s.to_dict() for s in self.subs],
        }

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        week_key: str = "",
        owner_id: str | None = None,
    ) -> "Goal":
        return cls(
            id=data.get("id") or new_id(),
            text=data["text"],
            week_key=week_key,
            checked=bool(data.get("checked", False)),
            order=int(data.get("order", 0)),
            subs=[SubItem.from_dict(s) for s in data.get("subs") or []],
            owner_id=owner_id,
        )


@dataclass(frozen=True, slots=True)
class Progress:
    """Completion summary over a week's top-level goals."""

    done: int
    total: int

    @property
    def percent(self) -> int:
        if self.total == 0:
            return 0
        return round(self.done * 100 / self.total)
