"""Markdown export/import for a week's goals.

The clipboard format is an indented markdown task list:

    # 2024 第 3 週目標（1/15 — 1/21）

    - [ ] Finish report
      - [x] Draft
      - Outline

    - [x] Gym

Goals are zero-indent checkbox items. Sub-items are indented two spaces per
level; checkbox sub-items carry ``[ ]``/``[x]``, list sub-items are plain
bullets. List text that would read back as a checkbox (``[x] ...``) or
that starts with a backslash gets one leading backslash, which decoding
removes. Decoding is lenient: anything it does not recognise is skipped.
"""

import re

from weekgoals.goals.tree import renumber
from weekgoals.goals.types import Goal, SubItem, SubItemType
from weekgoals.goals.weeks import WeekRange, format_short_date

INDENT = "  "
EMPTY_WEEK_PLACEHOLDER = "（尚無目標）"

# Patterns (module-level constants)
_ITEM_LINE = re.compile(r"^(\s*)- ")
_GOAL_LINE = re.compile(r"^- \[([ x])\] (.+)")
_CHECKBOX_LINE = re.compile(r"^\s*- \[([ x])\] (.+)")
_LIST_LINE = re.compile(r"^\s*- (.+)")
_NEEDS_ESCAPE = re.compile(r"^(\\|\[[ x]\] )")
_ESCAPE = "\\"


# =============================================================================
# Encoding
# =============================================================================


def format_header(week: WeekRange) -> str:
    return (
        f"# {week.year} 第 {week.week_number} 週目標"
        f"（{format_short_date(week.start)} — {format_short_date(week.end)}）"
    )


def _checkbox(checked: bool) -> str:
    return "[x]" if checked else "[ ]"


def _escape_list_text(text: str) -> str:
    return _ESCAPE + text if _NEEDS_ESCAPE.match(text) else text


def _unescape_list_text(text: str) -> str:
    return text[len(_ESCAPE):] if text.startswith(_ESCAPE) else text


def _encode_subs(subs: list[SubItem], depth: int) -> str:
    prefix = INDENT * depth
    text = ""
    for sub in subs:
        if sub.type is SubItemType.CHECKBOX:
            text += f"{prefix}- {_checkbox(sub.checked)} {sub.text}\n"
        else:
            text += f"{prefix}- {_escape_list_text(sub.text)}\n"
        if sub.subs:
            text += _encode_subs(sub.subs, depth + 1)
    return text


def encode_goals(goals: list[Goal]) -> str:
    """Encode goals as item lines only, one blank line between goals."""
    blocks = []
    for goal in goals:
        block = f"- {_checkbox(goal.checked)} {goal.text}\n"
        block += _encode_subs(goal.subs, 1)
        blocks.append(block)
    return "\n".join(blocks)


def encode_week(goals: list[Goal], week: WeekRange) -> str:
    """Full clipboard export: header, blank line, then items or a placeholder."""
    body = encode_goals(goals) if goals else EMPTY_WEEK_PLACEHOLDER
    return f"{format_header(week)}\n\n{body}"


# =============================================================================
# Decoding
# =============================================================================


def _indent_level(line: str) -> float | None:
    match = _ITEM_LINE.match(line)
    if match is None:
        return None
    # Odd widths land between levels and never match a child level exactly
    return len(match.group(1)) / 2


def _decode_subs(lines: list[str], start: int, parent_indent: float) -> tuple[list[SubItem], int]:
    subs: list[SubItem] = []
    i = start
    while i < len(lines):
        line = lines[i]
        indent = _indent_level(line)
        if indent is None:
            i += 1
            continue
        if indent <= parent_indent:
            break
        if indent != parent_indent + 1:
            i += 1
            continue

        checkbox = _CHECKBOX_LINE.match(line)
        plain = None if checkbox else _LIST_LINE.match(line)
        if checkbox:
            text = checkbox.group(2).strip()
        else:
            text = _unescape_list_text(plain.group(1).strip()).strip() if plain else ""
        if not text:
            i += 1
            continue

        i += 1
        children, i = _decode_subs(lines, i, indent)
        subs.append(
            SubItem(
                text=text,
                type=SubItemType.CHECKBOX if checkbox else SubItemType.LIST,
                checked=bool(checkbox and checkbox.group(1) == "x"),
                subs=children,
            )
        )
    return subs, i


def decode_goals(markdown: str) -> list[Goal]:
    """Parse clipboard markdown into fresh, unsaved goals.

    Never raises. Returns an empty list when nothing recognisable is found.
    Decoded nodes get new ids; ``order`` is position among siblings; the
    checked state written in the text is kept.
    """
    lines = [line for line in markdown.splitlines() if _ITEM_LINE.match(line)]
    goals: list[Goal] = []
    i = 0
    while i < len(lines):
        match = _GOAL_LINE.match(lines[i])
        i += 1
        if match is None or not match.group(2).strip():
            continue
        children, i = _decode_subs(lines, i, 0)
        goals.append(
            Goal(
                text=match.group(2).strip(),
                checked=match.group(1) == "x",
                order=len(goals),
                subs=renumber(children),
            )
        )
    return goals
