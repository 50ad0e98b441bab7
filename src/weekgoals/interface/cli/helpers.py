"""Shared helper functions for CLI commands."""

from dataclasses import replace
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from weekgoals.foundation.config import WeekGoalsConfig
from weekgoals.foundation.errors import goal_not_found, sub_item_not_found
from weekgoals.goals.service import GoalService
from weekgoals.goals.tree import iter_nodes
from weekgoals.goals.types import Goal, SubItem
from weekgoals.goals.weeks import week_key
from weekgoals.storage import is_sqlite_path, open_goal_store

console = Console()
stderr_console = Console(stderr=True)

SHORT_ID_LENGTH = 8


# =============================================================================
# Service Wiring
# =============================================================================


def get_service(ctx: click.Context) -> GoalService:
    """Lazily open the store selected by the group options and cache the service."""
    obj = ctx.ensure_object(dict)
    if "service" not in obj:
        config: WeekGoalsConfig = obj["config"]
        storage = config.storage
        store_path: Path | None = obj.get("store_path")
        if store_path is not None and is_sqlite_path(store_path):
            storage = replace(storage, backend="sqlite")
        obj["service"] = GoalService(open_goal_store(storage, store_path))
    return obj["service"]


def week_option(func):
    """``--week N``: week offset from the current week (0 = this week)."""
    return click.option(
        "--week",
        "offset",
        type=int,
        default=0,
        show_default=True,
        help="Week offset (-1 = last week, 1 = next week)",
    )(func)


def selected_week(offset: int) -> str:
    return week_key(offset)


# =============================================================================
# Id Resolution
# =============================================================================


def _match_prefix(candidates: list[str], prefix: str) -> str | None:
    if prefix in candidates:
        return prefix
    matches = [c for c in candidates if c.startswith(prefix)]
    if len(matches) > 1:
        raise click.BadParameter(f"'{prefix}' matches {len(matches)} items; use a longer id")
    return matches[0] if matches else None


def resolve_goal_id(service: GoalService, week: str, prefix: str) -> str:
    """Expand a short goal id shown by ``list`` into the full id."""
    found = _match_prefix([g.id for g in service.list_goals(week)], prefix)
    if found is None:
        raise goal_not_found(prefix)
    return found


def resolve_sub_id(service: GoalService, week: str, prefix: str) -> str:
    ids = [sub.id for goal in service.list_goals(week) for sub in iter_nodes(goal.subs)]
    found = _match_prefix(ids, prefix)
    if found is None:
        raise sub_item_not_found(prefix)
    return found


# =============================================================================
# Rendering
# =============================================================================


def _label(node: Goal | SubItem) -> str:
    short = node.id[:SHORT_ID_LENGTH]
    if isinstance(node, SubItem) and not node.is_checkbox:
        mark = "•"
    else:
        mark = "[green]☑[/green]" if node.checked else "☐"
    text = escape(node.text)
    if node.checked:
        text = f"[dim strike]{text}[/dim strike]"
    return f"{mark} {text} [dim]{short}[/dim]"


def _add_subs(branch: Tree, subs: list[SubItem]) -> None:
    for sub in subs:
        _add_subs(branch.add(_label(sub)), sub.subs)


def render_week(week: str, goals: list[Goal]) -> Tree:
    root = Tree(f"[bold]{week}[/bold]")
    for goal in goals:
        _add_subs(root.add(_label(goal)), goal.subs)
    return root
