"""Sub-item commands.

Usage:
    weekgoals sub add 3f2a9c "Draft outline"
    weekgoals sub add 3f2a9c "Intro" --parent 77b0e1 --type list
    weekgoals sub toggle 77b0e1
"""

import click
from rich.markup import escape

from weekgoals.goals.types import SubItemType
from weekgoals.interface.cli.helpers import (
    console,
    get_service,
    resolve_goal_id,
    resolve_sub_id,
    selected_week,
    week_option,
)


@click.group("sub")
def sub() -> None:
    """Manage sub-items under a goal."""


@sub.command("add")
@click.argument("goal_id")
@click.argument("text")
@click.option(
    "--type",
    "item_type",
    type=click.Choice([t.value for t in SubItemType]),
    default=SubItemType.CHECKBOX.value,
    show_default=True,
)
@click.option("--parent", "parent_id", default=None, help="Nest under this sub-item")
@week_option
@click.pass_context
def add_sub(
    ctx: click.Context,
    goal_id: str,
    text: str,
    item_type: str,
    parent_id: str | None,
    offset: int,
) -> None:
    """Append a sub-item to a goal or to another sub-item."""
    service = get_service(ctx)
    week = selected_week(offset)
    full_goal_id = resolve_goal_id(service, week, goal_id)
    full_parent_id = resolve_sub_id(service, week, parent_id) if parent_id else None
    item = service.add_sub_item(full_goal_id, text, item_type, full_parent_id)
    console.print(f"[green]✓[/green] Added {escape(item.text)} [dim]{item.id[:8]}[/dim]")


@sub.command("toggle")
@click.argument("sub_id")
@week_option
@click.pass_context
def toggle_sub(ctx: click.Context, sub_id: str, offset: int) -> None:
    """Flip a checkbox sub-item."""
    service = get_service(ctx)
    item = service.toggle_sub_item(resolve_sub_id(service, selected_week(offset), sub_id))
    state = "done" if item.checked else "open"
    console.print(f"[green]✓[/green] {escape(item.text)} is {state}")


@sub.command("rename")
@click.argument("sub_id")
@click.argument("text")
@week_option
@click.pass_context
def rename_sub(ctx: click.Context, sub_id: str, text: str, offset: int) -> None:
    service = get_service(ctx)
    item = service.rename_sub_item(resolve_sub_id(service, selected_week(offset), sub_id), text)
    console.print(f"[green]✓[/green] Renamed to {escape(item.text)}")


@sub.command("delete")
@click.argument("sub_id")
@week_option
@click.pass_context
def delete_sub(ctx: click.Context, sub_id: str, offset: int) -> None:
    """Delete a sub-item and everything nested under it."""
    service = get_service(ctx)
    service.delete_sub_item(resolve_sub_id(service, selected_week(offset), sub_id))
    console.print("[green]✓[/green] Deleted")
