"""Goal commands: list, add, toggle, rename, delete, week, progress.

Usage:
    weekgoals add "Finish report"
    weekgoals list --week -1
    weekgoals toggle 3f2a9c
"""

import json

import click
from rich.markup import escape

from weekgoals.goals.markdown import format_header
from weekgoals.goals.weeks import week_range
from weekgoals.interface.cli.helpers import (
    console,
    get_service,
    render_week,
    resolve_goal_id,
    selected_week,
    week_option,
)


@click.command("list")
@week_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def list_goals(ctx: click.Context, offset: int, as_json: bool) -> None:
    """Show the goal tree for a week."""
    week = selected_week(offset)
    goals = get_service(ctx).list_goals(week)

    if as_json:
        payload = {"weekKey": week, "goals": [g.to_dict() for g in goals]}
        click.echo(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    if not goals:
        console.print(f"[dim]No goals for {week}[/dim]")
        return
    console.print(render_week(week, goals))


@click.command("add")
@click.argument("text")
@week_option
@click.pass_context
def add_goal(ctx: click.Context, text: str, offset: int) -> None:
    """Add a goal to the end of a week."""
    goal = get_service(ctx).add_goal(selected_week(offset), text)
    console.print(f"[green]✓[/green] Added {escape(goal.text)} [dim]{goal.id[:8]}[/dim]")


@click.command("toggle")
@click.argument("goal_id")
@week_option
@click.pass_context
def toggle_goal(ctx: click.Context, goal_id: str, offset: int) -> None:
    """Flip a goal between done and not done."""
    service = get_service(ctx)
    goal = service.toggle_goal(resolve_goal_id(service, selected_week(offset), goal_id))
    state = "done" if goal.checked else "open"
    console.print(f"[green]✓[/green] {escape(goal.text)} is {state}")


@click.command("rename")
@click.argument("goal_id")
@click.argument("text")
@week_option
@click.pass_context
def rename_goal(ctx: click.Context, goal_id: str, text: str, offset: int) -> None:
    """Replace a goal's text."""
    service = get_service(ctx)
    goal = service.rename_goal(resolve_goal_id(service, selected_week(offset), goal_id), text)
    console.print(f"[green]✓[/green] Renamed to {escape(goal.text)}")


@click.command("delete")
@click.argument("goal_id")
@week_option
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete_goal(ctx: click.Context, goal_id: str, offset: int, yes: bool) -> None:
    """Delete a goal and all of its sub-items."""
    service = get_service(ctx)
    full_id = resolve_goal_id(service, selected_week(offset), goal_id)
    if not yes:
        click.confirm("Delete this goal and its sub-items?", abort=True)
    service.delete_goal(full_id)
    console.print("[green]✓[/green] Deleted")


@click.command("week")
@week_option
def show_week(offset: int) -> None:
    """Print the week key and export header for a week."""
    week = week_range(offset)
    console.print(f"[bold]{week.key}[/bold]  ISO week {week.week_number}")
    console.print(format_header(week), markup=False)


@click.command("progress")
@week_option
@click.pass_context
def show_progress(ctx: click.Context, offset: int) -> None:
    """Count finished goals for a week."""
    progress = get_service(ctx).progress(selected_week(offset))
    console.print(f"{progress.done}/{progress.total} goals done ({progress.percent}%)")
