"""Markdown transfer commands: copy, paste, export, import.

copy/paste go through the system clipboard; export/import use files or
standard streams so they work over SSH and in scripts.
"""

import click

from weekgoals.goals.clipboard import PasteResult, copy_to_clipboard, paste_from_clipboard
from weekgoals.interface.cli.helpers import (
    console,
    get_service,
    selected_week,
    stderr_console,
    week_option,
)

_PASTE_MESSAGES = {
    PasteResult.OK: "[green]✓[/green] Pasted goals into {week}",
    PasteResult.EMPTY: "[yellow]Clipboard has no goals to paste[/yellow]",
    PasteResult.FAIL: "[red]Could not read the clipboard[/red]",
}


@click.command("copy")
@week_option
@click.pass_context
def copy_week(ctx: click.Context, offset: int) -> None:
    """Copy a week's goals to the clipboard as markdown."""
    week = selected_week(offset)
    if not copy_to_clipboard(get_service(ctx), week):
        stderr_console.print("[red]Could not write to the clipboard[/red]")
        raise SystemExit(1)
    console.print(f"[green]✓[/green] Copied {week}")


@click.command("paste")
@week_option
@click.pass_context
def paste_week(ctx: click.Context, offset: int) -> None:
    """Append goals from clipboard markdown to a week."""
    week = selected_week(offset)
    result = paste_from_clipboard(get_service(ctx), week)
    message = _PASTE_MESSAGES[result].format(week=week)
    if result is PasteResult.FAIL:
        stderr_console.print(message)
        raise SystemExit(1)
    console.print(message)


@click.command("export")
@week_option
@click.option(
    "--output",
    "-o",
    type=click.File("w", encoding="utf-8"),
    default="-",
    help="Write to file instead of stdout",
)
@click.pass_context
def export_week(ctx: click.Context, offset: int, output) -> None:
    """Print a week as markdown (header included)."""
    output.write(get_service(ctx).export_markdown(selected_week(offset)))


@click.command("import")
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@week_option
@click.pass_context
def import_week(ctx: click.Context, source, offset: int) -> None:
    """Append goals from a markdown file (or stdin) to a week."""
    week = selected_week(offset)
    created = get_service(ctx).import_markdown(week, source.read())
    if not created:
        console.print("[yellow]No goals found in input[/yellow]")
        return
    console.print(f"[green]✓[/green] Imported {len(created)} goal(s) into {week}")
