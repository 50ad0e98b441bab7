"""Main CLI entry point.

    weekgoals add "Finish report"
    weekgoals sub add 3f2a9c "Draft"
    weekgoals list
    weekgoals copy

Commands operate on the current week unless ``--week N`` selects another.
"""

import sys
from pathlib import Path

import click
from rich.console import Console

from weekgoals import __version__
from weekgoals.foundation.config import load_config
from weekgoals.foundation.logging import configure_logging
from weekgoals.interface.cli.commands.config_cmd import config
from weekgoals.interface.cli.commands.goals_cmd import (
    add_goal,
    delete_goal,
    list_goals,
    rename_goal,
    show_progress,
    show_week,
    toggle_goal,
)
from weekgoals.interface.cli.commands.serve_cmd import serve
from weekgoals.interface.cli.commands.sub_cmd import sub
from weekgoals.interface.cli.commands.transfer_cmd import (
    copy_week,
    export_week,
    import_week,
    paste_week,
)

console = Console()


def cli_entrypoint() -> None:
    """Wrapped entrypoint with global error handling.

    Called from pyproject.toml [project.scripts].
    """
    try:
        main(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        console.print("\n[dim]Aborted[/dim]")
        sys.exit(130)
    except Exception as e:
        from weekgoals.interface.cli.error_handler import handle_error

        handle_error(e, json_output=False)


@click.group()
@click.version_option(__version__, prog_name="weekgoals")
@click.option("--debug", is_flag=True, help="Verbose logging to stderr")
@click.option(
    "--store",
    "store_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    envvar="WEEKGOALS_STORE",
    help="Goal file (.json) or database (.db); overrides config",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: .weekgoals/config.yaml, then ~/.weekgoals/config.yaml)",
)
@click.pass_context
def main(
    ctx: click.Context,
    debug: bool,
    store_path: Path | None,
    config_path: Path | None,
) -> None:
    """Weekly goals with nested sub-items, kept as markdown-friendly trees."""
    cfg = load_config(config_path)
    configure_logging(debug=debug or cfg.debug)

    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg
    ctx.obj["debug"] = debug or cfg.debug
    ctx.obj["store_path"] = store_path


main.add_command(list_goals)
main.add_command(add_goal)
main.add_command(toggle_goal)
main.add_command(rename_goal)
main.add_command(delete_goal)
main.add_command(show_week)
main.add_command(show_progress)
main.add_command(sub)
main.add_command(copy_week)
main.add_command(paste_week)
main.add_command(export_week)
main.add_command(import_week)
main.add_command(config)
main.add_command(serve)
