"""Config command: show and initialize weekgoals configuration."""

from pathlib import Path

import click
from rich.panel import Panel

from weekgoals.foundation.config import save_default_config
from weekgoals.interface.cli.helpers import console


@click.group()
def config() -> None:
    """Manage weekgoals configuration.

    Configuration is loaded from (in priority order):
    1. Environment variables (WEEKGOALS_*)
    2. --config PATH
    3. .weekgoals/config.yaml (project-local)
    4. ~/.weekgoals/config.yaml (user-global)
    5. Built-in defaults
    """


@config.command()
@click.pass_context
def show(ctx: click.Context) -> None:
    """Show the effective configuration."""
    cfg = ctx.obj["config"]

    console.print(Panel("[bold]weekgoals configuration[/bold]", border_style="cyan"))

    console.print("\n[cyan]Storage[/cyan]")
    console.print(f"  Backend: {cfg.storage.backend}")
    console.print(f"  JSON path: {cfg.storage.json_path}")
    console.print(f"  SQLite path: {cfg.storage.sqlite_path}")
    store_path = ctx.obj.get("store_path")
    if store_path is not None:
        console.print(f"  [yellow]--store override:[/yellow] {store_path}")

    console.print("\n[cyan]Auth[/cyan]")
    console.print(f"  Session TTL: {cfg.auth.session_ttl_days} days")

    console.print("\n[cyan]Server[/cyan]")
    console.print(f"  Bind: {cfg.server.host}:{cfg.server.port}")
    console.print(f"  CORS origins: {', '.join(cfg.server.cors_origins) or '(none)'}")

    console.print(f"\n[cyan]Debug[/cyan]: {cfg.debug}")


@config.command()
@click.option(
    "--path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path(".weekgoals/config.yaml"),
    show_default=True,
    help="Where to write the file",
)
@click.option("--global", "global_config", is_flag=True, help="Write ~/.weekgoals/config.yaml")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init(path: Path, global_config: bool, force: bool) -> None:
    """Create a config file holding the built-in defaults."""
    config_path = Path.home() / ".weekgoals" / "config.yaml" if global_config else path
    if config_path.exists() and not force:
        console.print(f"[yellow]{config_path} already exists[/yellow] (use --force to overwrite)")
        raise SystemExit(1)
    saved_path = save_default_config(config_path)
    console.print(f"[green]✓[/green] Config file created: {saved_path}")
