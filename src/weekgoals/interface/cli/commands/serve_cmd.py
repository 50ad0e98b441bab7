"""HTTP server command.

Usage:
    weekgoals serve              # Start on the configured host/port
    weekgoals serve --dev        # API only, CORS on for the Vite dev server
    weekgoals serve --static web/dist
"""

from pathlib import Path

import click

from weekgoals.foundation.logging import configure_logging
from weekgoals.interface.cli.helpers import console


@click.command()
@click.option("--port", type=int, default=None, help="Port to listen on (default from config)")
@click.option("--host", default=None, help="Host to bind to (default from config)")
@click.option("--dev", is_flag=True, help="Development mode (CORS enabled for configured origins)")
@click.option(
    "--static",
    "static_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Built frontend directory to serve at /",
)
@click.pass_context
def serve(
    ctx: click.Context,
    port: int | None,
    host: str | None,
    dev: bool,
    static_dir: Path | None,
) -> None:
    """Start the multi-user weekgoals HTTP API.

    \b
    Examples:
        weekgoals serve
        weekgoals --store ./team.db serve --port 8000
    """
    import uvicorn

    from weekgoals.interface.server import create_app
    from weekgoals.storage import open_server_stores

    config = ctx.obj["config"]
    host = host or config.server.host
    port = port or config.server.port

    level = configure_logging(
        debug=ctx.obj.get("debug", False),
        server=True,
        log_file=config.server.log_file or None,
    )

    goals, accounts = open_server_stores(config.storage, ctx.obj.get("store_path"))
    app = create_app(config, goals=goals, accounts=accounts, dev_mode=dev, static_dir=static_dir)

    console.print()
    console.print("[bold green]weekgoals server[/bold green]")
    console.print(f"   URL: http://{host}:{port}")
    if dev:
        origins = ", ".join(config.server.cors_origins)
        console.print(f"   Mode: [yellow]Development[/yellow] (CORS: {origins})")
    console.print()
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    # log_config=None leaves uvicorn's loggers on the handlers configured above
    uvicorn.run(app, host=host, port=port, log_level=level, log_config=None)
