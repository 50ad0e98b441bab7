"""Command-line interface for weekgoals."""

from weekgoals.interface.cli.main import cli_entrypoint, main

__all__ = ["cli_entrypoint", "main"]
