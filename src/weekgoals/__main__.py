"""Allow ``python -m weekgoals``."""

from weekgoals.interface.cli.main import cli_entrypoint

cli_entrypoint()
