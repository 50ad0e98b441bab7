"""HTTP server for weekgoals."""

from weekgoals.interface.server.main import create_app

__all__ = ["create_app"]
