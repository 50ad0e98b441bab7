"""User-facing surfaces: HTTP server and CLI."""
