"""Logging configuration for weekgoals.

Two profiles share one root handler setup:
- CLI (default): quiet. WARNING unless --debug or an env override asks for
  more, short ``name: message`` lines on stderr so they do not mix with the
  rich output on stdout.
- Server (``server=True``): at least INFO with timestamps, so store selection,
  pastes and auth failures show up in the server log. uvicorn's own loggers
  propagate into the same handlers, request lines included, and
  ``server.log_file`` adds a file copy of everything at DEBUG.

Level resolution (highest to lowest):
    1. Explicit ``level`` argument
    2. WEEKGOALS_LOG_LEVEL (DEBUG, INFO, WARNING, ...)
    3. WEEKGOALS_DEBUG=true
    4. ``debug=True`` (--debug flag or ``debug: true`` in config)
    5. INFO for the server, WARNING for the CLI

Usage:
    configure_logging(debug=ctx_debug)
    configure_logging(debug=config.debug, server=True, log_file=config.server.log_file)
"""

import logging
import os
import sys
from pathlib import Path

_CLI_FORMAT = "%(name)s: %(message)s"
_DEBUG_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"
_SERVER_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Quieted in every profile
_NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "asyncio",
    "multipart",
)

# Request lines: useful from the server, noise everywhere else
_ACCESS_LOGGER = "uvicorn.access"

_FILE_HANDLER_NAME = "weekgoals-file"


def resolve_level(
    *, debug: bool = False, level: int | str | None = None, server: bool = False
) -> int:
    """Numeric level from the argument, env overrides, the debug flag, then the profile."""
    if level is not None:
        return _parse_level(level)
    if env_level := os.environ.get("WEEKGOALS_LOG_LEVEL"):
        return _parse_level(env_level)
    if os.environ.get("WEEKGOALS_DEBUG", "").lower() in ("true", "1", "yes"):
        return logging.DEBUG
    if debug:
        return logging.DEBUG
    return logging.INFO if server else logging.WARNING


def configure_logging(
    *,
    debug: bool = False,
    level: int | str | None = None,
    stream: object = None,
    server: bool = False,
    log_file: str | Path | None = None,
) -> int:
    """Configure the root logger for the CLI or the HTTP server.

    Call early in the entrypoint; calling again replaces the handlers, which
    is how ``serve`` switches the CLI setup to the server profile.

    Args:
        debug: Enable DEBUG level with detailed format
        level: Override log level (int or string like "DEBUG", "INFO")
        stream: Console output stream (default: stderr)
        server: Use the server profile
        log_file: Also write every record at DEBUG to this file

    Returns:
        The resolved console level.
    """
    resolved_level = resolve_level(debug=debug, level=level, server=server)

    if server:
        console_format = _SERVER_FORMAT
    elif resolved_level <= logging.DEBUG:
        console_format = _DEBUG_FORMAT
    else:
        console_format = _CLI_FORMAT

    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if handler.get_name() == _FILE_HANDLER_NAME:
            handler.close()
    root_logger.handlers.clear()
    # The file handler wants everything; the console handler filters
    root_logger.setLevel(logging.DEBUG if log_file else resolved_level)

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(resolved_level)
    console_handler.setFormatter(logging.Formatter(console_format))
    root_logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.set_name(_FILE_HANDLER_NAME)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(_DEBUG_FORMAT))
        root_logger.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger(_ACCESS_LOGGER).setLevel(logging.INFO if server else logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured: level=%s, profile=%s, file=%s",
        logging.getLevelName(resolved_level),
        "server" if server else "cli",
        log_file or "-",
    )
    return resolved_level


def _parse_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    numeric = getattr(logging, level.upper(), None)
    if isinstance(numeric, int):
        return numeric
    try:
        return int(level)
    except ValueError:
        return logging.WARNING
