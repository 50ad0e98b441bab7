"""Foundation domain - base config, errors and logging.

Everything else imports from here; nothing here imports the rest of weekgoals.
"""

from weekgoals.foundation.config import (
    WeekGoalsConfig,
    get_config,
    load_config,
    reset_config,
    save_default_config,
)
from weekgoals.foundation.errors import (
    AuthenticationError,
    ClipboardError,
    ConfigError,
    ConflictError,
    ErrorCode,
    NotFoundError,
    TransientIOError,
    ValidationError,
    WeekGoalsError,
)
from weekgoals.foundation.logging import configure_logging

__all__ = [
    # Config
    "WeekGoalsConfig",
    "get_config",
    "load_config",
    "reset_config",
    "save_default_config",
    # Errors
    "AuthenticationError",
    "ClipboardError",
    "ConfigError",
    "ConflictError",
    "ErrorCode",
    "NotFoundError",
    "TransientIOError",
    "ValidationError",
    "WeekGoalsError",
    # Logging
    "configure_logging",
]
