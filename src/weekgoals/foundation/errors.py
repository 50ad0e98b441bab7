"""weekgoals Error System.

Provides structured error handling with:
- Numeric error codes for programmatic handling
- User-friendly messages
- Context for debugging

Every operation in the goal service raises one of the subclasses below.
The HTTP layer maps categories to status codes; the CLI prints them.
"""


from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Numeric error codes organized by category.

    Format: XYYY where X = category, YYY = specific error

    Categories:
        1xxx - Authentication errors
        2xxx - Not found errors
        3xxx - Conflict errors
        4xxx - Validation errors
        5xxx - Configuration errors
        7xxx - Storage/IO errors
    """

    # 1xxx - Authentication
    AUTH_REQUIRED = 1001
    AUTH_INVALID_CREDENTIALS = 1002
    AUTH_SESSION_EXPIRED = 1003
    AUTH_TOKEN_INVALID = 1004

    # 2xxx - Not found
    GOAL_NOT_FOUND = 2001
    SUB_ITEM_NOT_FOUND = 2002

    # 3xxx - Conflict
    USERNAME_TAKEN = 3001

    # 4xxx - Validation
    TEXT_EMPTY = 4001
    TEXT_TOO_LONG = 4002
    FIELD_REQUIRED = 4003
    SUB_ITEM_TYPE_INVALID = 4004
    DEPTH_LIMIT_REACHED = 4005
    CREDENTIALS_INVALID = 4006
    WEEK_KEY_INVALID = 4007

    # 5xxx - Configuration
    CONFIG_INVALID = 5001

    # 7xxx - Storage/IO
    STORAGE_UNAVAILABLE = 7001
    STORAGE_CORRUPT = 7002
    CLIPBOARD_UNAVAILABLE = 7003

    @property
    def category(self) -> str:
        """Get the error category name."""
        prefix = self.value // 1000
        return {
            1: "auth",
            2: "not_found",
            3: "conflict",
            4: "validation",
            5: "config",
            7: "io",
        }.get(prefix, "unknown")


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.AUTH_REQUIRED: "Unauthorized",
    ErrorCode.AUTH_INVALID_CREDENTIALS: "invalid credentials",
    ErrorCode.AUTH_SESSION_EXPIRED: "Session expired",
    ErrorCode.AUTH_TOKEN_INVALID: "Unauthorized",

    ErrorCode.GOAL_NOT_FOUND: "Goal '{id}' not found.",
    ErrorCode.SUB_ITEM_NOT_FOUND: "Sub-item '{id}' not found.",

    ErrorCode.USERNAME_TAKEN: "username already exists",

    ErrorCode.TEXT_EMPTY: "{field} must not be empty",
    ErrorCode.TEXT_TOO_LONG: "{field} must be at most {limit} characters",
    ErrorCode.FIELD_REQUIRED: "{field} is required",
    ErrorCode.SUB_ITEM_TYPE_INVALID: "type must be 'checkbox' or 'list', got '{value}'",
    ErrorCode.DEPTH_LIMIT_REACHED: "Cannot nest deeper than {limit} levels",
    ErrorCode.CREDENTIALS_INVALID: "{detail}",
    ErrorCode.WEEK_KEY_INVALID: "Invalid week key '{value}', expected YYYY-MM-DD",

    ErrorCode.CONFIG_INVALID: "Invalid configuration for '{key}': {detail}",

    ErrorCode.STORAGE_UNAVAILABLE: "Storage unavailable: {detail}",
    ErrorCode.STORAGE_CORRUPT: "Storage file is corrupt: {path}",
    ErrorCode.CLIPBOARD_UNAVAILABLE: "Clipboard unavailable: {detail}",
}


class WeekGoalsError(Exception):
    """Base error type for all weekgoals errors.

    Example:
        >>> err = NotFoundError(ErrorCode.GOAL_NOT_FOUND, {"id": "abc"})
        >>> print(err)
        [WG-2001] Goal 'abc' not found.
    """

    def __init__(
        self,
        code: ErrorCode,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        self.code = code
        self.context = context or {}
        self.cause = cause
        super().__init__(str(self))

    @property
    def message(self) -> str:
        """Get the formatted user-friendly message."""
        template = ERROR_MESSAGES.get(self.code, "An error occurred: {detail}")
        try:
            return template.format(**self.context)
        except KeyError:
            return template

    @property
    def category(self) -> str:
        """Get the error category."""
        return self.code.category

    @property
    def error_id(self) -> str:
        """Get the error ID string (e.g., 'WG-2001')."""
        return f"WG-{self.code.value}"

    def __str__(self) -> str:
        return f"[{self.error_id}] {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, context={self.context!r})"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict for logging/API responses."""
        return {
            "error_id": self.error_id,
            "code": self.code.value,
            "category": self.category,
            "message": self.message,
            "context": self.context,
        }


class ValidationError(WeekGoalsError):
    """Input rejected before any storage call was attempted."""


class NotFoundError(WeekGoalsError):
    """Unknown id, or an id owned by someone else."""


class ConflictError(WeekGoalsError):
    """Uniqueness violation (e.g. username already registered)."""


class AuthenticationError(WeekGoalsError):
    """Missing, unknown or expired credentials."""


class TransientIOError(WeekGoalsError):
    """Storage or device failure; the operation was abandoned."""


class ClipboardError(TransientIOError):
    """System clipboard could not be read or written."""


class ConfigError(WeekGoalsError):
    """Configuration value could not be used."""


# =============================================================================
# Convenience constructors
# =============================================================================


def goal_not_found(goal_id: str) -> NotFoundError:
    return NotFoundError(ErrorCode.GOAL_NOT_FOUND, {"id": goal_id})


def sub_item_not_found(sub_id: str) -> NotFoundError:
    return NotFoundError(ErrorCode.SUB_ITEM_NOT_FOUND, {"id": sub_id})


def storage_error(detail: str, cause: Exception | None = None) -> TransientIOError:
    return TransientIOError(ErrorCode.STORAGE_UNAVAILABLE, {"detail": detail}, cause=cause)


def credentials_error(detail: str) -> ValidationError:
    return ValidationError(ErrorCode.CREDENTIALS_INVALID, {"detail": detail})
