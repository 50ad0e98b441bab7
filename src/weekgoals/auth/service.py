"""AuthService: registration, login and bearer-token sessions.

Flow:
    token, user = auth.register("alice", "correct horse")
    session = auth.authenticate(token)      # on every request
    auth.logout(session.session_id)

Tokens are handed to the client once; the store only sees their hash.
Expired sessions are deleted the first time they are presented.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from weekgoals.auth.passwords import generate_token, hash_password, hash_token, verify_password
from weekgoals.foundation.config import DEFAULT_SESSION_TTL_DAYS
from weekgoals.foundation.errors import (
    AuthenticationError,
    ConflictError,
    ErrorCode,
    credentials_error,
)
from weekgoals.storage.protocol import AccountRepository, User

logger = logging.getLogger(__name__)

MIN_USERNAME_LENGTH = 3
MAX_USERNAME_LENGTH = 50
MIN_PASSWORD_LENGTH = 8


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_username(value: str | None) -> str:
    return (value or "").strip()


def validate_credentials(username: str, password: str) -> None:
    """Raise ValidationError describing the first problem found."""
    if not username or not password:
        raise credentials_error("username and password are required")
    if len(username) < MIN_USERNAME_LENGTH:
        raise credentials_error(f"username must be at least {MIN_USERNAME_LENGTH} characters")
    if len(username) > MAX_USERNAME_LENGTH:
        raise credentials_error("username is too long")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise credentials_error(f"password must be at least {MIN_PASSWORD_LENGTH} characters")


@dataclass(frozen=True, slots=True)
class AuthSession:
    """An authenticated request's identity."""

    user: User
    session_id: str


class AuthService:
    """Accounts and sessions on top of an AccountRepository."""

    def __init__(
        self,
        accounts: AccountRepository,
        session_ttl_days: int = DEFAULT_SESSION_TTL_DAYS,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.accounts = accounts
        self.session_ttl = timedelta(
            days=session_ttl_days if session_ttl_days > 0 else DEFAULT_SESSION_TTL_DAYS
        )
        self._clock = clock

    def _start_session(self, user: User) -> str:
        token = generate_token()
        self.accounts.create_session(user.id, hash_token(token), self._clock() + self.session_ttl)
        return token

    def register(self, username: str, password: str) -> tuple[str, User]:
        """Create an account and log it in.

        Raises:
            ValidationError: username/password fail the length rules
            ConflictError: the username is taken
        """
        username = normalize_username(username)
        password = password or ""
        validate_credentials(username, password)

        if self.accounts.get_user_by_username(username) is not None:
            raise ConflictError(ErrorCode.USERNAME_TAKEN, {"username": username})

        user = self.accounts.create_user(username, hash_password(password))
        logger.info("Registered user %s", user.username)
        return self._start_session(user), user

    def login(self, username: str, password: str) -> tuple[str, User]:
        username = normalize_username(username)
        password = password or ""
        validate_credentials(username, password)

        user = self.accounts.get_user_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Failed login for %s", username)
            raise AuthenticationError(ErrorCode.AUTH_INVALID_CREDENTIALS)
        return self._start_session(user), user

    def authenticate(self, token: str | None) -> AuthSession:
        """Resolve a bearer token to its user.

        Raises:
            AuthenticationError: token missing, unknown, or expired
        """
        token = (token or "").strip()
        if not token:
            raise AuthenticationError(ErrorCode.AUTH_REQUIRED)

        record = self.accounts.get_session_by_token_hash(hash_token(token))
        if record is None:
            raise AuthenticationError(ErrorCode.AUTH_TOKEN_INVALID)

        now = self._clock()
        if record.expires_at <= now:
            self.accounts.delete_session(record.id)
            logger.info("Session %s expired", record.id)
            raise AuthenticationError(ErrorCode.AUTH_SESSION_EXPIRED)

        user = self.accounts.get_user(record.user_id)
        if user is None:
            self.accounts.delete_session(record.id)
            raise AuthenticationError(ErrorCode.AUTH_TOKEN_INVALID)

        self.accounts.touch_session(record.id, now)
        return AuthSession(user=user, session_id=record.id)

    def logout(self, session_id: str) -> None:
        self.accounts.delete_session(session_id)
