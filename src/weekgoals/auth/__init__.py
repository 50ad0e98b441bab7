"""Accounts and bearer-token sessions for the multi-user server."""

from weekgoals.auth.passwords import generate_token, hash_password, hash_token, verify_password
from weekgoals.auth.service import (
    AuthService,
    AuthSession,
    normalize_username,
    validate_credentials,
)

__all__ = [
    "AuthService",
    "AuthSession",
    "generate_token",
    "hash_password",
    "hash_token",
    "normalize_username",
    "validate_credentials",
    "verify_password",
]
