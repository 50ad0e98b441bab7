"""Password and token hashing.

Passwords are stored as ``salt_hex:key_hex`` using scrypt with a random
16-byte salt and a 64-byte derived key. Session tokens are random and only
their sha256 digest is stored.
"""

import hashlib
import hmac
import secrets

_SALT_BYTES = 16
_KEY_BYTES = 64
_TOKEN_BYTES = 32

# scrypt cost parameters (Node's scryptSync defaults)
_SCRYPT_N = 16384
_SCRYPT_R = 8
_SCRYPT_P = 1


def _derive(password: str, salt: str) -> bytes:
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=_SCRYPT_N,
        r=_SCRYPT_R,
        p=_SCRYPT_P,
        dklen=_KEY_BYTES,
    )


def hash_password(password: str) -> str:
    salt = secrets.token_hex(_SALT_BYTES)
    return f"{salt}:{_derive(password, salt).hex()}"


def verify_password(password: str, stored: str) -> bool:
    """Constant-time check of ``password`` against a stored hash."""
    salt, _, key = stored.partition(":")
    if not salt or not key:
        return False
    try:
        expected = bytes.fromhex(key)
    except ValueError:
        return False
    derived = _derive(password, salt)
    if len(expected) != len(derived):
        return False
    return hmac.compare_digest(expected, derived)


def generate_token() -> str:
    return secrets.token_urlsafe(_TOKEN_BYTES)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
