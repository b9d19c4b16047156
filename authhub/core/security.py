"""Password hashing and JWT signing/verification."""

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import bcrypt
import jwt

from authhub.core.config import settings
from authhub.core.errors import InvalidTokenError

# Every token, global or service-scoped, expires 7 days after issuance.
TOKEN_TTL = timedelta(days=7)

# Min/max lengths for password validation.
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache
def dummy_password_hash() -> str:
    """Hash checked when the user is unknown, so lookups take as long as real checks."""
    return hash_password("authhub-dummy-password")


def sign_token(claims: dict[str, Any], secret: str, algorithm: str | None = None) -> str:
    """Sign claims with an HMAC key; adds iat and a fixed 7-day exp."""
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        **claims,
        "iat": now,
        "exp": now + TOKEN_TTL,
    }
    return jwt.encode(payload, secret, algorithm=algorithm or settings.JWT_ALGORITHM)


def decode_token(token: str, secret: str, algorithm: str | None = None) -> dict[str, Any]:
    """
    Decode and validate a token signed with ``secret``.

    Raises InvalidTokenError for any failure (expired, bad signature, malformed).
    """
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[algorithm or settings.JWT_ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
    except jwt.PyJWTError:
        raise InvalidTokenError() from None
