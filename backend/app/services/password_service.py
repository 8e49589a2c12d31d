"""
services/password_service.py — one-way password hashing (bcrypt).

The stored value is bcrypt's self-describing "$2b$<cost>$<salt+hash>" string,
so verification needs no extra parameters. Raw passwords are never stored and
never logged.
"""

from __future__ import annotations

import bcrypt

from backend.app.errors import HashingError

# bcrypt only looks at the first 72 bytes of its input.
BCRYPT_MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = 12) -> str:
    """Returns a salted bcrypt hash. Raises HashingError on any bcrypt failure."""
    try:
        hashed = bcrypt.hashpw(
            password.encode("utf-8"),
            bcrypt.gensalt(rounds=rounds),
        )
    except (ValueError, TypeError) as exc:
        raise HashingError(f"Could not hash password: {exc}") from exc
    return hashed.decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Constant-time check of `password` against a stored bcrypt hash.

    Returns False for a wrong password. Raises HashingError only when the
    stored hash itself is malformed.
    """
    candidate = password.encode("utf-8")
    if len(candidate) > BCRYPT_MAX_PASSWORD_BYTES:
        # Cannot have been produced by hash_password(); never a match.
        return False
    try:
        return bcrypt.checkpw(candidate, hashed_password.encode("utf-8"))
    except (ValueError, TypeError) as exc:
        raise HashingError("Stored password hash is malformed.") from exc
