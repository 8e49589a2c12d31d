"""
services/token_service.py — session and refresh token lifecycle.

Responsibilities:
  - Session token (JWT, HS256) issuance and validation
  - Refresh token generation (32 random bytes, base64url)
  - Refresh token persistence: create, lookup, refresh, revoke

Layer rules:
  - No imports from routes or schemas
  - No use of flask.request, flask.g, flask.current_app or HTTP status codes;
    the secret and TTLs are passed in by the caller

Token design:
  - Session token: JWT, sub = user id (UUID string), iat, exp, iss = "chirpy".
    Stateless; no server-side record.
  - Refresh token: opaque random string returned to the client once. Stored
    in the DB as a SHA-256 digest, never the raw value.
  - A refresh token is usable iff revoked_at IS NULL AND now < expires_at.
  - Refreshing does NOT revoke the presented refresh token. It stays usable
    until it expires or is revoked through POST /api/revoke.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
import uuid
from datetime import timedelta

import jwt
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.errors import (
    ErrorCode,
    ExpiredError,
    InvalidTokenError,
    NotFoundError,
    RandomnessError,
    RevokedError,
    StorageError,
)
from backend.app.models.refresh_token import RefreshToken
from backend.app.utils.timeutils import as_utc, utcnow

TOKEN_ISSUER = "chirpy"
REFRESH_TOKEN_BYTES = 32


# ── Private helpers ────────────────────────────────────────────────────────

def _hash_token(raw_token: str) -> str:
    """SHA-256 hex digest of a raw token string. Used for refresh token storage."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def _ensure_usable(record: RefreshToken) -> None:
    """Expiry is checked before revocation; both are 401s."""
    if as_utc(record.expires_at) <= utcnow():
        raise ExpiredError("Refresh token expired")
    if record.revoked_at is not None:
        raise RevokedError("Refresh token revoked")


# ── Session tokens ─────────────────────────────────────────────────────────

def issue_session_token(
        user_id: str,
        secret: str,
        ttl: timedelta,
        algorithm: str = "HS256",
) -> str:
    """
    Creates a signed JWT for `user_id` valid for `ttl`.
    Payload: iss, sub (user id), iat, exp.
    """
    now = utcnow()
    payload = {
        "iss": TOKEN_ISSUER,
        "sub": str(user_id),
        "iat": now,
        "exp": now + ttl,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def validate_session_token(
        token: str,
        secret: str,
        algorithm: str = "HS256",
) -> str:
    """
    Verifies signature, issuer and expiry of a session token and returns the
    user id it was issued for.

    Raises:
      InvalidTokenError(TOKEN_EXPIRED) — now >= exp (no leeway)
      InvalidTokenError(TOKEN_INVALID) — bad signature, malformed token,
                                         missing claims, non-UUID subject
    """
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            issuer=TOKEN_ISSUER,
            options={"require": ["exp", "iat", "sub"]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise InvalidTokenError(
            "The session token has expired.",
            code=ErrorCode.TOKEN_EXPIRED,
        ) from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError("Invalid Authorization Token") from exc

    try:
        user_id = uuid.UUID(str(payload.get("sub", "")))
    except ValueError as exc:
        raise InvalidTokenError(
            "The 'sub' claim in the session token is not a valid user ID."
        ) from exc

    return str(user_id)


# ── Refresh tokens ─────────────────────────────────────────────────────────

def issue_refresh_token() -> str:
    """32 bytes from the OS CSPRNG, base64url-encoded."""
    try:
        raw = secrets.token_bytes(REFRESH_TOKEN_BYTES)
    except (OSError, NotImplementedError) as exc:
        raise RandomnessError("Secure random source unavailable.") from exc
    if len(raw) != REFRESH_TOKEN_BYTES:
        raise RandomnessError("Failed to read enough random bytes.")
    return base64.urlsafe_b64encode(raw).decode("ascii")


def create_refresh_token_record(
        token: str,
        user_id: str,
        ttl: timedelta,
        session: Session,
) -> RefreshToken:
    """
    Stores the digest of `token` for `user_id`, expiring `ttl` from now.
    Flushes so the row exists before we return; commit is the route's job.
    """
    now = utcnow()
    record = RefreshToken(
        user_id=user_id,
        token_hash=_hash_token(token),
        created_at=now,
        updated_at=now,
        expires_at=now + ttl,
    )
    try:
        session.add(record)
        session.flush()
    except SQLAlchemyError as exc:
        session.rollback()
        raise StorageError(f"Could not store refresh token: {exc}") from exc
    return record


def lookup_refresh_token(token: str, session: Session) -> RefreshToken:
    """Raises NotFoundError if no stored token matches."""
    record = session.execute(
        select(RefreshToken).where(RefreshToken.token_hash == _hash_token(token))
    ).scalar_one_or_none()
    if record is None:
        raise NotFoundError(
            "Refresh token not found",
            code=ErrorCode.REFRESH_TOKEN_NOT_FOUND,
        )
    return record


def refresh_session(
        refresh_token: str,
        secret: str,
        session: Session,
        algorithm: str = "HS256",
) -> tuple[str, str]:
    """
    Exchanges a live refresh token for a new session token and a new refresh
    token.

    Both new credentials get the full lifetime of the presented refresh
    token (expires_at - created_at of the old record), not its remaining
    time. The presented token is left active.

    Raises:
      NotFoundError — unknown token
      ExpiredError  — past expires_at
      RevokedError  — revoked_at is set

    Returns: (session_token, new_refresh_token)
    """
    record = lookup_refresh_token(refresh_token, session)
    _ensure_usable(record)

    lifetime = as_utc(record.expires_at) - as_utc(record.created_at)

    session_token = issue_session_token(record.user_id, secret, lifetime, algorithm)
    new_refresh_token = issue_refresh_token()
    create_refresh_token_record(new_refresh_token, record.user_id, lifetime, session)

    return session_token, new_refresh_token


def revoke_refresh_token(refresh_token: str, session: Session) -> None:
    """
    Revokes a live refresh token. Revoking an already-revoked or expired
    token fails the same way refresh does.
    """
    record = lookup_refresh_token(refresh_token, session)
    _ensure_usable(record)

    now = utcnow()
    record.revoked_at = now
    record.updated_at = now
    session.flush()
