"""
services/user_service.py — user account business logic.

Responsibilities:
  - Registration (hash password, persist user)
  - Login (iterate-and-match candidates by email, issue token pair)
  - Self-service profile update
  - Subscription flag (Chirpy Red) for the webhook handler
  - Administrative bulk reset

Layer rules:
  - No imports from routes or schemas
  - No use of flask.request or flask.g
  - current_app is used only for BCRYPT_LOG_ROUNDS and the logger
"""

from __future__ import annotations

from datetime import timedelta

from flask import current_app
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.errors import (
    ErrorCode,
    NotFoundError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)
from backend.app.models.chirp import Chirp
from backend.app.models.refresh_token import RefreshToken
from backend.app.models.user import User
from backend.app.services import password_service, token_service
from backend.app.utils.timeutils import as_utc, utcnow


# ── Private helpers ────────────────────────────────────────────────────────

def _bcrypt_rounds() -> int:
    return current_app.config.get("BCRYPT_LOG_ROUNDS", 12)


def _flush(session: Session, action: str) -> None:
    """Flushes pending changes, turning DB failures (e.g. duplicate email) into StorageError."""
    try:
        session.flush()
    except SQLAlchemyError as exc:
        session.rollback()
        raise StorageError(f"Could not {action}: {exc.__class__.__name__}") from exc


def _get_user_or_404(user_id: str, session: Session) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found", code=ErrorCode.USER_NOT_FOUND)
    return user


def serialize_user(user: User) -> dict:
    """Public projection of a User. The password hash never leaves this module."""
    return {
        "id": user.id,
        "created_at": as_utc(user.created_at).isoformat(),
        "updated_at": as_utc(user.updated_at).isoformat(),
        "email": user.email,
        "is_chirpy_red": bool(user.is_chirpy_red),
    }


# ── Public service functions ───────────────────────────────────────────────

def register_user(email: str, password: str, session: Session) -> dict:
    """
    Creates a new user account.

    Raises:
      HashingError — bcrypt failure
      StorageError — duplicate email or any other DB failure

    Returns: the serialized user (no password, no tokens)
    """
    hashed = password_service.hash_password(password, rounds=_bcrypt_rounds())
    now = utcnow()
    user = User(
        email=email,
        hashed_password=hashed,
        is_chirpy_red=False,
        created_at=now,
        updated_at=now,
    )
    session.add(user)
    _flush(session, "create user")

    current_app.logger.info("Registered user %s", user.id)
    return serialize_user(user)


def authenticate_user(
        email: str,
        password: str,
        ttl: timedelta,
        secret: str,
        session: Session,
        algorithm: str = "HS256",
) -> dict:
    """
    Validates credentials and issues a session token and a refresh token,
    both valid for `ttl`.

    The email lookup may return several rows; the password is checked against
    each and the first match wins.

    Raises:
      UnauthorizedError(INVALID_CREDENTIALS) — no candidate matched. The same
        error covers unknown email and wrong password.

    Returns: serialized user plus "token" and "refresh_token"
    """
    candidates = session.execute(
        select(User).where(User.email == email).order_by(User.created_at)
    ).scalars().all()

    for user in candidates:
        if not password_service.verify_password(password, user.hashed_password):
            continue

        token = token_service.issue_session_token(user.id, secret, ttl, algorithm)
        refresh_token = token_service.issue_refresh_token()
        token_service.create_refresh_token_record(refresh_token, user.id, ttl, session)

        current_app.logger.info("User %s logged in", user.id)
        return {
            **serialize_user(user),
            "token": token,
            "refresh_token": refresh_token,
        }

    raise UnauthorizedError(
        "Invalid email or password",
        code=ErrorCode.INVALID_CREDENTIALS,
    )


def update_profile(
        user_id: str,
        session: Session,
        email: str | None = None,
        password: str | None = None,
) -> dict:
    """
    Updates the caller's own email and/or password.

    `user_id` is the authenticated token subject; there is no separate
    target id to compare it with.

    Raises:
      ValidationError — neither email nor password supplied
      NotFoundError   — user deleted between authentication and update
      StorageError    — e.g. the new email is already taken
    """
    if not email and not password:
        raise ValidationError(
            "Email or password are required",
            code=ErrorCode.MISSING_FIELD,
        )

    user = _get_user_or_404(user_id, session)

    if email:
        user.email = email
    if password:
        user.hashed_password = password_service.hash_password(
            password, rounds=_bcrypt_rounds()
        )
    user.updated_at = utcnow()
    _flush(session, "update user")

    current_app.logger.info("Updated profile of user %s", user.id)
    return serialize_user(user)


def set_subscription_flag(user_id: str, session: Session) -> dict:
    """Marks the user as a Chirpy Red subscriber. Webhook-only."""
    user = _get_user_or_404(user_id, session)
    user.is_chirpy_red = True
    user.updated_at = utcnow()
    _flush(session, "upgrade user")

    current_app.logger.info("User %s upgraded to Chirpy Red", user.id)
    return serialize_user(user)


def delete_all_users(session: Session) -> int:
    """
    Removes every user together with their chirps and refresh tokens.

    Rows are deleted child-first so the wipe does not depend on the database
    enforcing ON DELETE CASCADE (SQLite does not by default).

    Returns: number of users deleted
    """
    session.execute(delete(RefreshToken))
    session.execute(delete(Chirp))
    result = session.execute(delete(User))
    session.flush()

    current_app.logger.warning("Deleted all users (%s rows)", result.rowcount)
    return result.rowcount
