"""
services/chirp_service.py — chirp CRUD and moderation.

Authorization rules:
  - Create: caller must be authenticated; the chirp belongs to the caller
  - Delete: caller must be the chirp's author -> 403 FORBIDDEN otherwise
  - Update: no ownership check (any caller may edit any chirp by id)
  - Get / List: public

Every body that is stored goes through the 140-character limit and then
sanitize_body().
"""

from __future__ import annotations

from typing import Iterable, TypeVar

from flask import current_app
from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.errors import (
    ErrorCode,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from backend.app.models.chirp import Chirp
from backend.app.models.user import User
from backend.app.utils.timeutils import as_utc, utcnow

MAX_CHIRP_LENGTH = 140
PROFANE_WORDS = ("kerfuffle", "sharbert", "fornax")
PROFANITY_MASK = "****"

SORT_ASC = "asc"
SORT_DESC = "desc"

T = TypeVar("T")


# ── Moderation ─────────────────────────────────────────────────────────────

def sanitize_body(body: str) -> str:
    """
    Masks profanity.

    The body is split on single spaces. Any word whose lowercase form
    contains a denylisted term is replaced with the mask, everywhere that
    exact word occurs in the text.

        >>> sanitize_body("This is a kerfuffle")
        'This is a ****'
        >>> sanitize_body("SHARBERT!")
        '****'
    """
    cleaned = body
    for word in body.split(" "):
        lowered = word.lower()
        if any(term in lowered for term in PROFANE_WORDS):
            cleaned = cleaned.replace(word, PROFANITY_MASK)
    return cleaned


def _clean_or_reject(body: str) -> str:
    if len(body) > MAX_CHIRP_LENGTH:
        raise ValidationError("Chirp is too long", code=ErrorCode.CHIRP_TOO_LONG)
    return sanitize_body(body)


def validate_chirp(body: str) -> dict:
    """Length check plus sanitization, without storing anything."""
    return {"cleaned_body": _clean_or_reject(body)}


# ── Serialization / ordering ───────────────────────────────────────────────

def serialize_chirp(chirp: Chirp) -> dict:
    return {
        "id": chirp.id,
        "created_at": as_utc(chirp.created_at).isoformat(),
        "updated_at": as_utc(chirp.updated_at).isoformat(),
        "body": chirp.body,
        "user_id": chirp.user_id,
    }


def sort_chirps(chirps: Iterable[T], sort_order: str | None) -> list[T]:
    """
    Orders chirps by created_at: newest first for "desc", oldest first for
    anything else (including None and ""). Stable for equal timestamps.
    """
    return sorted(
        chirps,
        key=lambda chirp: as_utc(chirp.created_at),
        reverse=(sort_order == SORT_DESC),
    )


def _get_chirp_or_404(chirp_id: str, session: Session) -> Chirp:
    chirp = session.get(Chirp, chirp_id)
    if chirp is None:
        raise NotFoundError("Chirp not found", code=ErrorCode.CHIRP_NOT_FOUND)
    return chirp


# ── Public service functions ───────────────────────────────────────────────

def create_chirp(user_id: str, body: str, session: Session) -> dict:
    """
    Creates a chirp owned by `user_id`.

    Raises:
      ValidationError(CHIRP_TOO_LONG) — more than 140 characters
      NotFoundError(USER_NOT_FOUND)   — the token's user no longer exists
    """
    cleaned = _clean_or_reject(body)

    if session.get(User, user_id) is None:
        raise NotFoundError("User not found", code=ErrorCode.USER_NOT_FOUND)

    now = utcnow()
    chirp = Chirp(user_id=user_id, body=cleaned, created_at=now, updated_at=now)
    session.add(chirp)
    session.flush()

    current_app.logger.info("User %s created chirp %s", user_id, chirp.id)
    return serialize_chirp(chirp)


def update_chirp(chirp_id: str, body: str, session: Session) -> dict:
    """
    Replaces the body of an existing chirp. Does not check who the caller is.

    Raises:
      ValidationError(CHIRP_TOO_LONG)
      NotFoundError(CHIRP_NOT_FOUND)
    """
    cleaned = _clean_or_reject(body)
    chirp = _get_chirp_or_404(chirp_id, session)

    chirp.body = cleaned
    chirp.updated_at = utcnow()
    session.flush()
    return serialize_chirp(chirp)


def delete_chirp(chirp_id: str, caller_user_id: str, session: Session) -> None:
    """
    Permanently deletes a chirp. Only its author may do so.

    Raises:
      NotFoundError(CHIRP_NOT_FOUND)
      ForbiddenError — caller is not the author; the chirp is left untouched
    """
    chirp = _get_chirp_or_404(chirp_id, session)

    if chirp.user_id != caller_user_id:
        raise ForbiddenError("You are not authorized to delete this chirp")

    session.delete(chirp)
    session.flush()
    current_app.logger.info("User %s deleted chirp %s", caller_user_id, chirp_id)


def list_chirps(
        session: Session,
        author_id: str | None = None,
        sort_order: str | None = SORT_ASC,
) -> list[dict]:
    """All chirps, optionally only those by `author_id`, ordered by created_at."""
    stmt = select(Chirp).order_by(Chirp.created_at.asc())
    if author_id:
        stmt = stmt.where(Chirp.user_id == author_id)

    chirps = session.execute(stmt).scalars().all()
    return [serialize_chirp(chirp) for chirp in sort_chirps(chirps, sort_order)]


def get_chirp(chirp_id: str, session: Session) -> dict:
    """Raises NotFoundError(CHIRP_NOT_FOUND) if absent."""
    return serialize_chirp(_get_chirp_or_404(chirp_id, session))
