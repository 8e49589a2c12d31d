"""
models/user.py — User table definition.

No business logic. No imports from services or routes.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.extensions import db
from backend.app.utils.timeutils import utcnow


def _new_id() -> str:
    return str(uuid.uuid4())


class User(db.Model):
    __tablename__ = "users"

    # UUID4 rendered as a string so the column is portable across dialects.
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )

    # bcrypt hash, never the raw password.
    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Set by the Polka "user.upgraded" webhook.
    is_chirpy_red: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    # ── Relationships ──────────────────────────────────────────────────────

    chirps: Mapped[list["Chirp"]] = relationship(  # noqa: F821
        "Chirp",
        back_populates="author",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    refresh_tokens: Mapped[list["RefreshToken"]] = relationship(  # noqa: F821
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User id={self.id} email={self.email!r}>"
