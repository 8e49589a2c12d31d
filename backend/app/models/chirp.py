"""
models/chirp.py — Chirp table definition.

A chirp is a short (<= 140 characters) post owned by exactly one user.
The body stored here has already been profanity-masked by chirp_service.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.app.extensions import db
from backend.app.utils.timeutils import utcnow


class Chirp(db.Model):
    __tablename__ = "chirps"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    # ON DELETE CASCADE — chirps go away with their author.
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,   # idx_chirps_user
    )

    body: Mapped[str] = mapped_column(
        String(140),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    author: Mapped["User"] = relationship(  # noqa: F821
        "User",
        back_populates="chirps",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Chirp id={self.id} user_id={self.user_id}>"
