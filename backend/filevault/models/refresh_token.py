"""Refresh token ledger model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    func,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from filevault.core.extensions import db

from .base import PKMixin, ReprMixin, utcnow

if TYPE_CHECKING:
    from .user import User


class RefreshToken(PKMixin, ReprMixin, db.Model):
    """
    One row per refresh token ever issued.

    The ledger is append-only: rows are never deleted and only ``is_valid``
    changes, flipping to ``False`` on rotation or logout.

    Fields
    ------
    user_id : str
        Owner of the session.
    refresh_token : str
        The encoded refresh JWT as handed to the client.
    is_valid : bool
        ``True`` while the token may still be rotated or back a request.
    created_at : datetime
        Issuance timestamp.
    """

    __tablename__ = "refresh_tokens"

    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    # Length grows with the identifier; users.id alone may be 255 characters.
    refresh_token: Mapped[str] = mapped_column(Text, nullable=False)
    is_valid: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    user: Mapped[User] = relationship(back_populates="refresh_tokens")

    __table_args__ = (
        UniqueConstraint("refresh_token", name="uq_refresh_tokens_refresh_token"),
        Index("ix_refresh_tokens_user_id", "user_id"),
    )
