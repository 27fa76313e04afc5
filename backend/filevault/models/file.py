"""Stored file metadata model."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from filevault.core.extensions import db

from .base import ReprMixin, TimestampMixin, UUIDPKMixin

if TYPE_CHECKING:
    from .user import User


def extension_of(name: str) -> str:
    """Return the suffix of ``name`` including the dot, or ``""``.

    Dotfiles such as ``.bashrc`` have no extension.
    """
    return os.path.splitext(os.path.basename(name))[1]


class File(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Metadata for one stored blob.

    The row exclusively owns the blob referenced by ``path``: deleting or
    replacing the row must release that blob.

    Fields
    ------
    id : str
        UUID4 primary key.
    name : str
        Original client-side file name.
    extension : str
        ``name`` suffix including the dot (``".pdf"``), possibly empty.
    mime_type : str
        MIME type reported by the client.
    size : int
        Number of bytes stored.
    path : str
        Blob store key. Internal; never serialized to clients.
    user_id : str
        Owner.
    """

    __tablename__ = "files"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    extension: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    mime_type: Mapped[str] = mapped_column(
        String(255), nullable=False, default="application/octet-stream"
    )
    size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    path: Mapped[str] = mapped_column(String(512), nullable=False)
    user_id: Mapped[str] = mapped_column(
        String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    owner: Mapped[User] = relationship(back_populates="files")

    __table_args__ = (
        Index("ix_files_user_id_created_at", "user_id", "created_at"),
        Index("ix_files_path", "path"),
    )

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("File name is required.")
        return value.strip()
