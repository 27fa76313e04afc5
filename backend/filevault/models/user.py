"""User model: the credential store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from werkzeug.security import check_password_hash, generate_password_hash

from filevault.core.extensions import db
from filevault.services.identity.validation import validate_identifier

from .base import ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .file import File
    from .refresh_token import RefreshToken


class User(ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity keyed by its login identifier.

    Fields
    ------
    id : str
        Email address or phone number. Primary key, immutable after creation.
    password_hash : str
        Hashed password (write-only setter via ``password``).
    created_at : datetime
        Creation timestamp (from mixin).
    updated_at : datetime
        Update timestamp (from mixin).
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Never loaded implicitly; rows go away through ON DELETE CASCADE.
    refresh_tokens: Mapped[list[RefreshToken]] = relationship(
        back_populates="user", lazy="raise", passive_deletes=True
    )
    files: Mapped[list[File]] = relationship(
        back_populates="owner", lazy="raise", passive_deletes=True
    )

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Hash and set the password.

        :param raw: Plain text password to hash.
        :type raw: str
        """
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """
        Verify a password against the stored hash.

        :param raw: Plain text password candidate.
        :type raw: str
        :returns: ``True`` if it matches; otherwise ``False``.
        :rtype: bool
        """
        if not self.password_hash or not isinstance(raw, str):
            return False
        return bool(check_password_hash(self.password_hash, raw))

    # -------------------- Validators --------------------
    @validates("id")
    def _normalize_id(self, key: str, value: str) -> str:
        """
        Enforce the email-or-phone rule at the model boundary.

        :raises ValueError: If the identifier is neither an email nor a phone.
        """
        check = validate_identifier(value)
        if not check.ok:
            raise ValueError(check.error)
        return check.value
