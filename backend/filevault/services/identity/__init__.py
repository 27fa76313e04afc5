"""User identifier rules (email or phone number)."""

from __future__ import annotations

from .validation import IdentifierCheck, validate_identifier

__all__ = ["IdentifierCheck", "validate_identifier"]
