# filevault/services/identity/validation.py
"""Identifier validation independent of persistence.

A user identifier is either an email address or a phone number. The check is
a pure function so it can run before any database work and be reused by the
model validator and the signup use case alike.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final, Literal

EMAIL_RE: Final = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE: Final = re.compile(r"^\+?[\d\s-]{10,}$")

IDENTIFIER_ERROR: Final[str] = "ID must be a valid email or phone number"

IdentifierKind = Literal["email", "phone"]


@dataclass(frozen=True, slots=True)
class IdentifierCheck:
    """
    Outcome of :func:`validate_identifier`.

    :param value: Normalized identifier (trimmed; emails lowercased).
    :type value: str
    :param kind: ``"email"`` or ``"phone"`` when valid, else ``None``.
    :type kind: str | None
    :param error: Client-safe message when invalid, else ``None``.
    :type error: str | None
    """

    value: str
    kind: IdentifierKind | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def validate_identifier(raw: object) -> IdentifierCheck:
    """
    Classify and normalize a user identifier.

    :param raw: Candidate identifier as received from the client.
    :returns: Check result; ``ok`` is ``False`` for anything that is neither an
              email nor a phone number.
    :rtype: IdentifierCheck
    """
    if not isinstance(raw, str):
        return IdentifierCheck(value="", error=IDENTIFIER_ERROR)
    value = raw.strip()
    if EMAIL_RE.match(value):
        return IdentifierCheck(value=value.lower(), kind="email")
    if PHONE_RE.match(value):
        return IdentifierCheck(value=value, kind="phone")
    return IdentifierCheck(value=value, error=IDENTIFIER_ERROR)
