# filevault/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class SignupIn:
    """
    Input DTO for signup.

    :param id: Email or phone identifier (raw, validated by the service).
    :type id: str
    :param password: Raw password, at least six characters.
    :type password: str
    """

    id: str
    password: str


@dataclass(frozen=True, slots=True)
class SigninIn:
    """
    Input DTO for signin.

    :param id: Identifier as typed by the user.
    :type id: str
    :param password: Raw password to verify.
    :type password: str
    """

    id: str
    password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserOut:
    """Public view of a user."""

    id: str
