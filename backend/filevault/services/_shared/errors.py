"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic**: they never import Flask or HTTP
helpers. They are the stable contract between repositories, the token engine,
the authentication gate and the file services.

The translation to JSON error responses is handled by
``filevault/core/errors.py``.
"""

from __future__ import annotations

from dataclasses import dataclass

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - ``str(exc)`` is the client-safe message.
    """

    default_message = "Service error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class ValidationError(ServiceError):
    """Raised when input is malformed or violates a domain rule."""

    default_message = "Invalid input"


class InternalError(ServiceError):
    """Raised on unexpected persistence or filesystem failures."""

    default_message = "Internal error"


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """Base class for credential and token failures."""

    default_message = "Unauthorized"


class InvalidCredentials(AuthenticationError):
    default_message = "Invalid credentials"


class AccessTokenRequired(AuthenticationError):
    default_message = "Access token is required"


class RefreshTokenRequired(AuthenticationError):
    default_message = "Refresh token is required"


class InvalidRefreshToken(AuthenticationError):
    """Refresh token is unknown, already consumed, revoked or badly signed."""

    default_message = "Invalid refresh token"


class ExpiredAccessToken(AuthenticationError):
    """Access token signature is valid but its lifetime has passed."""

    default_message = "Token expired"


class InvalidAccessToken(AuthenticationError):
    """Access token failed verification for any reason other than expiry."""

    default_message = "Invalid token"


class TokenNoLongerValid(AuthenticationError):
    """Access token is genuine but its session was invalidated in the ledger."""

    default_message = "Token is no longer valid"


# --------------------------------------------------------------------------- #
# Resource errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is missing or not visible to the caller.

    :param entity: Entity name (e.g., "File").
    :type entity: str
    :param key: Identifier or search key, kept for logs only.
    :type key: str | int | None
    """

    entity: str
    key: str | int | None = None

    def __str__(self) -> str:
        return f"{self.entity} not found"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Client-safe explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return self.detail
