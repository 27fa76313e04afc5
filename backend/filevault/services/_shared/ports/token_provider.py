from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Protocol

ACCESS = "access"
REFRESH = "refresh"


class TokenDecodeError(Exception):
    """Token failed verification (bad signature, malformed, wrong type...)."""


class TokenExpiredError(TokenDecodeError):
    """Token signature is valid but its ``exp`` claim has passed."""


class TokenProvider(Protocol):
    """Port for signing and verifying access and refresh tokens.

    Access and refresh tokens are signed with distinct keys. Every token carries
    ``id`` (user id), ``type`` (``"access"`` or ``"refresh"``), ``jti`` and
    ``iat``; ``exp`` is present only when an ``expires_delta`` is given.
    """

    def create_access_token(
        self,
        *,
        identity: str,
        expires_delta: timedelta,
        jti: str,
    ) -> str: ...

    def create_refresh_token(
        self,
        *,
        identity: str,
        expires_delta: timedelta | None,
        jti: str,
    ) -> str: ...

    def decode(self, token: str, *, token_type: str) -> dict[str, Any]:
        """Verify ``token`` with the key for ``token_type`` and return claims.

        :raises TokenExpiredError: If the token is past its ``exp``.
        :raises TokenDecodeError: On any other verification failure, including a
            ``type`` claim different from ``token_type``.
        """
        ...

    def now(self) -> datetime: ...
