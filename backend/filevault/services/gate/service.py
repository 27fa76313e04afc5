# filevault/services/gate/service.py
"""Authentication gate guarding protected operations."""

from __future__ import annotations

from filevault.services._shared.errors import (
    AccessTokenRequired,
    RefreshTokenRequired,
    TokenNoLongerValid,
)
from filevault.services.gate.dto import AuthContext, GateRequest
from filevault.services.tokens.service import TokenService


def parse_bearer(header: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    The scheme is matched case-insensitively. Anything else yields ``None``.
    """
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        return None
    return token


class AuthGate:
    """
    Validate an access/refresh pair against the token ledger.

    Binding the access token to a live ledger row means logging out (or
    rotating away) a refresh token also cuts off every access token that was
    issued alongside it, without waiting for natural expiry.
    """

    def __init__(self, *, tokens: TokenService) -> None:
        self.tokens = tokens

    def check(self, req: GateRequest) -> AuthContext:
        """
        Run the gate checks in order.

        :raises AccessTokenRequired: No access token was presented.
        :raises RefreshTokenRequired: No refresh token was presented.
        :raises ExpiredAccessToken: The access token is past its lifetime.
        :raises InvalidAccessToken: The access token failed verification.
        :raises TokenNoLongerValid: The session's refresh token is not valid
            for the access token's user.
        """
        if not req.access_token:
            raise AccessTokenRequired()
        if not req.refresh_token:
            raise RefreshTokenRequired()

        user_id = self.tokens.verify_access(req.access_token)

        if not self.tokens.is_session_active(user_id, req.refresh_token):
            raise TokenNoLongerValid()

        return AuthContext(user_id=user_id, refresh_token=req.refresh_token)
