# filevault/services/gate/dto.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GateRequest:
    """
    Credentials presented by an incoming request.

    :param access_token: Bearer token from the ``Authorization`` header.
    :type access_token: str | None
    :param refresh_token: Refresh token from the session cookie.
    :type refresh_token: str | None
    """

    access_token: str | None
    refresh_token: str | None


@dataclass(frozen=True, slots=True)
class AuthContext:
    """
    Identity attached to a request that passed the gate.

    :param user_id: Id decoded from the access token.
    :type user_id: str
    :param refresh_token: Refresh token bound to this session (used by logout).
    :type refresh_token: str
    """

    user_id: str
    refresh_token: str
