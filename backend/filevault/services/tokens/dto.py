# filevault/services/tokens/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True, slots=True)
class TokenConfig:
    """
    Token emission configuration.

    :param access_expires: Access token lifetime.
    :type access_expires: timedelta
    :param refresh_expires: Refresh token lifetime; ``None`` issues refresh
        tokens without ``exp`` so only the ledger can end them.
    :type refresh_expires: timedelta | None
    """

    access_expires: timedelta = timedelta(minutes=10)
    refresh_expires: timedelta | None = None


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Access and refresh tokens minted together.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class RotationOut:
    """
    Result of a successful rotation.

    :param user_id: Identity re-derived from the presented refresh token.
    :type user_id: str
    :param tokens: Newly minted pair; the old refresh token is now invalid.
    :type tokens: TokenPairOut
    """

    user_id: str
    tokens: TokenPairOut
