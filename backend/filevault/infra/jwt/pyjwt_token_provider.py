# filevault/infra/jwt/pyjwt_token_provider.py
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from filevault.services._shared.ports.token_provider import (
    ACCESS,
    REFRESH,
    TokenDecodeError,
    TokenExpiredError,
    TokenProvider,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class PyJWTTokenProvider(TokenProvider):
    """
    Adapter signing HMAC JWTs with PyJWT.

    Access and refresh tokens use separate secrets, so a refresh token can
    never pass access verification and vice versa even before the ``type``
    claim is checked.

    .. note::
       ``clock`` only affects issuance (``iat``/``exp``). Verification always
       uses PyJWT's own wall clock, which lets tests mint tokens that are
       already expired.
    """

    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    leeway: int = 0
    clock: Callable[[], datetime] = field(default=_utcnow)

    def now(self) -> datetime:
        return self.clock()

    def _secret_for(self, token_type: str) -> str:
        if token_type == ACCESS:
            return self.access_secret
        if token_type == REFRESH:
            return self.refresh_secret
        raise ValueError(f"Unknown token type: {token_type!r}")

    def _encode(
        self,
        *,
        identity: str,
        token_type: str,
        expires_delta: timedelta | None,
        jti: str,
    ) -> str:
        issued_at = self.now()
        payload: dict[str, Any] = {
            "id": identity,
            "type": token_type,
            "jti": jti,
            "iat": int(issued_at.timestamp()),
        }
        if expires_delta is not None:
            payload["exp"] = int((issued_at + expires_delta).timestamp())
        return jwt.encode(payload, self._secret_for(token_type), algorithm=self.algorithm)

    def create_access_token(
        self,
        *,
        identity: str,
        expires_delta: timedelta,
        jti: str,
    ) -> str:
        return self._encode(
            identity=identity, token_type=ACCESS, expires_delta=expires_delta, jti=jti
        )

    def create_refresh_token(
        self,
        *,
        identity: str,
        expires_delta: timedelta | None,
        jti: str,
    ) -> str:
        return self._encode(
            identity=identity, token_type=REFRESH, expires_delta=expires_delta, jti=jti
        )

    def decode(self, token: str, *, token_type: str) -> dict[str, Any]:
        # Access tokens must carry exp; refresh tokens only when configured.
        required = ["id", "type", "jti", "iat"]
        if token_type == ACCESS:
            required.append("exp")
        try:
            claims = jwt.decode(
                token,
                self._secret_for(token_type),
                algorithms=[self.algorithm],
                leeway=self.leeway,
                options={"require": required, "verify_iat": False},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError(str(exc)) from exc
        except jwt.InvalidTokenError as exc:
            raise TokenDecodeError(str(exc)) from exc

        if claims.get("type") != token_type:
            raise TokenDecodeError("Wrong token type")
        if not isinstance(claims.get("id"), str) or not claims["id"]:
            raise TokenDecodeError("Token carries no identity")
        return claims
