# filevault/services/tokens/service.py
from __future__ import annotations

import logging
from uuid import uuid4

from filevault.services._shared.base import BaseService, ServiceContext
from filevault.services._shared.errors import (
    ExpiredAccessToken,
    InvalidAccessToken,
    InvalidRefreshToken,
)
from filevault.services._shared.ports.token_provider import (
    ACCESS,
    REFRESH,
    TokenDecodeError,
    TokenExpiredError,
    TokenProvider,
)
from filevault.services.tokens.dto import RotationOut, TokenConfig, TokenPairOut
from filevault.uow import SessionFactory
from filevault.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)


class TokenService(BaseService):
    """
    Token protocol engine: issue, rotate, invalidate and verify.

    Access tokens are stateless and short-lived. Refresh tokens are tracked in
    the ledger, single-use, and revocable at any time by flipping their row.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        session_factory: SessionFactory,
        token_cfg: TokenConfig | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        :param token_provider: Adapter for signing/verifying JWTs.
        :param session_factory: Session source for the ledger units of work.
        :param token_cfg: Access/refresh lifetimes.
        """
        super().__init__(session_factory=session_factory, ctx=ctx)
        self.tokens = token_provider
        self.cfg = token_cfg or TokenConfig()

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    def issue(self, user_id: str, *, uow: SQLAlchemyUnitOfWork | None = None) -> TokenPairOut:
        """
        Mint a token pair for ``user_id`` and record the refresh token.

        :param user_id: Authenticated user id.
        :param uow: Enclosing unit of work. When given, the ledger row joins
            its transaction instead of committing on its own.
        :returns: Access/refresh pair.
        """
        if uow is not None:
            pair = self._mint_and_record(uow, user_id)
        else:
            with self.rw_uow() as own:
                pair = self._mint_and_record(own, user_id)
        log.info("tokens.issued", extra={"user_id": user_id})
        return pair

    # ------------------------------------------------------------------ #
    # Rotate
    # ------------------------------------------------------------------ #

    def rotate(self, presented_refresh_token: str) -> RotationOut:
        """
        Exchange a valid refresh token for a new pair.

        Security
        --------
        - The ledger must hold the token as valid.
        - The token must verify against the refresh secret, and its ``id`` must
          match the ledger row.
        - The old row is consumed with a conditional update. Only the caller
          that flips it wins, so a token rotates at most once even under
          concurrent requests.
        - The new row is written in the same transaction as the consumption.

        :raises InvalidRefreshToken: On any of the failures above.
        """
        with self.rw_uow() as uow:
            row = uow.refresh_tokens.find_valid(presented_refresh_token)
            if row is None:
                log.warning("tokens.rotation_rejected", extra={"user_id": None})
                raise InvalidRefreshToken()

            try:
                claims = self.tokens.decode(presented_refresh_token, token_type=REFRESH)
            except TokenDecodeError as exc:
                log.warning("tokens.rotation_rejected", extra={"user_id": row.user_id})
                raise InvalidRefreshToken() from exc

            user_id = str(claims["id"])
            if user_id != row.user_id:
                log.warning("tokens.rotation_rejected", extra={"user_id": row.user_id})
                raise InvalidRefreshToken()

            if not uow.refresh_tokens.consume(presented_refresh_token):
                # Lost the race to a concurrent rotation or logout.
                log.warning("tokens.rotation_rejected", extra={"user_id": user_id})
                raise InvalidRefreshToken()

            pair = self._mint_and_record(uow, user_id)

        log.info("tokens.rotated", extra={"user_id": user_id})
        return RotationOut(user_id=user_id, tokens=pair)

    # ------------------------------------------------------------------ #
    # Invalidate / session checks
    # ------------------------------------------------------------------ #

    def invalidate(self, refresh_token: str) -> int:
        """
        Invalidate a refresh token (logout). Idempotent.

        :returns: Number of ledger rows flipped (0 when already invalid or
            unknown).
        """
        with self.rw_uow() as uow:
            return uow.refresh_tokens.invalidate(refresh_token)

    def is_session_active(self, user_id: str, refresh_token: str) -> bool:
        """Return whether ``refresh_token`` is a currently valid session of ``user_id``."""
        with self.ro_uow() as uow:
            return uow.refresh_tokens.is_active(user_id=user_id, refresh_token=refresh_token)

    # ------------------------------------------------------------------ #
    # Verify
    # ------------------------------------------------------------------ #

    def verify_access(self, access_token: str) -> str:
        """
        Verify an access token and return the user id it carries.

        :raises ExpiredAccessToken: If the token is past its lifetime.
        :raises InvalidAccessToken: On any other verification failure.
        """
        try:
            claims = self.tokens.decode(access_token, token_type=ACCESS)
        except TokenExpiredError as exc:
            raise ExpiredAccessToken() from exc
        except TokenDecodeError as exc:
            raise InvalidAccessToken() from exc
        return str(claims["id"])

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _mint(self, user_id: str) -> TokenPairOut:
        access = self.tokens.create_access_token(
            identity=user_id,
            expires_delta=self.cfg.access_expires,
            jti=uuid4().hex,
        )
        refresh = self.tokens.create_refresh_token(
            identity=user_id,
            expires_delta=self.cfg.refresh_expires,
            jti=uuid4().hex,
        )
        return TokenPairOut(access_token=access, refresh_token=refresh)

    def _mint_and_record(self, uow: SQLAlchemyUnitOfWork, user_id: str) -> TokenPairOut:
        pair = self._mint(user_id)
        uow.refresh_tokens.record(user_id=user_id, refresh_token=pair.refresh_token)
        return pair
