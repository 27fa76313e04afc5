# filevault/services/auth/service.py
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from filevault.services._shared.base import BaseService, ServiceContext
from filevault.services._shared.errors import (
    ConflictError,
    InvalidCredentials,
    ValidationError,
)
from filevault.services.auth.dto import SigninIn, SignupIn, UserOut
from filevault.services.gate.dto import AuthContext
from filevault.services.identity.validation import validate_identifier
from filevault.services.tokens.dto import RotationOut, TokenPairOut
from filevault.services.tokens.service import TokenService
from filevault.uow import SessionFactory

log = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
USER_EXISTS = "User already exists"


class AuthService(BaseService):
    """
    Account lifecycle: signup, signin, refresh, logout and identity lookup.

    Credential checks live here. Everything about tokens is delegated to
    :class:`TokenService`.
    """

    def __init__(
        self,
        *,
        tokens: TokenService,
        session_factory: SessionFactory,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(session_factory=session_factory, ctx=ctx)
        self.tokens = tokens

    # ------------------------------------------------------------------ #
    # Signup
    # ------------------------------------------------------------------ #

    def signup(self, dto: SignupIn) -> TokenPairOut:
        """
        Register a user and open their first session.

        :raises ValidationError: Malformed identifier or short password.
        :raises ConflictError: The identifier is already registered.
        """
        check = validate_identifier(dto.id)
        if not check.ok:
            raise ValidationError(check.error)
        if not isinstance(dto.password, str) or len(dto.password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        # The account and its first session commit together or not at all.
        try:
            with self.rw_uow() as uow:
                if uow.users.exists_by_id(check.value):
                    raise ConflictError("User", USER_EXISTS)
                uow.users.create(user_id=check.value, password=dto.password)
                pair = self.tokens.issue(check.value, uow=uow)
        except IntegrityError as exc:
            # Lost a race against a concurrent signup for the same id.
            raise ConflictError("User", USER_EXISTS) from exc

        log.info("auth.signup", extra={"user_id": check.value})
        return pair

    # ------------------------------------------------------------------ #
    # Signin
    # ------------------------------------------------------------------ #

    def signin(self, dto: SigninIn) -> TokenPairOut:
        """
        Authenticate credentials and open a new session.

        Unknown identifiers and wrong passwords are reported identically.

        :raises InvalidCredentials: If authentication fails.
        """
        check = validate_identifier(dto.id)
        if not check.ok:
            raise InvalidCredentials()

        with self.ro_uow() as uow:
            user = uow.users.authenticate(check.value, dto.password)
            if user is None:
                log.warning("auth.signin_failed")
                raise InvalidCredentials()
            user_id = user.id

        log.info("auth.signin", extra={"user_id": user_id})
        return self.tokens.issue(user_id)

    # ------------------------------------------------------------------ #
    # Refresh / logout / info
    # ------------------------------------------------------------------ #

    def refresh(self, refresh_token: str) -> RotationOut:
        """Rotate the session's refresh token. See :meth:`TokenService.rotate`."""
        return self.tokens.rotate(refresh_token)

    def logout(self, auth: AuthContext) -> None:
        """Invalidate only the refresh token bound to this request."""
        affected = self.tokens.invalidate(auth.refresh_token)
        log.info("auth.logout", extra={"user_id": auth.user_id, "count": affected})

    def info(self, auth: AuthContext) -> UserOut:
        return UserOut(id=auth.user_id)
