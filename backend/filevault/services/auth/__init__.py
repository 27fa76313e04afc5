"""Account service layer exposing signup, signin and session management."""

from __future__ import annotations

from .dto import SigninIn, SignupIn, UserOut
from .service import AuthService

__all__ = ["AuthService", "SigninIn", "SignupIn", "UserOut"]
