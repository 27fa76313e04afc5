"""Request authentication gate."""

from __future__ import annotations

from .dto import AuthContext, GateRequest
from .service import AuthGate, parse_bearer

__all__ = ["AuthContext", "AuthGate", "GateRequest", "parse_bearer"]
