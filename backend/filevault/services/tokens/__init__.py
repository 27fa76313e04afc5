"""Token issuance, rotation and verification."""

from __future__ import annotations

from .dto import RotationOut, TokenConfig, TokenPairOut
from .service import TokenService

__all__ = ["RotationOut", "TokenConfig", "TokenPairOut", "TokenService"]
