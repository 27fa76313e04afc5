"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import SigninSchema, SignupSchema, TokenResponseSchema, UserInfoSchema
from .common import MessageSchema, PaginationQuerySchema
from .file import FilePageSchema, FileSchema

__all__ = [
    "SigninSchema",
    "SignupSchema",
    "TokenResponseSchema",
    "UserInfoSchema",
    "MessageSchema",
    "PaginationQuerySchema",
    "FileSchema",
    "FilePageSchema",
]
