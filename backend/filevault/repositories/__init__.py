"""Repository package exposing persistence-layer access for all models."""

from __future__ import annotations

from filevault.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    apply_sorting,
    paginate_select,
)
from filevault.repositories.file import FileRepository
from filevault.repositories.refresh_token import RefreshTokenRepository
from filevault.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "Page",
    "Pagination",
    "paginate_select",
    "apply_sorting",
    # Domain
    "FileRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
