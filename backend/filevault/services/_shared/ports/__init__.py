"""
filevault.services._shared.ports
================================

*Ports* (hexagonal interfaces) the service layer depends on.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`, the abstraction for signing and
    verifying access and refresh tokens, plus its decode errors.

- :mod:`blob_store`:
    Defines :class:`~.BlobStore` for file bytes, with an in-memory
    implementation for tests.

Concrete adapters live under ``filevault.infra``.
"""

from __future__ import annotations

from .blob_store import BlobInfo, BlobStore, InMemoryBlobStore, StoredBlob
from .token_provider import (
    ACCESS,
    REFRESH,
    TokenDecodeError,
    TokenExpiredError,
    TokenProvider,
)

__all__ = [
    "ACCESS",
    "REFRESH",
    "BlobInfo",
    "BlobStore",
    "InMemoryBlobStore",
    "StoredBlob",
    "TokenDecodeError",
    "TokenExpiredError",
    "TokenProvider",
]
