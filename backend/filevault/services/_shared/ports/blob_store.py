from __future__ import annotations

import io
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import BinaryIO, Protocol
from uuid import uuid4


@dataclass(frozen=True, slots=True)
class StoredBlob:
    """
    Result of writing a blob.

    :ivar key: Store-relative key; persisted as ``File.path``.
    :ivar size: Number of bytes written.
    """

    key: str
    size: int


@dataclass(frozen=True, slots=True)
class BlobInfo:
    """Listing entry used by the storage sweep."""

    key: str
    modified_at: datetime


class BlobStore(Protocol):
    """
    Byte storage for uploaded files.

    Keys are opaque to callers. ``delete`` MUST be idempotent.
    """

    def save(self, stream: BinaryIO, filename: str) -> StoredBlob:
        """Write ``stream`` under a new unique key derived from ``filename``."""

    def open(self, key: str) -> BinaryIO:
        """Open a blob for reading. :raises FileNotFoundError: if missing."""

    def delete(self, key: str) -> bool:
        """Remove a blob. :returns: True if something was removed."""

    def exists(self, key: str) -> bool:
        """Return whether ``key`` is present."""

    def iter_blobs(self) -> Iterable[BlobInfo]:
        """List every stored blob."""


class InMemoryBlobStore(BlobStore):
    """
    Dict-backed blob store for unit tests.

    .. note::
       ``modified_at`` can be back-dated through :meth:`touch` to exercise
       grace-period logic.
    """

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}
        self._mtimes: dict[str, datetime] = {}
        self._lock = threading.Lock()

    def save(self, stream: BinaryIO, filename: str) -> StoredBlob:
        data = stream.read()
        key = f"{uuid4().hex}-{filename}"
        with self._lock:
            self._blobs[key] = data
            self._mtimes[key] = datetime.now(UTC)
        return StoredBlob(key=key, size=len(data))

    def open(self, key: str) -> BinaryIO:
        try:
            return io.BytesIO(self._blobs[key])
        except KeyError:
            raise FileNotFoundError(key) from None

    def delete(self, key: str) -> bool:
        with self._lock:
            self._mtimes.pop(key, None)
            return self._blobs.pop(key, None) is not None

    def exists(self, key: str) -> bool:
        return key in self._blobs

    def iter_blobs(self) -> Iterable[BlobInfo]:
        with self._lock:
            snapshot = list(self._mtimes.items())
        return [BlobInfo(key=k, modified_at=m) for k, m in snapshot]

    def touch(self, key: str, modified_at: datetime) -> None:
        self._mtimes[key] = modified_at

    def keys(self) -> set[str]:
        return set(self._blobs)
