# filevault/infra/storage/local_blob_store.py
"""
Local filesystem implementation of :class:`BlobStore`.

Blobs are flat files directly under ``base_path``. A key is
``<epoch_ms>-<8 hex>-<sanitized name>``: the timestamp keeps directory
listings in upload order, the random part keeps two uploads of the same name
in the same millisecond apart.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO
from uuid import uuid4

from werkzeug.utils import secure_filename

from filevault.services._shared.ports.blob_store import BlobInfo, BlobStore, StoredBlob

CHUNK_SIZE = 8192


class LocalBlobStore(BlobStore):
    """
    Store blobs as files under ``base_path``.

    Attributes:
        base_path: Root directory, created on construction.
    """

    def __init__(self, base_path: str | Path) -> None:
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        """Resolve ``key`` to a path inside ``base_path``.

        :raises ValueError: If the key is empty or escapes the root.
        """
        if not key or not key.strip():
            raise ValueError("Blob key cannot be empty")
        full = (self.base_path / key).resolve()
        if full.parent != self.base_path:
            raise ValueError(f"Blob key escapes storage root: {key!r}")
        return full

    def _new_key(self, filename: str) -> str:
        safe = secure_filename(filename) or "upload"
        return f"{int(time.time() * 1000)}-{uuid4().hex[:8]}-{safe}"

    def save(self, stream: BinaryIO, filename: str) -> StoredBlob:
        key = self._new_key(filename)
        target = self._path_for(key)
        size = 0
        try:
            # "xb" refuses to clobber an existing blob.
            with open(target, "xb") as fh:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    fh.write(chunk)
                    size += len(chunk)
        except BaseException:
            target.unlink(missing_ok=True)
            raise
        return StoredBlob(key=key, size=size)

    def open(self, key: str) -> BinaryIO:
        path = self._path_for(key)
        if not path.is_file():
            raise FileNotFoundError(key)
        return open(path, "rb")

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        if not path.is_file():
            return False
        path.unlink(missing_ok=True)
        return True

    def exists(self, key: str) -> bool:
        try:
            return self._path_for(key).is_file()
        except ValueError:
            return False

    def iter_blobs(self) -> Iterable[BlobInfo]:
        for entry in self.base_path.iterdir():
            if not entry.is_file():
                continue
            mtime = datetime.fromtimestamp(entry.stat().st_mtime, tz=UTC)
            yield BlobInfo(key=entry.name, modified_at=mtime)
