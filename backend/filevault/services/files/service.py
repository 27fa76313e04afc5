# filevault/services/files/service.py
from __future__ import annotations

import logging
import math
from datetime import UTC, datetime, timedelta

from filevault.models.file import File, extension_of
from filevault.services._shared.base import BaseService, ServiceContext
from filevault.services._shared.errors import NotFoundError, ValidationError
from filevault.services._shared.ports.blob_store import BlobStore, StoredBlob
from filevault.services.files.dto import (
    DownloadOut,
    FileOut,
    FilePageOut,
    SweepReport,
    UploadIn,
)
from filevault.uow import SessionFactory

log = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
DEFAULT_SWEEP_GRACE = timedelta(hours=1)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands timestamps back naive; they are stored as UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def to_file_out(row: File) -> FileOut:
    return FileOut(
        id=row.id,
        name=row.name,
        extension=row.extension,
        mime_type=row.mime_type,
        size=row.size,
        user_id=row.user_id,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


class FileService(BaseService):
    """
    Owner-scoped file CRUD over a metadata table and a blob store.

    Ordering between blob and row writes
    ------------------------------------
    The two stores share no transaction, so every write is ordered so that a
    crash can only leave an *unreferenced* blob behind:

    * upload: write blob → insert row (blob removed again if the insert fails);
    * update: write new blob → update row → release old blob;
    * delete: delete row → release blob.

    Unreferenced blobs and rows whose blob vanished are reconciled by
    :meth:`sweep`.
    """

    def __init__(
        self,
        *,
        blob_store: BlobStore,
        session_factory: SessionFactory,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(session_factory=session_factory, ctx=ctx)
        self.blobs = blob_store

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def upload(self, user_id: str, upload: UploadIn | None) -> FileOut:
        """
        Store a new file for ``user_id``.

        :raises ValidationError: No file (or an empty file name) was supplied.
        """
        self._ensure_upload(upload)
        name = upload.filename.strip()
        stored = self.blobs.save(upload.stream, name)
        try:
            with self.rw_uow() as uow:
                row = uow.files.add(
                    File(
                        name=name,
                        extension=extension_of(name),
                        mime_type=upload.mime_type or "application/octet-stream",
                        size=stored.size,
                        path=stored.key,
                        user_id=user_id,
                    )
                )
                out = to_file_out(row)
        except Exception:
            self._release(stored.key, user_id=user_id, file_id=None)
            raise
        log.info("files.uploaded", extra={"user_id": user_id, "file_id": out.id})
        return out

    def update(self, user_id: str, file_id: str, upload: UploadIn | None) -> FileOut:
        """
        Replace the content and metadata of an owned file.

        :raises ValidationError: No file was supplied.
        :raises NotFoundError: The file does not exist or belongs to someone else.
        """
        self._ensure_upload(upload)
        # Ownership is checked before any blob is written.
        self.get(user_id, file_id)

        name = upload.filename.strip()
        stored: StoredBlob = self.blobs.save(upload.stream, name)
        try:
            with self.rw_uow() as uow:
                row = uow.files.get_owned(file_id, user_id)
                if row is None:
                    raise NotFoundError("File", file_id)
                old_key = row.path
                uow.files.assign_updates(
                    row,
                    {
                        "name": name,
                        "extension": extension_of(name),
                        "mime_type": upload.mime_type or "application/octet-stream",
                        "size": stored.size,
                        "path": stored.key,
                    },
                )
                out = to_file_out(row)
        except Exception:
            self._release(stored.key, user_id=user_id, file_id=file_id)
            raise

        self._release(old_key, user_id=user_id, file_id=file_id)
        log.info("files.replaced", extra={"user_id": user_id, "file_id": file_id})
        return out

    def delete(self, user_id: str, file_id: str) -> None:
        """
        Delete an owned file and release its blob.

        :raises NotFoundError: The file does not exist or belongs to someone else.
        """
        with self.rw_uow() as uow:
            row = uow.files.get_owned(file_id, user_id)
            if row is None:
                raise NotFoundError("File", file_id)
            key = row.path
            uow.files.delete(row)

        self._release(key, user_id=user_id, file_id=file_id)
        log.info("files.deleted", extra={"user_id": user_id, "file_id": file_id})

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get(self, user_id: str, file_id: str) -> FileOut:
        """:raises NotFoundError: Missing or foreign file."""
        with self.ro_uow() as uow:
            row = uow.files.get_owned(file_id, user_id)
            if row is None:
                raise NotFoundError("File", file_id)
            return to_file_out(row)

    def list(self, user_id: str, *, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> FilePageOut:
        """
        List ``user_id``'s files newest first.

        :raises ValidationError: Invalid ``page`` or ``page_size``.
        """
        page, page_size = self.ensure_pagination(page=page, limit=page_size, max_limit=MAX_PAGE_SIZE)
        with self.ro_uow() as uow:
            result = uow.files.page_for_owner(user_id, page=page, limit=page_size)
            files = [to_file_out(row) for row in result.items]
        return FilePageOut(
            files=files,
            total=result.total,
            current_page=page,
            total_pages=math.ceil(result.total / page_size),
        )

    def download(self, user_id: str, file_id: str) -> DownloadOut:
        """
        Open an owned file's blob for streaming.

        :raises NotFoundError: Missing or foreign file, or the blob is gone.
        """
        with self.ro_uow() as uow:
            row = uow.files.get_owned(file_id, user_id)
            if row is None:
                raise NotFoundError("File", file_id)
            meta, key = to_file_out(row), row.path
        try:
            stream = self.blobs.open(key)
        except FileNotFoundError:
            log.warning("files.blob_missing", extra={"user_id": user_id, "file_id": file_id})
            raise NotFoundError("File", file_id) from None
        return DownloadOut(name=meta.name, mime_type=meta.mime_type, size=meta.size, stream=stream)

    # ------------------------------------------------------------------ #
    # Maintenance
    # ------------------------------------------------------------------ #

    def sweep(self, *, grace: timedelta = DEFAULT_SWEEP_GRACE, dry_run: bool = False) -> SweepReport:
        """
        Reconcile the blob store with the file table.

        * Blobs no row references and older than ``grace`` are deleted. The
          grace period spares uploads whose row is not committed yet.
        * Rows whose blob no longer exists are deleted.

        :param grace: Minimum age of an unreferenced blob before removal.
        :param dry_run: Report only; change nothing.
        """
        report = SweepReport(dry_run=dry_run)
        cutoff = datetime.now(UTC) - grace

        with self.rw_uow() as uow:
            referenced = uow.files.referenced_paths()
            for row in list(uow.files.iter_all()):
                if not self.blobs.exists(row.path):
                    report.dangling_records.append(row.id)
                    if not dry_run:
                        uow.files.delete(row)

        for blob in self.blobs.iter_blobs():
            if blob.key in referenced or blob.modified_at > cutoff:
                continue
            report.orphan_blobs.append(blob.key)
            if not dry_run:
                self.blobs.delete(blob.key)

        log.info(
            "storage.sweep",
            extra={"count": len(report.orphan_blobs) + len(report.dangling_records)},
        )
        return report

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    @staticmethod
    def _ensure_upload(upload: UploadIn | None) -> None:
        if upload is None or upload.stream is None or not (upload.filename or "").strip():
            raise ValidationError("No file uploaded")

    def _release(self, key: str, *, user_id: str, file_id: str | None) -> None:
        """Delete a blob, logging failures instead of raising.

        The row change has already been committed at this point; a blob left
        behind is picked up by :meth:`sweep`.
        """
        try:
            self.blobs.delete(key)
        except OSError:
            log.warning(
                "files.blob_release_failed",
                extra={"user_id": user_id, "file_id": file_id},
                exc_info=True,
            )
