# filevault/services/files/dto.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import BinaryIO

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UploadIn:
    """
    An incoming file, independent of the transport that delivered it.

    :param filename: Original client-side name.
    :type filename: str
    :param mime_type: Client-reported MIME type.
    :type mime_type: str
    :param stream: Readable binary stream positioned at the start.
    :type stream: BinaryIO
    """

    filename: str
    mime_type: str
    stream: BinaryIO


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class FileOut:
    """Public metadata of a stored file (the blob key is not included)."""

    id: str
    name: str
    extension: str
    mime_type: str
    size: int
    user_id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class FilePageOut:
    """
    One page of a user's files, newest first.

    :param files: Items on this page.
    :param total: Total files owned by the user.
    :param current_page: 1-based page number that was requested.
    :param total_pages: ``ceil(total / page_size)``.
    """

    files: list[FileOut]
    total: int
    current_page: int
    total_pages: int


@dataclass(frozen=True, slots=True)
class DownloadOut:
    """Open blob stream plus the metadata needed to serve it."""

    name: str
    mime_type: str
    size: int
    stream: BinaryIO


@dataclass(slots=True)
class SweepReport:
    """
    Outcome of a storage reconciliation pass.

    :param orphan_blobs: Blob keys no file row references.
    :param dangling_records: File ids whose blob is missing.
    :param dry_run: When ``True`` nothing was removed.
    """

    orphan_blobs: list[str] = field(default_factory=list)
    dangling_records: list[str] = field(default_factory=list)
    dry_run: bool = False
