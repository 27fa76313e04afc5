"""File store service layer and DTOs."""

from __future__ import annotations

from .dto import DownloadOut, FileOut, FilePageOut, SweepReport, UploadIn
from .service import FileService

__all__ = [
    "DownloadOut",
    "FileOut",
    "FilePageOut",
    "FileService",
    "SweepReport",
    "UploadIn",
]
