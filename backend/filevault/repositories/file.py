"""File metadata repository."""

from __future__ import annotations

from collections.abc import Iterator

from sqlalchemy import select

from filevault.models.file import File
from filevault.repositories.base import BaseRepository, Page, Pagination


class FileRepository(BaseRepository[File]):
    """Persistence for :class:`File` rows, always scoped by owner."""

    model = File

    def _sortable_fields(self):
        return {
            "created_at": File.created_at,
            "name": File.name,
            "size": File.size,
        }

    def _filterable_fields(self):
        return {"user_id": File.user_id}

    def _updatable_fields(self):
        return {"name", "extension", "mime_type", "size", "path"}

    def get_owned(self, file_id: str, user_id: str) -> File | None:
        """Return the file only if ``user_id`` owns it.

        A foreign file and a missing file are indistinguishable here.
        """
        stmt = select(File).where(File.id == file_id, File.user_id == user_id)
        return self.session.execute(stmt).scalars().first()

    def page_for_owner(self, user_id: str, *, page: int, limit: int) -> Page[File]:
        """List a user's files newest first."""
        return self.paginate(
            Pagination(page=page, limit=limit, sort=["-created_at"]),
            filters={"user_id": user_id},
        )

    def iter_all(self) -> Iterator[File]:
        """Stream every file row (used by the storage sweep)."""
        stmt = select(File).execution_options(yield_per=500)
        yield from self.session.execute(stmt).scalars()

    def referenced_paths(self) -> set[str]:
        return set(self.session.execute(select(File.path)).scalars())
