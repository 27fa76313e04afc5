"""Refresh token ledger repository."""

from __future__ import annotations

from typing import cast

from sqlalchemy import CursorResult, select, true, update

from filevault.models.refresh_token import RefreshToken
from filevault.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Append-only access to the refresh token ledger.

    Rows are created by :meth:`record` and only ever mutated by the
    conditional updates in :meth:`consume` and :meth:`invalidate`. There is no
    delete path.
    """

    model = RefreshToken

    def _filterable_fields(self):
        return {
            "user_id": RefreshToken.user_id,
            "refresh_token": RefreshToken.refresh_token,
            "is_valid": RefreshToken.is_valid,
        }

    def _sortable_fields(self):
        return {"created_at": RefreshToken.created_at}

    def record(self, *, user_id: str, refresh_token: str) -> RefreshToken:
        """Persist a freshly issued, valid refresh token."""
        return self.add(RefreshToken(user_id=user_id, refresh_token=refresh_token, is_valid=True))

    def find_valid(self, refresh_token: str) -> RefreshToken | None:
        """Return the valid ledger row for ``refresh_token`` if any."""
        stmt = select(RefreshToken).where(
            RefreshToken.refresh_token == refresh_token,
            RefreshToken.is_valid == true(),
        )
        return self.session.execute(stmt).scalars().first()

    def is_active(self, *, user_id: str, refresh_token: str) -> bool:
        """Return whether ``refresh_token`` is a valid session of ``user_id``."""
        stmt = select(RefreshToken.id).where(
            RefreshToken.user_id == user_id,
            RefreshToken.refresh_token == refresh_token,
            RefreshToken.is_valid == true(),
        )
        return self.session.execute(stmt.limit(1)).first() is not None

    def consume(self, refresh_token: str) -> bool:
        """Atomically flip a valid token to invalid.

        Runs a single ``UPDATE ... WHERE refresh_token = :t AND is_valid``.
        Exactly one concurrent caller can observe the row as valid, so exactly
        one caller gets ``True``.

        :returns: ``True`` when this call invalidated the row.
        :rtype: bool
        """
        return self._invalidate_where(refresh_token) == 1

    def invalidate(self, refresh_token: str) -> int:
        """Invalidate ``refresh_token``; zero affected rows is not an error.

        :returns: Number of rows flipped.
        :rtype: int
        """
        return self._invalidate_where(refresh_token)

    def _invalidate_where(self, refresh_token: str) -> int:
        stmt = (
            update(RefreshToken)
            .where(
                RefreshToken.refresh_token == refresh_token,
                RefreshToken.is_valid == true(),
            )
            .values(is_valid=False)
        )
        result = cast(CursorResult, self.session.execute(stmt))
        return int(result.rowcount or 0)
