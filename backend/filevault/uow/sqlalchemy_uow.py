"""
SQLAlchemy implementations of UnitOfWork.

Both units of work receive a ``session_factory`` instead of reaching for a
module-level session, so services can be built against any session (the
Flask-scoped one in production, a SAVEPOINT-bound one in tests).
"""

from __future__ import annotations

from contextlib import suppress

from sqlalchemy import event
from sqlalchemy.exc import InvalidRequestError
from sqlalchemy.orm import Session, scoped_session

from filevault.repositories import FileRepository, RefreshTokenRepository, UserRepository
from filevault.uow.base import SessionFactory, UnitOfWork


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)
        self.files = FileRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write unit of work.

    Commits when the block exits cleanly and rolls back when it raises. A
    failing commit is rolled back and re-raised.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        super().__init__(session=session_factory())

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session begins lazily on first use.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only unit of work.

    Installs a ``before_flush`` guard that rejects pending ORM writes.
    ``commit()`` is not allowed.

    When the session has no transaction on entry, the scope owns the one it
    starts and rolls it back on exit. When a transaction is already running
    (an outer fixture or an enclosing write), the scope attaches to it and
    leaves it untouched.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        super().__init__(session=session_factory())
        self._guard_installed = False
        self._owns_transaction = False
        self._target: Session | None = None

    def _concrete_session(self) -> Session:
        # scoped_session proxies neither in_transaction() nor event targets.
        if isinstance(self.session, scoped_session):
            return self.session()
        return self.session

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._target = self._concrete_session()
        self._owns_transaction = not self._target.in_transaction()
        event.listen(self._target, "before_flush", self._block_flush)
        self._guard_installed = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owns_transaction:
                self._target.rollback()
        finally:
            if self._guard_installed:
                with suppress(InvalidRequestError):
                    event.remove(self._target, "before_flush", self._block_flush)
                self._guard_installed = False

    @staticmethod
    def _block_flush(session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked.")

    def commit(self) -> None:
        """
        :raises RuntimeError: always, to prevent accidental writes.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()
