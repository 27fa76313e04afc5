"""
Unit tests for the SQLAlchemy units of work, using factories.
"""

from __future__ import annotations

import pytest
from filevault.models import User
from filevault.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork
from sqlalchemy.orm import scoped_session
from tests.factories.user import UserFactory


class TestSQLAlchemyUnitOfWorkWriter:
    def test_writer_uow_commits_on_success(self, session, session_factory):
        """
        GIVEN a writer UoW
        WHEN we add a user inside the context and leave without exception
        THEN the row is visible afterwards.
        """
        initial = session.query(User).count()

        with SQLAlchemyUnitOfWork(session_factory) as uow:
            uow.users.add(UserFactory.build())

        assert session.query(User).count() == initial + 1

    def test_writer_uow_rolls_back_on_exception(self, session, session_factory):
        """
        GIVEN a writer UoW
        WHEN an exception is raised inside the context
        THEN no rows are persisted.
        """
        session.commit()
        initial = session.query(User).count()

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork(session_factory) as uow:
            uow.users.add(UserFactory.build())
            raise RuntimeError("boom")

        assert session.query(User).count() == initial

    def test_writer_uow_calls_session_factory_per_unit(self, session):
        calls = []

        def factory():
            calls.append(1)
            return session

        with SQLAlchemyUnitOfWork(factory):
            pass
        with SQLAlchemyUnitOfWork(factory):
            pass

        assert len(calls) == 2


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, session_factory):
        with SQLAlchemyReadOnlyUnitOfWork(session_factory) as uow, pytest.raises(
            RuntimeError, match="ORM flush blocked"
        ):
            uow.session.add(UserFactory.build())
            uow.session.flush()

    def test_allows_reads(self, session, session_factory):
        UserFactory()
        session.commit()

        with SQLAlchemyReadOnlyUnitOfWork(session_factory) as uow:
            assert uow.session.query(User).count() >= 1

    def test_disallows_commit(self, session_factory):
        with SQLAlchemyReadOnlyUnitOfWork(session_factory) as uow, pytest.raises(
            RuntimeError, match="does not allow commit"
        ):
            uow.commit()

    def test_guard_is_removed_on_exit(self, session, session_factory):
        with SQLAlchemyReadOnlyUnitOfWork(session_factory):
            pass

        # Writes after the read-only scope are allowed again.
        UserFactory()
        session.flush()

    def test_attaches_to_running_transaction(self, session, session_factory):
        """A read-only scope inside an open transaction leaves it untouched."""
        user = UserFactory()  # flushed, not committed

        with SQLAlchemyReadOnlyUnitOfWork(session_factory) as uow:
            assert uow.users.exists_by_id(user.id)

        assert session.get(User, user.id) is not None

    def test_works_on_scoped_session(self, session):
        """The Flask-managed ``db.session`` is a scoped_session proxy."""
        assert isinstance(session, scoped_session)
        UserFactory(id="a@b.com")
        session.commit()

        with SQLAlchemyReadOnlyUnitOfWork(lambda: session) as uow:
            assert uow.users.exists_by_id("a@b.com")

        assert not session().in_transaction()

    def test_guard_on_scoped_session_is_scoped_to_the_unit(self, session):
        with SQLAlchemyReadOnlyUnitOfWork(lambda: session) as uow, pytest.raises(
            RuntimeError, match="ORM flush blocked"
        ):
            uow.session.add(UserFactory.build())
            uow.session.flush()

        session.rollback()
        UserFactory()
        session.flush()
