"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases. Services built here
receive a ``session_factory`` returning that same session, which means a unit
of work's ``commit()`` only releases a SAVEPOINT and the outer transaction is
still rolled back at teardown.
"""

from __future__ import annotations

import os

import pytest
from filevault.core.config import TestingConfig
from filevault.core.extensions import db as _db  # Flask-SQLAlchemy instance
from filevault.factory import create_app  # application factory under test
from filevault.infra.jwt import PyJWTTokenProvider
from filevault.services._shared.ports.blob_store import InMemoryBlobStore
from filevault.services.auth import AuthService
from filevault.services.files import FileService
from filevault.services.gate import AuthGate
from filevault.services.tokens import TokenService
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied, blobs stored
        in a throwaway directory and logging noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)

    class TestConfig(TestingConfig):
        FILE_UPLOAD_PATH = str(tmp_path_factory.mktemp("uploads"))
        LOG_LEVEL = "WARNING"

    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Notes
    -----
    The fixture mirrors the SQLAlchemy 2.0 pattern for transactional tests: it
    begins a top-level transaction, starts a SAVEPOINT per test, and reinstalls
    the SAVEPOINT whenever SQLAlchemy ends one.
    """
    # 1) Top-level transaction
    top_trans = connection.begin()

    # 2) Scoped session bound to the connection
    SessionFactory = sessionmaker(bind=connection, future=True)
    scoped = scoped_session(SessionFactory)

    # 3) SAVEPOINT per test
    nested = connection.begin_nested()

    # 4) Re-create SAVEPOINT when the previous nested transaction ends
    @event.listens_for(scoped(), "after_transaction_end")
    def _restart_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            nonlocal nested
            nested = connection.begin_nested()

    # 5) Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield


# -- Service wiring ------------------------------------------------------------
@pytest.fixture()
def session_factory(session):
    """Zero-arg callable handing services the transactional session."""
    return lambda: session


@pytest.fixture()
def token_provider() -> PyJWTTokenProvider:
    return PyJWTTokenProvider(
        access_secret=TestingConfig.JWT_ACCESS_SECRET,
        refresh_secret=TestingConfig.JWT_REFRESH_SECRET,
    )


@pytest.fixture()
def token_service(token_provider, session_factory) -> TokenService:
    return TokenService(token_provider=token_provider, session_factory=session_factory)


@pytest.fixture()
def gate(token_service) -> AuthGate:
    return AuthGate(tokens=token_service)


@pytest.fixture()
def auth_service(token_service, session_factory) -> AuthService:
    return AuthService(tokens=token_service, session_factory=session_factory)


@pytest.fixture()
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture()
def file_service(blob_store, session_factory) -> FileService:
    return FileService(blob_store=blob_store, session_factory=session_factory)


@pytest.fixture()
def client(app, session):
    """Flask test client whose requests share the transactional session."""
    return app.test_client()
