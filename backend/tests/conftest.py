"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside an outer transaction on a single in-memory SQLite
connection. Sessions join it through SAVEPOINTs, so units of work may commit
or roll back freely while nothing leaks between cases.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from apihub.core.config import TestingConfig
from apihub.core.extensions import db as _db  # Flask-SQLAlchemy instance
from apihub.factory import create_app  # application factory under test
from apihub.services._shared.ports.token_provider import StubTokenProvider
from apihub.services.tokens.service import TokenService


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Rate limiting and Redis are off; tests opt in where needed.
    - Ships a fixed signing secret so the startup checks pass.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET_KEY = "test-secret-key-that-is-long-enough-for-hs256"
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing."""
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    os.environ.pop("REDIS_URL", None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


def _fix_pysqlite_transactions(engine) -> None:
    """Let SQLAlchemy own BEGIN so SAVEPOINTs work on pysqlite."""

    @event.listens_for(engine, "connect")
    def _connect(dbapi_connection, connection_record):  # pragma: no cover - driver hook
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn):  # pragma: no cover - driver hook
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        if _db.engine.url.get_backend_name() == "sqlite":
            _fix_pysqlite_transactions(_db.engine)
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a session joined to a per-test outer transaction.

    ``join_transaction_mode="create_savepoint"`` turns every ``commit()`` or
    ``rollback()`` issued by application code into a SAVEPOINT release or
    rollback; the outer transaction is rolled back after the test.
    """
    outer = connection.begin()
    factory = sessionmaker(
        bind=connection,
        join_transaction_mode="create_savepoint",
        expire_on_commit=False,
    )
    scoped = scoped_session(factory)

    # Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        outer.rollback()


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
    SQLAlchemySession.set(None)


# -- HTTP ----------------------------------------------------------------------
@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def user():
    from tests.factories.user import UserFactory

    return UserFactory(password="secret123")


@pytest.fixture()
def token(user):
    """An active ledger token for ``user``, minted through the real provider."""
    from tests.factories.token import TokenFactory

    return TokenFactory(user=user).token


@pytest.fixture()
def auth_header(token):
    return {"Authorization": f"Bearer {token}"}


# -- Services ------------------------------------------------------------------
@pytest.fixture()
def token_service():
    """TokenService wired to the deterministic stub provider."""
    return TokenService(token_provider=StubTokenProvider())
