"""Shared pytest fixtures for backend tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from afusocial.core.security import create_access_token
from afusocial.database import get_db
from afusocial.main import app
from afusocial.models import Base, User
from afusocial.schemas import UserUpsert
from afusocial.services import DatabaseStorage


@pytest.fixture()
def test_engine() -> Iterator[Engine]:
    """Provide an in-memory SQLite engine for isolated tests."""

    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def session_factory(test_engine) -> sessionmaker[Session]:
    """Return a session factory bound to the test engine."""

    return sessionmaker(bind=test_engine, future=True)


@pytest.fixture()
def db_session(session_factory) -> Iterator[Session]:
    """Yield a SQLAlchemy session for unit tests."""

    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def storage(db_session) -> DatabaseStorage:
    """Storage layer bound to the unit-test session."""

    return DatabaseStorage(db_session)


@pytest.fixture()
def make_user(storage) -> Callable[..., User]:
    """Factory creating users through the storage layer."""

    def _make_user(user_id: str, username: str | None = None, **fields) -> User:
        return storage.upsert_user(
            UserUpsert(id=user_id, username=username or user_id, **fields)
        )

    return _make_user


@pytest.fixture()
def client(session_factory) -> Iterator[TestClient]:
    """Yield a FastAPI TestClient with the database dependency overridden."""

    def override_get_db() -> Iterator[Session]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers() -> Callable[..., dict[str, str]]:
    """Build bearer headers for a user id plus optional profile claims."""

    def _auth_headers(user_id: str, **claims) -> dict[str, str]:
        token = create_access_token({"sub": user_id, **claims})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
