"""Shared fixtures: a fresh file-backed SQLite database per test."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from ipam.database import create_db_engine, create_tables, get_db
from ipam.main import app
from ipam.services.allocation_engine import AllocationEngine
from ipam.services.allocation_store import AllocationStore


@pytest.fixture
def db_engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'ipam.db'}", busy_timeout=30.0)
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def store(db):
    return AllocationStore(db)


@pytest.fixture
def allocator(store):
    return AllocationEngine(store)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # No context manager: the lifespan would create tables in the configured database
    yield TestClient(app)
    app.dependency_overrides.clear()
