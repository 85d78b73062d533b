"""
Pytest fixtures: in-memory SQLite shared through a StaticPool and a
FastAPI TestClient wired to it via dependency overrides.
"""

import os

# Must be set before the app modules build their engine and settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SEED_REGISTRY", "false")
os.environ.setdefault("DEBUG", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db, init_db
from app.services.event_store import EventStore


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def store(db_session):
    return EventStore(db_session)


@pytest.fixture
def seeded_store(store):
    store.seed_registry()
    return store


@pytest.fixture
def client(session_factory):
    """TestClient without lifespan; every request gets a fresh test session"""
    from main import app

    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded_client(client, session_factory):
    db = session_factory()
    try:
        EventStore(db).seed_registry()
    finally:
        db.close()
    return client
