"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from supersuper.config import Settings, get_settings
from supersuper.database import Base, get_db
from supersuper.main import app
from supersuper.services.kv_store import InMemoryKeyValueStore
from supersuper.services.pantry_storage import PantryStore

TEST_STORAGE_KEY = "test_pantry"

# Use test database - DATABASE_URL's server when provided, SQLite locally
if os.getenv("TEST_DATABASE_URL"):
    SQLALCHEMY_DATABASE_URL = os.getenv("TEST_DATABASE_URL")
else:
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    from supersuper import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def kv_store():
    """In-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def store(kv_store):
    """Pantry store over the in-memory key-value store."""
    return PantryStore(kv_store, storage_key=TEST_STORAGE_KEY)


@pytest.fixture
def test_settings():
    """Settings used by the API under test."""
    return Settings(
        database_url=SQLALCHEMY_DATABASE_URL,
        pantry_storage_key=TEST_STORAGE_KEY,
        category_classification_enabled=False,
        semantic_search_enabled=False,
    )


@pytest.fixture
def client(db, test_settings):
    """Create a test client with database and settings overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    app.state.semantic_search = None


@pytest.fixture
def session_factory():
    """Session factory bound to the test database, for code opening its own sessions."""
    return TestingSessionLocal
