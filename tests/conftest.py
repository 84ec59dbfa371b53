"""
Pytest configuration and fixtures.
"""

from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from tests.fakes import FakeSettingsProvider
from tests.test_constants import TEST_SECRET_KEY

# Force an in-memory SQLite DB when pytest runs; don't inherit from .env
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["KV_BACKEND"] = "memory"
os.environ.pop("SETTINGS_CACHE_TTL", None)
os.environ.setdefault("SECRET_KEY", TEST_SECRET_KEY)


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client."""
    from church_directory.main import app

    return TestClient(app)


@pytest.fixture(autouse=True)
def _reset_process_state() -> None:
    """Drop the process-wide KV store and cached config between tests."""
    from church_directory.config import get_settings
    from church_directory.services.kv_store import reset_kv_store

    reset_kv_store()
    get_settings.cache_clear()
    yield
    reset_kv_store()
    get_settings.cache_clear()


@pytest.fixture
def session_factory(tmp_path) -> sessionmaker[Session]:
    """Session factory bound to a fresh SQLite file database with all tables created."""
    from church_directory.db.session import Base
    from church_directory import models  # noqa: F401

    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)
    try:
        yield factory
    finally:
        engine.dispose()


@pytest.fixture
def db(session_factory: sessionmaker[Session]) -> Session:
    """Database session on the per-test database."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client_with_db(db: Session) -> TestClient:
    """TestClient with get_db overridden to use the test db session."""
    from church_directory.db.session import get_db
    from church_directory.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    c = TestClient(app)
    yield c
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def fake_settings() -> FakeSettingsProvider:
    return FakeSettingsProvider(
        {
            "site_title": "Acme Churches",
            "tagline": "Every church in Acme County",
            "site_domain": "acme.example.org",
            "logo_url": "https://x/logo.png",
        }
    )
