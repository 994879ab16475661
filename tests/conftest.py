"""Shared fixtures: a fresh SQLite database per test and an HTTP client."""

import pytest
from fastapi.testclient import TestClient

from library_api.app.core.config import settings
from library_api.app.core.db import init_db
from library_api.app.main import create_app


@pytest.fixture(autouse=True)
def database(tmp_path, monkeypatch):
    """Point the application at a per-test database file and migrate it."""
    db_file = tmp_path / "library_test.db"
    monkeypatch.setattr(settings, "database_url", str(db_file))
    init_db()
    yield db_file


@pytest.fixture
def client():
    # Entering the context runs the lifespan handler (migrations).
    with TestClient(create_app()) as test_client:
        yield test_client
