"""Shared pytest fixtures for the Actions API."""

from __future__ import annotations

import sys
from pathlib import Path

import mongomock
import pytest

# Ensure the application package is importable during tests.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from clickcrate_actions import database  # noqa: E402
from clickcrate_actions.main import create_app  # noqa: E402
from clickcrate_actions.storage import nft_metadata, pending_products  # noqa: E402


@pytest.fixture(autouse=True)
def mongo_db(monkeypatch: pytest.MonkeyPatch):
    """Provide an isolated in-memory MongoDB database for each test."""
    test_db_name = "test_clickcrate_actions"
    monkeypatch.setenv("ENABLE_MONGODB", "true")
    monkeypatch.setenv("MONGODB_DATABASE", test_db_name)

    client = mongomock.MongoClient()
    db = client[test_db_name]

    monkeypatch.setattr(database, "get_mongo_client", lambda: client)
    monkeypatch.setattr(database, "get_database", lambda: db)

    yield db

    client.drop_database(test_db_name)


@pytest.fixture(autouse=True)
def clear_memory_stores():
    """Start every test with empty in-memory stores."""
    pending_products.clear()
    nft_metadata.clear()
    yield
    pending_products.clear()
    nft_metadata.clear()


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch):
    """Flask test client for a freshly configured app."""
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://actions.test")
    app = create_app()
    app.config["TESTING"] = True
    with app.test_client() as test_client:
        yield test_client
