"""Shared test fixtures and configuration.

Sets up environment variables so household.config loads a local SQLite
backend, and provides fixtures for a temp store, auth and service context.
"""

import os

# Patch env vars BEFORE any household imports
os.environ.setdefault("STORE_BACKEND", "sqlite")
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("HOUSEHOLD_ID", "test-household")
os.environ.setdefault("ADMIN_EMAIL", "admin@example.com")
os.environ.setdefault("TIMEZONE", "UTC")

import pytest


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_household.db")


@pytest.fixture
def store(tmp_db_path):
    """Return an SQLiteStore backed by a temp file."""
    from household.adapters.sqlite_store import SQLiteStore
    return SQLiteStore(db_path=tmp_db_path)


@pytest.fixture
def auth(tmp_db_path):
    """Return an SQLiteAuth sharing the temp file with the store."""
    from household.adapters.sqlite_auth import SQLiteAuth
    return SQLiteAuth(db_path=tmp_db_path)


@pytest.fixture
def services(store, auth):
    """Return a full AppServices context over the temp backend."""
    from household.services.app_services import create_app_services
    return create_app_services(
        store=store, auth=auth, household_id="h1", admin_email="admin@example.com",
    )
