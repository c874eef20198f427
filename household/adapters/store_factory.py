"""Backend factory — creates the store and auth adapters based on config."""

from __future__ import annotations

from household.config import settings
from household.ports.auth_port import AuthPort
from household.ports.store_port import StorePort


def create_backend() -> tuple[StorePort, AuthPort]:
    """Return the (store, auth) pair matching the STORE_BACKEND setting.

    Both adapters of a pair share one connection target: the same Supabase
    client (and therefore session token) or the same SQLite file.
    """
    backend = settings.STORE_BACKEND.lower()

    if backend == "supabase":
        from household.adapters.supabase_auth import SupabaseAuth
        from household.adapters.supabase_store import SupabaseStore
        from household.integrations.supabase_client import SupabaseClient

        client = SupabaseClient(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
        return SupabaseStore(client), SupabaseAuth(client)

    if backend == "sqlite":
        from household.adapters.sqlite_auth import SQLiteAuth
        from household.adapters.sqlite_store import SQLiteStore

        return SQLiteStore(settings.DATABASE_PATH), SQLiteAuth(settings.DATABASE_PATH)

    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")
