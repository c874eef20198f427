"""Tests for household.config — settings loading and validation."""

import pytest

from household.config import Settings, _load_settings


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.STORE_BACKEND == "sqlite"
        assert s.COMPLETION_HISTORY_DAYS == 120
        assert s.API_PREFIX == "/api"

    def test_parsing(self):
        s = Settings(
            STORE_BACKEND=" SQLite ", API_PORT="9000",
            COMPLETION_HISTORY_DAYS="7", ADMIN_EMAIL=" Admin@Example.COM ",
        )
        assert s.STORE_BACKEND == "sqlite"
        assert s.API_PORT == 9000
        assert s.COMPLETION_HISTORY_DAYS == 7
        assert s.ADMIN_EMAIL == "admin@example.com"


class TestLoadSettings:
    def test_supabase_requires_keys(self, monkeypatch):
        monkeypatch.setenv("STORE_BACKEND", "supabase")
        monkeypatch.setenv("SUPABASE_URL", "")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "")
        with pytest.raises(SystemExit):
            _load_settings()

    def test_supabase_url_trailing_slash_stripped(self, monkeypatch):
        monkeypatch.setenv("STORE_BACKEND", "supabase")
        monkeypatch.setenv("SUPABASE_URL", "https://demo.supabase.co/")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")
        assert _load_settings().SUPABASE_URL == "https://demo.supabase.co"

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("STORE_BACKEND", "sqlite")
        monkeypatch.setenv("HOUSEHOLD_ID", "flat-7")
        monkeypatch.setenv("TIMEZONE", "Europe/Berlin")
        s = _load_settings()
        assert s.HOUSEHOLD_ID == "flat-7"
        assert s.TIMEZONE == "Europe/Berlin"
