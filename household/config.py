"""
Household Chores — Centralized configuration.

Loads all settings from .env and validates required keys.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from household/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Storage backend: "supabase" | "sqlite"
    STORE_BACKEND: str = "sqlite"

    # Supabase (only needed when STORE_BACKEND=supabase)
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""

    # SQLite (only needed when STORE_BACKEND=sqlite)
    DATABASE_PATH: str = "data/household.db"

    # Household tenancy
    HOUSEHOLD_ID: str = "default"
    ADMIN_EMAIL: str = ""

    # How far back the completion log is loaded into memory
    COMPLETION_HISTORY_DAYS: int = 120

    # Device-local cache of the last accounts that signed in
    RECENT_USERS_PATH: str = "data/recent_users.json"

    # HTTP API
    API_PREFIX: str = "/api"
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8000

    # Local time used for day / week / month windows
    TIMEZONE: str = "Europe/Sarajevo"

    LOG_LEVEL: str = "INFO"

    @field_validator("COMPLETION_HISTORY_DAYS", "API_PORT", mode="before")
    @classmethod
    def parse_int(cls, v: str | int) -> int:
        return int(v)

    @field_validator("STORE_BACKEND", mode="before")
    @classmethod
    def parse_backend(cls, v: str) -> str:
        return (v or "sqlite").strip().lower()

    @field_validator("ADMIN_EMAIL", mode="before")
    @classmethod
    def parse_admin_email(cls, v: str) -> str:
        return (v or "").strip().lower()


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    backend = os.getenv("STORE_BACKEND", "sqlite").strip().lower()
    supabase_url = os.getenv("SUPABASE_URL", "")
    supabase_key = os.getenv("SUPABASE_ANON_KEY", "")

    if backend == "supabase":
        if not supabase_url or supabase_url.startswith("your-"):
            print("ERROR: SUPABASE_URL is missing or not set in .env", file=sys.stderr)
            sys.exit(1)
        if not supabase_key or supabase_key.startswith("your-"):
            print("ERROR: SUPABASE_ANON_KEY is missing or not set in .env", file=sys.stderr)
            sys.exit(1)

    return Settings(
        STORE_BACKEND=backend,
        SUPABASE_URL=supabase_url.rstrip("/"),
        SUPABASE_ANON_KEY=supabase_key,
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/household.db"),
        HOUSEHOLD_ID=os.getenv("HOUSEHOLD_ID", "default"),
        ADMIN_EMAIL=os.getenv("ADMIN_EMAIL", ""),
        COMPLETION_HISTORY_DAYS=os.getenv("COMPLETION_HISTORY_DAYS", "120"),
        RECENT_USERS_PATH=os.getenv("RECENT_USERS_PATH", "data/recent_users.json"),
        API_PREFIX=os.getenv("API_PREFIX", "/api"),
        API_HOST=os.getenv("API_HOST", "127.0.0.1"),
        API_PORT=os.getenv("API_PORT", "8000"),
        TIMEZONE=os.getenv("TIMEZONE", "Europe/Sarajevo"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


# Singleton — imported by all other modules as:
#   from household.config import settings
settings = _load_settings()
