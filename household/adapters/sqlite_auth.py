"""SQLite auth adapter — implements AuthPort with local accounts.

Used together with SQLiteStore for a self-contained household. Passwords
are salted PBKDF2 hashes; sessions are random bearer tokens that expire
after SESSION_DAYS. No mail server: a password reset logs the recovery
link instead of sending it.
"""

from __future__ import annotations

import asyncio
import hashlib
import hmac
import json
import logging
import secrets
import sqlite3
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

from household.ports.auth_port import AuthError, AuthSession, AuthUser

logger = logging.getLogger(__name__)

SESSION_DAYS = 7
_PBKDF2_ROUNDS = 200_000


def _hash_password(password: str, salt: str) -> str:
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), _PBKDF2_ROUNDS)
    return digest.hex()


class SQLiteAuth:
    """SQLite implementation of AuthPort."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from household.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS auth_users (
                    id             TEXT PRIMARY KEY,
                    email          TEXT NOT NULL UNIQUE,
                    password_hash  TEXT NOT NULL,
                    salt           TEXT NOT NULL,
                    metadata       TEXT NOT NULL DEFAULT '{}',
                    created_at     TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS auth_sessions (
                    token       TEXT PRIMARY KEY,
                    user_id     TEXT NOT NULL,
                    expires_at  TEXT NOT NULL
                )
            """)
        logger.debug("Auth tables initialized at %s", self._db_path)

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> AuthUser:
        return AuthUser(id=row["id"], email=row["email"], metadata=json.loads(row["metadata"]))

    def _new_session(self, conn: sqlite3.Connection, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        expires_at = datetime.now(timezone.utc) + timedelta(days=SESSION_DAYS)
        conn.execute(
            "INSERT INTO auth_sessions (token, user_id, expires_at) VALUES (?, ?, ?)",
            (token, user_id, expires_at.isoformat()),
        )
        return token

    # -- sync operations ---------------------------------------------------

    def _sign_in_sync(self, email: str, password: str) -> AuthSession:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM auth_users WHERE email = ?", (email.strip().lower(),),
            ).fetchone()
            if row is None or not hmac.compare_digest(
                row["password_hash"], _hash_password(password, row["salt"]),
            ):
                raise AuthError("Invalid login credentials")
            token = self._new_session(conn, row["id"])
        logger.info("Signed in %s", row["email"])
        return AuthSession(access_token=token, user=self._row_to_user(row))

    def _sign_up_sync(self, email: str, password: str, metadata: dict) -> AuthSession:
        if not password:
            raise AuthError("Password is required")
        normalized = email.strip().lower()
        user_id = str(uuid.uuid4())
        salt = secrets.token_hex(16)
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO auth_users (id, email, password_hash, salt, metadata, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        user_id, normalized, _hash_password(password, salt), salt,
                        json.dumps(metadata), datetime.now(timezone.utc).isoformat(),
                    ),
                )
                token = self._new_session(conn, user_id)
        except sqlite3.IntegrityError as exc:
            raise AuthError("User already registered") from exc
        logger.info("Account created for %s", normalized)
        return AuthSession(
            access_token=token,
            user=AuthUser(id=user_id, email=normalized, metadata=dict(metadata)),
        )

    def _get_user_sync(self, access_token: str) -> AuthUser | None:
        with self._connect() as conn:
            session = conn.execute(
                "SELECT * FROM auth_sessions WHERE token = ?", (access_token,),
            ).fetchone()
            if session is None:
                return None
            if datetime.fromisoformat(session["expires_at"]) < datetime.now(timezone.utc):
                conn.execute("DELETE FROM auth_sessions WHERE token = ?", (access_token,))
                return None
            row = conn.execute(
                "SELECT * FROM auth_users WHERE id = ?", (session["user_id"],),
            ).fetchone()
        return self._row_to_user(row) if row is not None else None

    def _sign_out_sync(self, access_token: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM auth_sessions WHERE token = ?", (access_token,))

    def _recover_sync(self, email: str, redirect_to: str) -> None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id FROM auth_users WHERE email = ?", (email.strip().lower(),),
            ).fetchone()
            if row is None:
                logger.info("Password reset requested for unknown email")
                return
            token = self._new_session(conn, row["id"])
        logger.info("Password recovery link: %s#access_token=%s&type=recovery", redirect_to, token)

    def _update_password_sync(self, access_token: str, new_password: str) -> None:
        user = self._get_user_sync(access_token)
        if user is None:
            raise AuthError("Auth session missing!")
        salt = secrets.token_hex(16)
        with self._connect() as conn:
            conn.execute(
                "UPDATE auth_users SET password_hash = ?, salt = ? WHERE id = ?",
                (_hash_password(new_password, salt), salt, user.id),
            )
        logger.info("Password updated for %s", user.email)

    # -- AuthPort ----------------------------------------------------------

    async def sign_in(self, email: str, password: str) -> AuthSession:
        return await asyncio.to_thread(self._sign_in_sync, email, password)

    async def sign_up(self, email: str, password: str, metadata: dict) -> AuthSession | None:
        return await asyncio.to_thread(self._sign_up_sync, email, password, metadata)

    async def sign_out(self, access_token: str) -> None:
        await asyncio.to_thread(self._sign_out_sync, access_token)

    async def get_user(self, access_token: str) -> AuthUser | None:
        if not access_token:
            return None
        return await asyncio.to_thread(self._get_user_sync, access_token)

    async def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        await asyncio.to_thread(self._recover_sync, email, redirect_to)

    async def update_password(self, access_token: str, new_password: str) -> None:
        await asyncio.to_thread(self._update_password_sync, access_token, new_password)
