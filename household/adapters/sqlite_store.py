"""SQLite store adapter — implements StorePort on a local database file.

Mirrors the hosted tables column for column so the repositories cannot
tell the backends apart. Uses the sqlite3 module (sync) wrapped with
asyncio.to_thread for async compatibility.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from household.ports.store_port import StoreError

logger = logging.getLogger(__name__)

_SCHEMA: dict[str, str] = {
    "profiles": """
        CREATE TABLE IF NOT EXISTS profiles (
            id            TEXT PRIMARY KEY,
            household_id  TEXT NOT NULL,
            name          TEXT NOT NULL,
            email         TEXT NOT NULL,
            avatar        TEXT NOT NULL DEFAULT '',
            color         TEXT NOT NULL DEFAULT '#4A90E2',
            role          TEXT
        )
    """,
    "categories": """
        CREATE TABLE IF NOT EXISTS categories (
            id            TEXT PRIMARY KEY,
            household_id  TEXT NOT NULL,
            name          TEXT NOT NULL,
            icon          TEXT NOT NULL DEFAULT '',
            color         TEXT NOT NULL DEFAULT ''
        )
    """,
    "tasks": """
        CREATE TABLE IF NOT EXISTS tasks (
            id            TEXT PRIMARY KEY,
            household_id  TEXT NOT NULL,
            title         TEXT NOT NULL,
            category_id   TEXT NOT NULL,
            completed_by  TEXT NOT NULL DEFAULT '[]',
            frequency     TEXT NOT NULL,
            rating        INTEGER,
            created_at    TEXT NOT NULL
        )
    """,
    "groceries": """
        CREATE TABLE IF NOT EXISTS groceries (
            id            TEXT PRIMARY KEY,
            household_id  TEXT NOT NULL,
            name          TEXT NOT NULL,
            quantity      INTEGER NOT NULL DEFAULT 1,
            note          TEXT,
            completed     INTEGER NOT NULL DEFAULT 0,
            created_at    TEXT NOT NULL
        )
    """,
    "groceries_archives": """
        CREATE TABLE IF NOT EXISTS groceries_archives (
            id            TEXT PRIMARY KEY,
            household_id  TEXT NOT NULL,
            created_at    TEXT NOT NULL
        )
    """,
    "groceries_archive_items": """
        CREATE TABLE IF NOT EXISTS groceries_archive_items (
            id            TEXT PRIMARY KEY,
            archive_id    TEXT NOT NULL,
            name          TEXT NOT NULL,
            quantity      INTEGER NOT NULL DEFAULT 1,
            note          TEXT
        )
    """,
    "completion_events": """
        CREATE TABLE IF NOT EXISTS completion_events (
            id            TEXT PRIMARY KEY,
            household_id  TEXT NOT NULL,
            task_id       TEXT NOT NULL,
            user_id       TEXT NOT NULL,
            completed     INTEGER NOT NULL,
            occurred_at   TEXT NOT NULL
        )
    """,
}

_JSON_COLUMNS = {("tasks", "completed_by")}
_BOOL_COLUMNS = {("groceries", "completed"), ("completion_events", "completed")}


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteStore:
    """SQLite implementation of StorePort."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from household.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._columns: dict[str, list[str]] = {}
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create all tables if they don't exist and cache their columns."""
        with self._connect() as conn:
            for ddl in _SCHEMA.values():
                conn.execute(ddl)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_events_household_time "
                "ON completion_events (household_id, occurred_at)"
            )
            for table in _SCHEMA:
                self._columns[table] = [
                    row[1] for row in conn.execute(f"PRAGMA table_info({table})").fetchall()
                ]
        logger.debug("Household tables initialized at %s", self._db_path)

    # -- encoding ----------------------------------------------------------

    def _check(self, table: str, columns: Any) -> None:
        if table not in self._columns:
            raise StoreError(f"Unknown table: {table!r}")
        unknown = set(columns) - set(self._columns[table])
        if unknown:
            raise StoreError(f"Unknown columns for {table}: {sorted(unknown)}")

    @staticmethod
    def _encode(table: str, column: str, value: Any) -> Any:
        if (table, column) in _JSON_COLUMNS:
            return json.dumps(list(value or []))
        if (table, column) in _BOOL_COLUMNS and value is not None:
            return int(bool(value))
        return value

    @staticmethod
    def _decode(table: str, row: sqlite3.Row) -> dict:
        data = dict(row)
        for column in list(data):
            if (table, column) in _JSON_COLUMNS:
                data[column] = json.loads(data[column] or "[]")
            elif (table, column) in _BOOL_COLUMNS:
                data[column] = bool(data[column])
        return data

    def _where(
        self,
        table: str,
        eq: dict[str, Any] | None,
        gte: dict[str, Any] | None = None,
        in_: dict[str, list[Any]] | None = None,
    ) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        for column, value in (eq or {}).items():
            self._check(table, [column])
            if value is None:
                clauses.append(f"{column} IS NULL")
            else:
                clauses.append(f"{column} = ?")
                params.append(self._encode(table, column, value))
        for column, value in (gte or {}).items():
            self._check(table, [column])
            clauses.append(f"{column} >= ?")
            params.append(value)
        for column, values in (in_ or {}).items():
            self._check(table, [column])
            placeholders = ", ".join("?" for _ in values)
            clauses.append(f"{column} IN ({placeholders})")
            params.extend(values)
        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params

    # -- sync operations ---------------------------------------------------

    def _select_sync(
        self,
        table: str,
        eq: dict[str, Any] | None,
        gte: dict[str, Any] | None,
        in_: dict[str, list[Any]] | None,
        order: str | None,
        descending: bool,
        limit: int | None,
    ) -> list[dict]:
        if in_ and any(len(values) == 0 for values in in_.values()):
            return []
        where, params = self._where(table, eq, gte, in_)
        query = f"SELECT * FROM {table}{where}"
        if order is not None:
            self._check(table, [order])
            direction = "DESC" if descending else "ASC"
            query += f" ORDER BY {order} {direction}, rowid {direction}"
        if limit is not None:
            query += " LIMIT ?"
            params.append(int(limit))
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._decode(table, r) for r in rows]

    def _prepare_row(self, table: str, row: dict) -> dict:
        prepared = dict(row)
        prepared.setdefault("id", str(uuid.uuid4()))
        if "created_at" in self._columns[table]:
            prepared.setdefault("created_at", _utcnow_iso())
        if table == "tasks":
            prepared.setdefault("completed_by", [])
        self._check(table, prepared)
        return prepared

    def _insert_sync(self, table: str, rows: list[dict]) -> list[dict]:
        self._check(table, [])
        prepared = [self._prepare_row(table, row) for row in rows]
        with self._connect() as conn:
            for row in prepared:
                columns = list(row)
                conn.execute(
                    f"INSERT INTO {table} ({', '.join(columns)}) "
                    f"VALUES ({', '.join('?' for _ in columns)})",
                    [self._encode(table, c, row[c]) for c in columns],
                )
        ids = [row["id"] for row in prepared]
        inserted = {r["id"]: r for r in self._select_sync(
            table, None, None, {"id": ids}, None, False, None,
        )}
        return [inserted[i] for i in ids]

    def _update_sync(self, table: str, values: dict[str, Any], eq: dict[str, Any]) -> list[dict]:
        self._check(table, values)
        matched = self._select_sync(table, eq, None, None, None, False, None)
        if not matched or not values:
            return matched
        ids = [row["id"] for row in matched]
        assignments = ", ".join(f"{column} = ?" for column in values)
        params = [self._encode(table, c, v) for c, v in values.items()]
        placeholders = ", ".join("?" for _ in ids)
        with self._connect() as conn:
            conn.execute(
                f"UPDATE {table} SET {assignments} WHERE id IN ({placeholders})",
                params + ids,
            )
        return self._select_sync(table, None, None, {"id": ids}, None, False, None)

    def _upsert_sync(self, table: str, row: dict) -> dict:
        prepared = self._prepare_row(table, row)
        columns = list(prepared)
        updates = ", ".join(f"{c} = excluded.{c}" for c in columns if c != "id")
        with self._connect() as conn:
            conn.execute(
                f"INSERT INTO {table} ({', '.join(columns)}) "
                f"VALUES ({', '.join('?' for _ in columns)}) "
                f"ON CONFLICT(id) DO UPDATE SET {updates}",
                [self._encode(table, c, prepared[c]) for c in columns],
            )
        return self._select_sync(table, {"id": prepared["id"]}, None, None, None, False, None)[0]

    def _delete_sync(self, table: str, eq: dict[str, Any]) -> None:
        if not eq:
            raise StoreError("Refusing to delete without a filter")
        where, params = self._where(table, eq)
        with self._connect() as conn:
            cursor = conn.execute(f"DELETE FROM {table}{where}", params)
        logger.debug("Deleted %d row(s) from %s", cursor.rowcount, table)

    async def _run(self, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except sqlite3.Error as exc:
            raise StoreError(f"SQLite error: {exc}") from exc

    # -- StorePort ---------------------------------------------------------

    async def select(
        self,
        table: str,
        eq: dict[str, Any] | None = None,
        gte: dict[str, Any] | None = None,
        in_: dict[str, list[Any]] | None = None,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]:
        return await self._run(self._select_sync, table, eq, gte, in_, order, descending, limit)

    async def insert(self, table: str, rows: list[dict]) -> list[dict]:
        if not rows:
            return []
        return await self._run(self._insert_sync, table, rows)

    async def update(
        self, table: str, values: dict[str, Any], eq: dict[str, Any],
    ) -> list[dict]:
        return await self._run(self._update_sync, table, values, eq)

    async def upsert(self, table: str, row: dict) -> dict:
        return await self._run(self._upsert_sync, table, row)

    async def delete(self, table: str, eq: dict[str, Any]) -> None:
        await self._run(self._delete_sync, table, eq)
