"""Store port — abstract interface for the row store.

Repositories depend on this protocol, never on a specific backend.
Rows are plain dicts keyed by snake_case column names.
"""

from __future__ import annotations

from typing import Any, Protocol

TABLES = (
    "profiles",
    "categories",
    "tasks",
    "groceries",
    "groceries_archives",
    "groceries_archive_items",
    "completion_events",
)


class StoreError(Exception):
    """Raised when any store backend operation fails."""


class NotFoundError(StoreError):
    """Raised when a row that must exist is missing."""


class StorePort(Protocol):
    """Abstract row store used by the repositories."""

    async def select(
        self,
        table: str,
        eq: dict[str, Any] | None = None,
        gte: dict[str, Any] | None = None,
        in_: dict[str, list[Any]] | None = None,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[dict]: ...

    async def insert(self, table: str, rows: list[dict]) -> list[dict]: ...

    async def update(
        self, table: str, values: dict[str, Any], eq: dict[str, Any],
    ) -> list[dict]: ...

    async def upsert(self, table: str, row: dict) -> dict: ...

    async def delete(self, table: str, eq: dict[str, Any]) -> None: ...
