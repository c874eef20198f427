"""Supabase store adapter — implements StorePort over the PostgREST API.

All Supabase-specific query syntax lives here. Repositories never import
this directly; they depend on the StorePort protocol.
"""

from __future__ import annotations

import logging
from typing import Any

from household.integrations.supabase_client import SupabaseClient, SupabaseRequestError
from household.ports.store_port import StoreError

logger = logging.getLogger(__name__)

_RETURN_ROWS = {"Prefer": "return=representation"}


def _literal(value: Any) -> str:
    """Format a value for a PostgREST filter."""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    return str(value)


def _quoted(value: Any) -> str:
    text = _literal(value).replace('"', '\\"')
    return f'"{text}"'


def build_filters(
    eq: dict[str, Any] | None = None,
    gte: dict[str, Any] | None = None,
    in_: dict[str, list[Any]] | None = None,
) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []
    for column, value in (eq or {}).items():
        op = "is" if value is None else "eq"
        params.append((column, f"{op}.{_literal(value)}"))
    for column, value in (gte or {}).items():
        params.append((column, f"gte.{_literal(value)}"))
    for column, values in (in_ or {}).items():
        params.append((column, f"in.({','.join(_quoted(v) for v in values)})"))
    return params


class SupabaseStore:
    """Supabase (PostgREST) implementation of StorePort."""

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def _call(self, method: str, table: str, **kwargs) -> Any:
        try:
            return await self._client.request(method, f"/rest/v1/{table}", **kwargs)
        except SupabaseRequestError as exc:
            raise StoreError(f"{table}: {exc}") from exc

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
        if in_ and any(len(values) == 0 for values in in_.values()):
            return []
        params = [("select", "*")] + build_filters(eq, gte, in_)
        if order is not None:
            params.append(("order", f"{order}.{'desc' if descending else 'asc'}"))
        if limit is not None:
            params.append(("limit", str(int(limit))))
        return await self._call("GET", table, params=params) or []

    async def insert(self, table: str, rows: list[dict]) -> list[dict]:
        if not rows:
            return []
        data = await self._call("POST", table, json=rows, headers=_RETURN_ROWS)
        return data or []

    async def update(
        self, table: str, values: dict[str, Any], eq: dict[str, Any],
    ) -> list[dict]:
        data = await self._call(
            "PATCH", table, params=build_filters(eq), json=values, headers=_RETURN_ROWS,
        )
        return data or []

    async def upsert(self, table: str, row: dict) -> dict:
        data = await self._call(
            "POST",
            table,
            json=row,
            headers={"Prefer": "return=representation,resolution=merge-duplicates"},
        )
        if not data:
            raise StoreError(f"{table}: upsert returned no row")
        return data[0]

    async def delete(self, table: str, eq: dict[str, Any]) -> None:
        if not eq:
            raise StoreError("Refusing to delete without a filter")
        await self._call("DELETE", table, params=build_filters(eq))
        logger.debug("Deleted from %s where %s", table, eq)
