"""Supabase HTTP client — shared by the hosted store and auth adapters.

Holds the project URL, the public API key and the current session token,
so that row queries run as the signed-in user once auth succeeds.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

_TIMEOUT_SECONDS = 10


class SupabaseRequestError(Exception):
    """Non-2xx response or transport failure talking to Supabase."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(data, dict):
        for key in ("message", "error_description", "msg", "error"):
            if data.get(key):
                return str(data[key])
    return f"HTTP {resp.status_code}"


class SupabaseClient:
    """Thin async wrapper over the Supabase REST and auth endpoints."""

    def __init__(
        self,
        url: str | None = None,
        api_key: str | None = None,
        timeout: float = _TIMEOUT_SECONDS,
    ) -> None:
        if url is None or api_key is None:
            from household.config import settings
            url = url if url is not None else settings.SUPABASE_URL
            api_key = api_key if api_key is not None else settings.SUPABASE_ANON_KEY

        self.url = url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.access_token: str | None = None

    def headers(self, access_token: str | None = None) -> dict[str, str]:
        token = access_token or self.access_token or self.api_key
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
        access_token: str | None = None,
    ) -> Any:
        """Send a request and return the decoded JSON body (None if empty)."""
        merged = self.headers(access_token)
        if headers:
            merged.update(headers)
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.request(
                    method, f"{self.url}{path}", params=params, json=json, headers=merged,
                )
        except httpx.HTTPError as exc:
            logger.error("Supabase %s %s failed: %s", method, path, exc)
            raise SupabaseRequestError(str(exc)) from exc

        if resp.status_code >= 400:
            message = _error_message(resp)
            logger.warning(
                "Supabase %s %s returned %d: %s", method, path, resp.status_code, message,
            )
            raise SupabaseRequestError(message, resp.status_code)

        if not resp.content:
            return None
        return resp.json()
