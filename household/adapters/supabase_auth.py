"""Supabase auth adapter — implements AuthPort over the GoTrue API."""

from __future__ import annotations

import logging

from household.integrations.supabase_client import SupabaseClient, SupabaseRequestError
from household.ports.auth_port import AuthError, AuthSession, AuthUser

logger = logging.getLogger(__name__)


def _to_user(data: dict) -> AuthUser:
    return AuthUser(
        id=data["id"],
        email=data.get("email") or "",
        metadata=data.get("user_metadata") or {},
    )


def _to_session(data: dict | None) -> AuthSession | None:
    if not data or not data.get("access_token"):
        return None
    return AuthSession(access_token=data["access_token"], user=_to_user(data["user"]))


class SupabaseAuth:
    """Supabase (GoTrue) implementation of AuthPort.

    Signing in stores the session token on the shared client so that
    subsequent row queries run as that user.
    """

    def __init__(self, client: SupabaseClient) -> None:
        self._client = client

    async def sign_in(self, email: str, password: str) -> AuthSession:
        try:
            data = await self._client.request(
                "POST",
                "/auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
            )
        except SupabaseRequestError as exc:
            raise AuthError(str(exc)) from exc

        session = _to_session(data)
        if session is None:
            raise AuthError("No active session. Check your credentials or email confirmation.")
        self._client.access_token = session.access_token
        logger.info("Signed in %s", email)
        return session

    async def sign_up(self, email: str, password: str, metadata: dict) -> AuthSession | None:
        try:
            data = await self._client.request(
                "POST",
                "/auth/v1/signup",
                json={"email": email, "password": password, "data": metadata},
            )
        except SupabaseRequestError as exc:
            raise AuthError(str(exc)) from exc

        session = _to_session(data)
        if session is None:
            logger.info("Sign-up for %s awaits email confirmation", email)
            return None
        self._client.access_token = session.access_token
        return session

    async def sign_out(self, access_token: str) -> None:
        try:
            await self._client.request("POST", "/auth/v1/logout", access_token=access_token)
        except SupabaseRequestError as exc:
            logger.warning("Sign-out failed: %s", exc)
        finally:
            self._client.access_token = None

    async def get_user(self, access_token: str) -> AuthUser | None:
        if not access_token:
            return None
        try:
            data = await self._client.request("GET", "/auth/v1/user", access_token=access_token)
        except SupabaseRequestError as exc:
            if exc.status_code in (401, 403):
                return None
            raise AuthError(str(exc)) from exc
        return _to_user(data) if data else None

    async def reset_password_for_email(self, email: str, redirect_to: str) -> None:
        try:
            await self._client.request(
                "POST",
                "/auth/v1/recover",
                params={"redirect_to": redirect_to},
                json={"email": email},
            )
        except SupabaseRequestError as exc:
            raise AuthError(str(exc)) from exc
        logger.info("Password reset requested for %s", email)

    async def update_password(self, access_token: str, new_password: str) -> None:
        try:
            await self._client.request(
                "PUT",
                "/auth/v1/user",
                json={"password": new_password},
                access_token=access_token,
            )
        except SupabaseRequestError as exc:
            raise AuthError(str(exc)) from exc
