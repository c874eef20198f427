"""Auth port — abstract interface for the identity provider.

Services depend on this protocol, never on a specific provider.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


class AuthError(Exception):
    """Raised for bad credentials, unconfirmed accounts or missing sessions."""


@dataclass
class AuthUser:
    id: str
    email: str
    metadata: dict = field(default_factory=dict)


@dataclass
class AuthSession:
    access_token: str
    user: AuthUser


class AuthPort(Protocol):
    """Abstract identity provider used by AuthService and the HTTP API."""

    async def sign_in(self, email: str, password: str) -> AuthSession: ...

    async def sign_up(
        self, email: str, password: str, metadata: dict,
    ) -> AuthSession | None: ...

    async def sign_out(self, access_token: str) -> None: ...

    async def get_user(self, access_token: str) -> AuthUser | None: ...

    async def reset_password_for_email(self, email: str, redirect_to: str) -> None: ...

    async def update_password(self, access_token: str, new_password: str) -> None: ...
