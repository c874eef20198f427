"""
Household Chores — Auth service.

Wraps the identity provider and keeps a profile row for every signed-in
account. The admin role is decided once, from the email, when the profile
is first written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from household.data.models import DEFAULT_COLOR, ROLE_ADMIN, ROLE_MEMBER, UserProfile
from household.ports.auth_port import AuthError
from household.ports.store_port import NotFoundError

if TYPE_CHECKING:
    from household.data.repositories import ProfilesRepository
    from household.ports.auth_port import AuthPort, AuthUser

logger = logging.getLogger(__name__)

RECOVERY_MARKER = "type=recovery"


@dataclass
class SessionInfo:
    user: UserProfile
    access_token: str


def is_recovery_redirect(url: str) -> bool:
    """True when a magic-link redirect carries the password-recovery marker."""
    return RECOVERY_MARKER in urlsplit(url).fragment


class AuthService:
    def __init__(
        self,
        auth: AuthPort,
        profiles_repo: ProfilesRepository,
        admin_email: str | None = None,
    ) -> None:
        if admin_email is None:
            from household.config import settings
            admin_email = settings.ADMIN_EMAIL

        self._auth = auth
        self._profiles = profiles_repo
        self._admin_email = admin_email.strip().lower()

    def resolve_role(self, email: str) -> str:
        if self._admin_email and email.strip().lower() == self._admin_email:
            return ROLE_ADMIN
        return ROLE_MEMBER

    async def _ensure_profile(self, user: AuthUser) -> UserProfile:
        """Return the user's profile, creating it from auth metadata if missing."""
        profile = await self._profiles.get_by_id(user.id)
        if profile is not None:
            return profile

        household_id = self._profiles.household_id
        metadata = user.metadata or {}
        other = await self._profiles.household_of(user.id)
        if other is None:
            other = metadata.get("household_id")
        if other and other != household_id:
            logger.warning("User %s belongs to household %s, not %s", user.id, other, household_id)
            raise AuthError("This account belongs to another household")

        name = metadata.get("name")
        avatar = metadata.get("avatar")
        color = metadata.get("color")
        await self._profiles.upsert(UserProfile(
            id=user.id,
            name=name if isinstance(name, str) else "User",
            email=user.email,
            avatar=avatar if isinstance(avatar, str) else "",
            color=color if isinstance(color, str) else DEFAULT_COLOR,
            role=self.resolve_role(user.email),
        ))
        return await self._get_profile_or_raise(user.id)

    async def _get_profile_or_raise(self, user_id: str) -> UserProfile:
        profile = await self._profiles.get_by_id(user_id)
        if profile is None:
            raise NotFoundError("Failed to fetch profile: Profile row not found")
        return profile

    async def login(self, email: str, password: str) -> SessionInfo:
        session = await self._auth.sign_in(email, password)
        profile = await self._ensure_profile(session.user)
        logger.info("User %s logged in", profile.id)
        return SessionInfo(user=profile, access_token=session.access_token)

    async def register(
        self, email: str, password: str, name: str, avatar: str, color: str,
    ) -> SessionInfo:
        role = self.resolve_role(email)
        session = await self._auth.sign_up(
            email,
            password,
            {
                "name": name,
                "avatar": avatar,
                "color": color,
                "household_id": self._profiles.household_id,
                "role": role,
            },
        )
        if session is None:
            raise AuthError("Check your email to confirm your account, then sign in.")

        await self._profiles.upsert(UserProfile(
            id=session.user.id, name=name, email=email, avatar=avatar, color=color, role=role,
        ))
        profile = await self._get_profile_or_raise(session.user.id)
        logger.info("User %s registered as %s", profile.id, role)
        return SessionInfo(user=profile, access_token=session.access_token)

    async def logout(self, access_token: str) -> None:
        await self._auth.sign_out(access_token)

    async def request_password_reset(self, email: str, redirect_to: str) -> None:
        await self._auth.reset_password_for_email(email, redirect_to)

    async def update_password(self, access_token: str, new_password: str) -> None:
        await self._auth.update_password(access_token, new_password)

    async def check_session(self, access_token: str | None) -> SessionInfo | None:
        """Resume a stored session; None when it is gone or has no profile."""
        if not access_token:
            return None
        user = await self._auth.get_user(access_token)
        if user is None:
            return None
        try:
            profile = await self._ensure_profile(user)
        except (AuthError, NotFoundError) as exc:
            logger.error("Session profile error: %s", exc)
            return None
        return SessionInfo(user=profile, access_token=access_token)
