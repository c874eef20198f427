"""Recent users — device-local shortcut list for the login screen.

Stored as a small JSON array; at most MAX_RECENT_USERS entries, most
recent first, one per email.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path

from household.data.models import RecentUser, UserProfile

logger = logging.getLogger(__name__)

MAX_RECENT_USERS = 5


def build_recent_users(current: list[RecentUser], user: UserProfile) -> list[RecentUser]:
    entry = RecentUser(email=user.email, name=user.name, avatar=user.avatar, color=user.color)
    rest = [r for r in current if r.email != user.email]
    return [entry, *rest][:MAX_RECENT_USERS]


class RecentUsersStore:
    """JSON-file persistence for the recent users list."""

    def __init__(self, path: str | Path | None = None) -> None:
        if path is None:
            from household.config import settings
            path = settings.RECENT_USERS_PATH

        self._path = Path(path)

    def load(self) -> list[RecentUser]:
        """Read the list; a missing or unreadable file yields []."""
        if not self._path.exists():
            return []
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return [
                RecentUser(
                    email=item["email"],
                    name=item.get("name", ""),
                    avatar=item.get("avatar", ""),
                    color=item.get("color", ""),
                )
                for item in raw
            ][:MAX_RECENT_USERS]
        except (OSError, ValueError, TypeError, KeyError) as exc:
            logger.warning("Ignoring unreadable recent users file %s: %s", self._path, exc)
            return []

    def save(self, users: list[RecentUser]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps([asdict(u) for u in users[:MAX_RECENT_USERS]], indent=2),
            encoding="utf-8",
        )
