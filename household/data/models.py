"""
Household Chores — Data Models.

Plain records shared by every layer. Rows in the store use snake_case
columns with the same names; see household.data.mappers for the translation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCIES = (FREQUENCY_DAILY, FREQUENCY_WEEKLY)

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"

DEFAULT_COLOR = "#4A90E2"

TaskFrequency = Literal["daily", "weekly"]
UserRole = Literal["admin", "member"]


@dataclass
class UserProfile:
    """A household member. Role is assigned once at registration."""

    id: str
    name: str
    email: str
    avatar: str = ""
    color: str = DEFAULT_COLOR
    role: UserRole | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass
class Category:
    id: str
    name: str
    icon: str
    color: str


@dataclass
class Task:
    """A recurring chore.

    completed_by is a cached snapshot of who is currently done; the
    completion event log is the record of truth.
    """

    id: str
    title: str
    category_id: str
    frequency: TaskFrequency
    rating: int = 1
    completed_by: list[str] = field(default_factory=list)
    created_at: str = ""


@dataclass
class CompletionEvent:
    """One append-only entry in the completion log."""

    id: str
    task_id: str
    user_id: str
    completed: bool
    occurred_at: str  # ISO-8601 timestamp


@dataclass
class GroceryItem:
    id: str
    name: str
    quantity: int = 1
    note: str = ""
    completed: bool = False
    created_at: str = ""


@dataclass
class GroceryArchive:
    """Snapshot header written when the active grocery list is cleared."""

    id: str
    created_at: str


@dataclass
class GroceryArchiveItem:
    id: str
    archive_id: str
    name: str
    quantity: int = 1
    note: str = ""


@dataclass
class RecentUser:
    """Device-local login shortcut; never authoritative."""

    email: str
    name: str
    avatar: str = ""
    color: str = DEFAULT_COLOR
