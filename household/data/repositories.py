"""
Household Chores — Repositories.

One repository per entity. Each maps between store rows and models and
scopes every query to a single household id.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from household.data.mappers import (
    category_update_payload,
    grocery_update_payload,
    row_to_archive,
    row_to_archive_item,
    row_to_category,
    row_to_event,
    row_to_grocery,
    row_to_profile,
    row_to_task,
    task_update_payload,
)
from household.data.models import (
    Category,
    CompletionEvent,
    GroceryArchive,
    GroceryArchiveItem,
    GroceryItem,
    Task,
    UserProfile,
)
from household.ports.store_port import NotFoundError, StoreError

if TYPE_CHECKING:
    from household.ports.store_port import StorePort

logger = logging.getLogger(__name__)


class _HouseholdRepository:
    """Base: a store plus the household every query is scoped to."""

    table: str = ""

    def __init__(self, store: StorePort, household_id: str | None = None) -> None:
        if household_id is None:
            from household.config import settings
            household_id = settings.HOUSEHOLD_ID

        self._store = store
        self.household_id = household_id

    def _scope(self, **eq) -> dict:
        return {"household_id": self.household_id, **eq}

    async def _insert_one(self, row: dict) -> dict:
        rows = await self._store.insert(self.table, [{**row, "household_id": self.household_id}])
        if not rows:
            raise StoreError(f"Failed to add row to {self.table}")
        return rows[0]

    async def _update_one(self, row_id: str, payload: dict) -> dict:
        rows = await self._store.update(self.table, payload, eq=self._scope(id=row_id))
        if not rows:
            raise NotFoundError(f"{self.table} row {row_id} not found")
        return rows[0]


class ProfilesRepository(_HouseholdRepository):
    table = "profiles"

    async def list_by_household(self) -> list[UserProfile]:
        rows = await self._store.select(self.table, eq=self._scope(), order="name")
        return [row_to_profile(r) for r in rows]

    async def get_by_id(self, profile_id: str) -> UserProfile | None:
        rows = await self._store.select(self.table, eq=self._scope(id=profile_id), limit=1)
        return row_to_profile(rows[0]) if rows else None

    async def household_of(self, profile_id: str) -> str | None:
        """Household a profile belongs to, looked up across all households."""
        rows = await self._store.select(self.table, eq={"id": profile_id}, limit=1)
        return rows[0].get("household_id") if rows else None

    async def upsert(self, profile: UserProfile) -> UserProfile:
        row = await self._store.upsert(
            self.table,
            {
                "id": profile.id,
                "name": profile.name,
                "email": profile.email,
                "avatar": profile.avatar,
                "color": profile.color,
                "role": profile.role,
                "household_id": self.household_id,
            },
        )
        return row_to_profile(row)

    async def delete_by_id(self, profile_id: str) -> None:
        await self._store.delete(self.table, eq=self._scope(id=profile_id))
        logger.info("Profile %s removed from household %s", profile_id, self.household_id)


class CategoriesRepository(_HouseholdRepository):
    table = "categories"

    async def list(self) -> list[Category]:
        rows = await self._store.select(self.table, eq=self._scope(), order="name")
        return [row_to_category(r) for r in rows]

    async def get_by_id(self, category_id: str) -> Category | None:
        rows = await self._store.select(self.table, eq=self._scope(id=category_id), limit=1)
        return row_to_category(rows[0]) if rows else None

    async def add(self, name: str, icon: str, color: str) -> Category:
        row = await self._insert_one({"name": name, "icon": icon, "color": color})
        category = row_to_category(row)
        logger.info("Category added: %s '%s'", category.id, name)
        return category

    async def update(self, category_id: str, **updates) -> Category:
        row = await self._update_one(category_id, category_update_payload(updates))
        return row_to_category(row)

    async def delete(self, category_id: str) -> None:
        await self._store.delete(self.table, eq=self._scope(id=category_id))
        logger.info("Category %s deleted", category_id)


class TasksRepository(_HouseholdRepository):
    table = "tasks"

    async def list(self) -> list[Task]:
        rows = await self._store.select(self.table, eq=self._scope(), order="created_at")
        return [row_to_task(r) for r in rows]

    async def get_by_id(self, task_id: str) -> Task | None:
        rows = await self._store.select(self.table, eq=self._scope(id=task_id), limit=1)
        return row_to_task(rows[0]) if rows else None

    async def add(
        self,
        title: str,
        category_id: str,
        frequency: str,
        rating: int = 1,
        completed_by: list[str] | None = None,
    ) -> Task:
        row = await self._insert_one({
            "title": title,
            "category_id": category_id,
            "frequency": frequency,
            "rating": rating if rating is not None else 1,
            "completed_by": list(completed_by or []),
        })
        task = row_to_task(row)
        logger.info("Task added: %s '%s' (%s)", task.id, title, frequency)
        return task

    async def update(self, task_id: str, **updates) -> Task:
        row = await self._update_one(task_id, task_update_payload(updates))
        return row_to_task(row)

    async def delete(self, task_id: str) -> None:
        await self._store.delete(self.table, eq=self._scope(id=task_id))
        logger.info("Task %s deleted", task_id)

    async def delete_by_category(self, category_id: str) -> None:
        await self._store.delete(self.table, eq=self._scope(category_id=category_id))

    async def clear_completed_by(self) -> None:
        await self._store.update(self.table, {"completed_by": []}, eq=self._scope())

    async def delete_all(self) -> None:
        await self._store.delete(self.table, eq=self._scope())


class GroceriesRepository(_HouseholdRepository):
    table = "groceries"

    @staticmethod
    def _new_row(name: str, quantity: int, note: str, completed: bool) -> dict:
        return {"name": name, "quantity": quantity, "note": note, "completed": completed}

    async def list(self) -> list[GroceryItem]:
        rows = await self._store.select(self.table, eq=self._scope(), order="created_at")
        return [row_to_grocery(r) for r in rows]

    async def add(
        self, name: str, quantity: int = 1, note: str = "", completed: bool = False,
    ) -> GroceryItem:
        row = await self._insert_one(self._new_row(name, quantity, note, completed))
        return row_to_grocery(row)

    async def add_many(self, items: list[GroceryItem]) -> list[GroceryItem]:
        if not items:
            return []
        rows = await self._store.insert(
            self.table,
            [
                {
                    **self._new_row(item.name, item.quantity, item.note, item.completed),
                    "household_id": self.household_id,
                }
                for item in items
            ],
        )
        return [row_to_grocery(r) for r in rows]

    async def update(self, item_id: str, **updates) -> GroceryItem:
        row = await self._update_one(item_id, grocery_update_payload(updates))
        return row_to_grocery(row)

    async def delete(self, item_id: str) -> None:
        await self._store.delete(self.table, eq=self._scope(id=item_id))

    async def delete_all(self) -> None:
        await self._store.delete(self.table, eq=self._scope())

    async def create_archive(self) -> GroceryArchive:
        rows = await self._store.insert(
            "groceries_archives", [{"household_id": self.household_id}],
        )
        if not rows:
            raise StoreError("Failed to archive groceries")
        return row_to_archive(rows[0])

    async def add_archive_items(self, archive_id: str, items: list[GroceryItem]) -> None:
        await self._store.insert(
            "groceries_archive_items",
            [
                {
                    "archive_id": archive_id,
                    "name": item.name,
                    "quantity": item.quantity,
                    "note": item.note or "",
                }
                for item in items
            ],
        )

    async def list_archives(self, limit: int) -> list[GroceryArchive]:
        """Most recent archives first."""
        rows = await self._store.select(
            "groceries_archives",
            eq=self._scope(),
            order="created_at",
            descending=True,
            limit=max(1, limit),
        )
        return [row_to_archive(r) for r in rows]

    async def list_archive_items(self, archive_ids: list[str]) -> list[GroceryArchiveItem]:
        if not archive_ids:
            return []
        rows = await self._store.select(
            "groceries_archive_items", in_={"archive_id": list(archive_ids)},
        )
        return [row_to_archive_item(r) for r in rows]


class CompletionEventsRepository(_HouseholdRepository):
    """Append-only completion log."""

    table = "completion_events"

    async def list_recent(self, days: int) -> list[CompletionEvent]:
        """Events from the last ``days`` days (at least one), oldest first."""
        since = datetime.now(timezone.utc) - timedelta(days=max(1, days))
        rows = await self._store.select(
            self.table,
            eq=self._scope(),
            gte={"occurred_at": since.isoformat()},
            order="occurred_at",
        )
        return [row_to_event(r) for r in rows]

    async def list_for_task(self, task_id: str) -> list[CompletionEvent]:
        rows = await self._store.select(
            self.table, eq=self._scope(task_id=task_id), order="occurred_at",
        )
        return [row_to_event(r) for r in rows]

    async def list_all(self) -> list[CompletionEvent]:
        rows = await self._store.select(self.table, eq=self._scope(), order="occurred_at")
        return [row_to_event(r) for r in rows]

    async def add(
        self, task_id: str, user_id: str, completed: bool, occurred_at: str,
    ) -> CompletionEvent:
        row = await self._insert_one({
            "task_id": task_id,
            "user_id": user_id,
            "completed": completed,
            "occurred_at": occurred_at,
        })
        return row_to_event(row)

    async def delete_all(self) -> None:
        await self._store.delete(self.table, eq=self._scope())
        logger.info("Completion log cleared for household %s", self.household_id)

    async def delete_by_user(self, user_id: str) -> None:
        await self._store.delete(self.table, eq=self._scope(user_id=user_id))
