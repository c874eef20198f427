"""
Household Chores — Household loading and default seeding.

Loads everything a session needs in one call. An empty household gets the
default categories, then the default chores. Every later load re-adds any
default chore whose title is missing, which never removes anything a user
created.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from household.core.defaults import default_categories, default_tasks
from household.core.groceries import normalize_name
from household.data.models import Category, CompletionEvent, GroceryItem, Task, UserProfile
from household.ports.store_port import StoreError

if TYPE_CHECKING:
    from household.data.repositories import (
        CategoriesRepository,
        CompletionEventsRepository,
        GroceriesRepository,
        ProfilesRepository,
        TasksRepository,
    )

logger = logging.getLogger(__name__)


@dataclass
class HouseholdData:
    users: list[UserProfile] = field(default_factory=list)
    categories: list[Category] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    groceries: list[GroceryItem] = field(default_factory=list)
    completion_events: list[CompletionEvent] = field(default_factory=list)
    seeded_task_count: int = 0


class HouseholdService:
    def __init__(
        self,
        profiles_repo: ProfilesRepository,
        categories_repo: CategoriesRepository,
        tasks_repo: TasksRepository,
        groceries_repo: GroceriesRepository,
        completion_repo: CompletionEventsRepository,
    ) -> None:
        self._profiles = profiles_repo
        self._categories = categories_repo
        self._tasks = tasks_repo
        self._groceries = groceries_repo
        self._completions = completion_repo

    async def load_household_data(self, days: int) -> HouseholdData:
        users, categories, tasks, groceries = await asyncio.gather(
            self._profiles.list_by_household(),
            self._categories.list(),
            self._tasks.list(),
            self._groceries.list(),
        )

        try:
            events = await self._completions.list_recent(days)
        except StoreError as exc:
            logger.error("Completion history error: %s", exc)
            events = []

        original_task_count = len(tasks)

        if not categories:
            categories = [
                await self._categories.add(name=c.name, icon=c.icon, color=c.color)
                for c in default_categories()
            ]
            logger.info("Seeded %d default categories", len(categories))

        if categories:
            if not tasks:
                tasks = await self._add_tasks(default_tasks(categories))
            else:
                tasks = await self._seed_missing_default_tasks(tasks, categories)

        seeded = len(tasks) - original_task_count
        if seeded:
            logger.info("Seeded %d default tasks", seeded)

        return HouseholdData(
            users=users,
            categories=categories,
            tasks=tasks,
            groceries=groceries,
            completion_events=events,
            seeded_task_count=seeded,
        )

    async def _add_tasks(self, new_tasks) -> list[Task]:
        created: list[Task] = []
        for task in new_tasks:
            created.append(await self._tasks.add(
                title=task.title,
                category_id=task.category_id,
                frequency=task.frequency,
                rating=task.rating,
            ))
        return created

    async def _seed_missing_default_tasks(
        self, existing: list[Task], categories: list[Category],
    ) -> list[Task]:
        defaults = default_tasks(categories)
        existing_titles = {normalize_name(task.title) for task in existing}
        missing = [t for t in defaults if normalize_name(t.title) not in existing_titles]
        if not missing:
            return existing
        return [*existing, *await self._add_tasks(missing)]
