"""Categories service — category CRUD with task cascade on delete."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from household.data.models import Category

if TYPE_CHECKING:
    from household.data.repositories import CategoriesRepository, TasksRepository

logger = logging.getLogger(__name__)


class CategoriesService:
    def __init__(
        self, categories_repo: CategoriesRepository, tasks_repo: TasksRepository,
    ) -> None:
        self._categories = categories_repo
        self._tasks = tasks_repo

    async def add_category(self, name: str, icon: str, color: str) -> Category:
        if not name.strip():
            raise ValueError("Category name must not be empty")
        return await self._categories.add(name=name.strip(), icon=icon, color=color)

    async def update_category(self, category_id: str, **updates) -> Category:
        return await self._categories.update(category_id, **updates)

    async def delete_category(self, category_id: str) -> None:
        """Delete the category's tasks, then the category itself."""
        await self._tasks.delete_by_category(category_id)
        await self._categories.delete(category_id)
        logger.info("Category %s deleted with its tasks", category_id)
