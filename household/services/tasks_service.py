"""
Household Chores — Tasks service.

Toggling a task is a read-modify-write on the task row followed by one
append to the completion log. The two writes are independent calls with
no transaction around them: two clients toggling the same (task, user) at
once can both read the same completed_by, and the log may then show a
bounce (false -> true -> false). A failure between the two writes leaves
the cache and the log disagreeing until AdminService.reconcile_completed_by
runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from household.data.models import FREQUENCIES, CompletionEvent, Task
from household.ports.store_port import NotFoundError

if TYPE_CHECKING:
    from household.data.repositories import (
        CategoriesRepository,
        CompletionEventsRepository,
        TasksRepository,
    )

logger = logging.getLogger(__name__)


@dataclass
class ToggleResult:
    task: Task
    event: CompletionEvent


def validate_task_fields(
    title: str | None = None, frequency: str | None = None, rating: int | None = None,
) -> None:
    if title is not None and not title.strip():
        raise ValueError("Task title must not be empty")
    if frequency is not None and frequency not in FREQUENCIES:
        raise ValueError(f"Unknown frequency: {frequency!r}")
    if rating is not None and rating < 1:
        raise ValueError("Task rating must be a positive integer")


class TasksService:
    def __init__(
        self,
        tasks_repo: TasksRepository,
        completion_repo: CompletionEventsRepository,
        categories_repo: CategoriesRepository,
    ) -> None:
        self._tasks = tasks_repo
        self._completions = completion_repo
        self._categories = categories_repo

    async def _require_category(self, category_id: str) -> None:
        if await self._categories.get_by_id(category_id) is None:
            raise NotFoundError("Category not found")

    async def toggle_task_completion(self, task_id: str, user_id: str) -> ToggleResult:
        """Flip user_id's membership in completed_by and log the new state."""
        existing = await self._tasks.get_by_id(task_id)
        if existing is None:
            raise NotFoundError("Task not found")

        already_completed = user_id in existing.completed_by
        if already_completed:
            next_completed_by = [uid for uid in existing.completed_by if uid != user_id]
        else:
            next_completed_by = [*existing.completed_by, user_id]
        completed = not already_completed

        updated = await self._tasks.update(task_id, completed_by=next_completed_by)
        event = await self._completions.add(
            task_id=task_id,
            user_id=user_id,
            completed=completed,
            occurred_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info(
            "Task %s %s by %s", task_id, "completed" if completed else "reopened", user_id,
        )
        return ToggleResult(task=updated, event=event)

    async def add_task(
        self, title: str, category_id: str, frequency: str, rating: int = 1,
    ) -> Task:
        validate_task_fields(title, frequency, rating)
        await self._require_category(category_id)
        return await self._tasks.add(
            title=title.strip(), category_id=category_id, frequency=frequency, rating=rating,
        )

    async def update_task(self, task_id: str, **updates) -> Task:
        validate_task_fields(
            updates.get("title"), updates.get("frequency"), updates.get("rating"),
        )
        if updates.get("category_id") is not None:
            await self._require_category(updates["category_id"])
        try:
            return await self._tasks.update(task_id, **updates)
        except NotFoundError:
            raise NotFoundError("Task not found") from None

    async def delete_task(self, task_id: str) -> None:
        await self._tasks.delete(task_id)
