"""Admin service — household-wide resets and member removal."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from household.core.period import resolve_completed_by

if TYPE_CHECKING:
    from household.data.repositories import (
        CompletionEventsRepository,
        ProfilesRepository,
        TasksRepository,
    )

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(
        self,
        completion_repo: CompletionEventsRepository,
        tasks_repo: TasksRepository,
        profiles_repo: ProfilesRepository,
    ) -> None:
        self._completions = completion_repo
        self._tasks = tasks_repo
        self._profiles = profiles_repo

    async def reset_completions(self) -> None:
        """Delete the whole completion log and clear every completed_by."""
        await self._completions.delete_all()
        await self._tasks.clear_completed_by()
        logger.info("Completions reset")

    async def reset_tasks_to_defaults(self) -> None:
        """Delete the log and all tasks; the next load re-seeds defaults."""
        await self._completions.delete_all()
        await self._tasks.delete_all()
        logger.info("Tasks reset to defaults")

    async def remove_member(self, user_id: str) -> None:
        """Delete the member's profile and log entries and drop them from completed_by."""
        await self._completions.delete_by_user(user_id)
        for task in await self._tasks.list():
            if user_id in task.completed_by:
                await self._tasks.update(
                    task.id, completed_by=[uid for uid in task.completed_by if uid != user_id],
                )
        await self._profiles.delete_by_id(user_id)
        logger.info("Member %s removed", user_id)

    async def reconcile_completed_by(self) -> int:
        """Rebuild each task's completed_by from the log.

        Returns the number of tasks whose cached set was wrong.
        """
        tasks = await self._tasks.list()
        events = await self._completions.list_all()
        changed = 0
        for task in tasks:
            expected = resolve_completed_by(task.id, events)
            if set(expected) != set(task.completed_by):
                await self._tasks.update(task.id, completed_by=expected)
                changed += 1
                logger.warning(
                    "Task %s completed_by drifted from the log: %s -> %s",
                    task.id, task.completed_by, expected,
                )
        return changed
