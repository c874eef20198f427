"""
Household Chores — Application state.

Holds in-memory copies of the loaded household and exposes the actions a
front end calls. Grocery edits and task toggles are optimistic: the
expected result is applied at once, and if the remote call fails the state
is put back to the snapshot taken before the action and the error is
raised again. Every other action waits for the backend, then applies.

State lists are replaced, never mutated in place, so a snapshot is just
the previous list objects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from household.core.period import CompletionCount, completion_counts, day_key, local_now
from household.core.points import UserStats, daily_stats, monthly_totals, rating_map
from household.data.models import (
    FREQUENCY_DAILY,
    FREQUENCY_WEEKLY,
    Category,
    CompletionEvent,
    GroceryItem,
    RecentUser,
    Task,
    UserProfile,
)
from household.ports.auth_port import AuthError
from household.ports.store_port import NotFoundError, StoreError
from household.utils.recent_users import build_recent_users

if TYPE_CHECKING:
    from household.services.app_services import AppServices
    from household.utils.recent_users import RecentUsersStore

logger = logging.getLogger(__name__)


@dataclass
class _Snapshot:
    tasks: list[Task]
    completion_events: list[CompletionEvent]
    groceries: list[GroceryItem]


class AppState:
    def __init__(
        self,
        services: AppServices,
        recent_users_store: RecentUsersStore | None = None,
        history_days: int | None = None,
    ) -> None:
        if history_days is None:
            from household.config import settings
            history_days = settings.COMPLETION_HISTORY_DAYS

        self.services = services
        self._recent_store = recent_users_store
        self.history_days = history_days

        self.loading = True
        self.data_loaded = False
        self.current_user: UserProfile | None = None
        self.access_token: str | None = None
        self.household_users: list[UserProfile] = []
        self.categories: list[Category] = []
        self.tasks: list[Task] = []
        self.completion_events: list[CompletionEvent] = []
        self.groceries: list[GroceryItem] = []
        self.recent_users: list[RecentUser] = []

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(
            tasks=self.tasks,
            completion_events=self.completion_events,
            groceries=self.groceries,
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        self.tasks = snapshot.tasks
        self.completion_events = snapshot.completion_events
        self.groceries = snapshot.groceries

    def _require_user(self) -> UserProfile:
        if self.current_user is None:
            raise AuthError("Not signed in")
        return self.current_user

    def _require_admin(self) -> None:
        if not self._require_user().is_admin:
            raise PermissionError("Only the household admin can do this")

    def _remember_user(self, user: UserProfile) -> None:
        self.recent_users = build_recent_users(self.recent_users, user)
        if self._recent_store is not None:
            try:
                self._recent_store.save(self.recent_users)
            except OSError as exc:
                logger.warning("Could not save recent users: %s", exc)

    def _clear_household(self) -> None:
        self.household_users = []
        self.categories = []
        self.tasks = []
        self.completion_events = []
        self.groceries = []
        self.data_loaded = False

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    async def start(self, access_token: str | None = None) -> None:
        """Load recent users and resume a stored session if it is still valid."""
        if self._recent_store is not None:
            self.recent_users = self._recent_store.load()
        try:
            session = await self.services.auth_service.check_session(access_token)
            if session is not None:
                self.current_user = session.user
                self.access_token = session.access_token
                await self.load_data()
        except (AuthError, StoreError) as exc:
            logger.error("Session check error: %s", exc)
        finally:
            self.loading = False

    async def load_data(self, force: bool = False) -> None:
        if self.data_loaded and not force:
            return
        try:
            data = await self.services.household_service.load_household_data(
                self.history_days
            )
        except StoreError as exc:
            logger.error("Data loading error: %s", exc)
            raise
        self.household_users = data.users
        self.categories = data.categories
        self.tasks = data.tasks
        self.groceries = data.groceries
        self.completion_events = data.completion_events
        self.data_loaded = True
        if data.seeded_task_count:
            logger.info("Seeded %d default tasks.", data.seeded_task_count)

    async def login(self, email: str, password: str) -> None:
        session = await self.services.auth_service.login(email, password)
        self.current_user = session.user
        self.access_token = session.access_token
        self._remember_user(session.user)
        await self.load_data(force=True)

    async def register(
        self, email: str, password: str, name: str, avatar: str, color: str,
    ) -> None:
        session = await self.services.auth_service.register(email, password, name, avatar, color)
        self.current_user = session.user
        self.access_token = session.access_token
        self._remember_user(session.user)
        await self.load_data(force=True)

    async def logout(self) -> None:
        if self.access_token:
            await self.services.auth_service.logout(self.access_token)
        self.current_user = None
        self.access_token = None
        self._clear_household()

    async def request_password_reset(self, email: str, redirect_to: str) -> None:
        await self.services.auth_service.request_password_reset(email, redirect_to)

    async def update_password(self, new_password: str) -> None:
        if not self.access_token:
            raise AuthError("Auth session missing!")
        await self.services.auth_service.update_password(self.access_token, new_password)

    # ------------------------------------------------------------------
    # Groceries
    # ------------------------------------------------------------------

    async def add_grocery(
        self, name: str, quantity: int = 1, note: str = "", completed: bool = False,
    ) -> GroceryItem:
        created = await self.services.groceries_service.add_grocery(name, quantity, note, completed)
        self.groceries = [*self.groceries, created]
        return created

    async def update_grocery(self, item_id: str, **updates) -> None:
        """Optimistic: applied locally first, rolled back if the store rejects it."""
        snapshot = self._snapshot()
        self.groceries = [
            replace(item, **updates) if item.id == item_id else item
            for item in self.groceries
        ]
        try:
            updated = await self.services.groceries_service.update_grocery(item_id, **updates)
        except Exception:
            self._restore(snapshot)
            raise
        self.groceries = [updated if item.id == item_id else item for item in self.groceries]

    async def delete_grocery(self, item_id: str) -> None:
        await self.services.groceries_service.delete_grocery(item_id)
        self.groceries = [item for item in self.groceries if item.id != item_id]

    async def clear_groceries(self) -> None:
        await self.services.groceries_service.clear_groceries(self.groceries)
        self.groceries = []

    async def add_again_groceries(self, selected: list[GroceryItem]) -> int:
        restored = await self.services.groceries_service.restore_selected_groceries(
            selected, [item.name for item in self.groceries]
        )
        if restored:
            self.groceries = [*self.groceries, *restored]
        return len(restored)

    async def preview_add_again_groceries(self) -> list[GroceryItem]:
        return await self.services.groceries_service.get_recent_archive_items(3)

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    async def reset_completions(self) -> None:
        self._require_admin()
        await self.services.admin_service.reset_completions()
        self.completion_events = await self.services.completion_repository.list_recent(
            self.history_days
        )
        self.tasks = await self.services.tasks_repository.list()

    async def reset_tasks_to_defaults(self) -> None:
        self._require_admin()
        await self.services.admin_service.reset_tasks_to_defaults()
        self.data_loaded = False
        await self.load_data(force=True)

    async def remove_member(self, user_id: str) -> None:
        self._require_admin()
        await self.services.admin_service.remove_member(user_id)
        self.household_users = await self.services.profiles_repository.list_by_household()
        self.tasks = await self.services.tasks_repository.list()
        self.completion_events = [e for e in self.completion_events if e.user_id != user_id]

    async def reconcile_completions(self) -> int:
        self._require_admin()
        changed = await self.services.admin_service.reconcile_completed_by()
        if changed:
            self.tasks = await self.services.tasks_repository.list()
        return changed

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    async def toggle_task_completion(self, task_id: str, user_id: str | None = None) -> None:
        """Optimistic toggle with a provisional log entry.

        The provisional event is swapped for the stored one on success;
        on failure tasks and events go back to the snapshot.
        """
        if user_id is None:
            user_id = self._require_user().id
        target = next((task for task in self.tasks if task.id == task_id), None)
        if target is None:
            raise NotFoundError("Task not found")

        snapshot = self._snapshot()
        completed = user_id not in target.completed_by
        now = datetime.now(timezone.utc)
        provisional = CompletionEvent(
            id=f"optimistic-{task_id}-{user_id}-{int(now.timestamp() * 1000)}",
            task_id=task_id,
            user_id=user_id,
            completed=completed,
            occurred_at=now.isoformat(),
        )
        next_completed_by = (
            [*target.completed_by, user_id]
            if completed
            else [uid for uid in target.completed_by if uid != user_id]
        )
        self.tasks = [
            replace(task, completed_by=next_completed_by) if task.id == task_id else task
            for task in self.tasks
        ]
        self.completion_events = [*self.completion_events, provisional]

        try:
            result = await self.services.tasks_service.toggle_task_completion(task_id, user_id)
        except Exception:
            self._restore(snapshot)
            raise

        self.tasks = [result.task if task.id == result.task.id else task for task in self.tasks]
        self.completion_events = [
            *(e for e in self.completion_events if e.id != provisional.id),
            result.event,
        ]

    async def add_task(
        self, title: str, category_id: str, frequency: str, rating: int = 1,
    ) -> Task:
        task = await self.services.tasks_service.add_task(title, category_id, frequency, rating)
        self.tasks = [*self.tasks, task]
        return task

    async def update_task(self, task_id: str, **updates) -> Task:
        updated = await self.services.tasks_service.update_task(task_id, **updates)
        self.tasks = [updated if task.id == task_id else task for task in self.tasks]
        return updated

    async def delete_task(self, task_id: str) -> None:
        await self.services.tasks_service.delete_task(task_id)
        self.tasks = [task for task in self.tasks if task.id != task_id]

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def add_category(self, name: str, icon: str, color: str) -> Category:
        category = await self.services.categories_service.add_category(name, icon, color)
        self.categories = [*self.categories, category]
        return category

    async def update_category(self, category_id: str, **updates) -> Category:
        updated = await self.services.categories_service.update_category(category_id, **updates)
        self.categories = [updated if c.id == category_id else c for c in self.categories]
        return updated

    async def delete_category(self, category_id: str) -> None:
        await self.services.categories_service.delete_category(category_id)
        self.categories = [c for c in self.categories if c.id != category_id]
        self.tasks = [task for task in self.tasks if task.category_id != category_id]

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def daily_progress(self, now: datetime | None = None) -> CompletionCount:
        user = self._require_user()
        return completion_counts(self.tasks, user.id, FREQUENCY_DAILY, self.completion_events, now)

    def weekly_progress(self, now: datetime | None = None) -> CompletionCount:
        user = self._require_user()
        return completion_counts(self.tasks, user.id, FREQUENCY_WEEKLY, self.completion_events, now)

    def points_today(self, now: datetime | None = None) -> int:
        user = self._require_user()
        if now is None:
            now = local_now()
        today = day_key(now)
        stats = daily_stats(self.completion_events, rating_map(self.tasks), now)
        return stats.get(today, {}).get(user.id, UserStats()).points

    def monthly_leaderboard(
        self, now: datetime | None = None,
    ) -> list[tuple[UserProfile, UserStats]]:
        """Household members with this month's totals, highest points first."""
        totals = monthly_totals(self.completion_events, rating_map(self.tasks), now)
        board = [(user, totals.get(user.id, UserStats())) for user in self.household_users]
        return sorted(board, key=lambda pair: (-pair[1].points, pair[0].name))
