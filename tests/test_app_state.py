"""Tests for household.state.app_state — session flow and optimistic updates."""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock

from household.data.models import CompletionEvent
from household.ports.auth_port import AuthError
from household.ports.store_port import NotFoundError, StoreError
from household.state.app_state import AppState
from household.utils.recent_users import RecentUsersStore


@pytest.fixture
def recent_store(tmp_path):
    return RecentUsersStore(tmp_path / "recent_users.json")


@pytest.fixture
def state(services, recent_store):
    return AppState(services, recent_users_store=recent_store, history_days=30)


async def _signed_in(state, email="admin@example.com", name="Ana"):
    await state.register(email, "secret", name, "A", "#f00")
    return state


class TestSession:
    @pytest.mark.asyncio
    async def test_register_loads_data_and_remembers_user(self, state, recent_store):
        await _signed_in(state)

        assert state.current_user.is_admin
        assert state.data_loaded
        assert len(state.tasks) == 19
        assert [u.email for u in state.recent_users] == ["admin@example.com"]
        assert [u.email for u in recent_store.load()] == ["admin@example.com"]

    @pytest.mark.asyncio
    async def test_start_resumes_session(self, services, recent_store):
        first = AppState(services, recent_store, history_days=30)
        await _signed_in(first)

        second = AppState(services, recent_store, history_days=30)
        await second.start(first.access_token)

        assert second.loading is False
        assert second.current_user.id == first.current_user.id
        assert second.recent_users[0].email == "admin@example.com"
        assert second.data_loaded

    @pytest.mark.asyncio
    async def test_start_without_session(self, state):
        await state.start(None)
        assert state.loading is False
        assert state.current_user is None

    @pytest.mark.asyncio
    async def test_logout_clears_household(self, state):
        await _signed_in(state)
        await state.logout()
        assert state.current_user is None
        assert state.tasks == []
        assert state.data_loaded is False

    @pytest.mark.asyncio
    async def test_update_password_needs_session(self, state):
        with pytest.raises(AuthError):
            await state.update_password("new")


class TestOptimisticToggle:
    @pytest.mark.asyncio
    async def test_success_replaces_provisional_event(self, state):
        await _signed_in(state)
        task = state.tasks[0]

        await state.toggle_task_completion(task.id)

        updated = next(t for t in state.tasks if t.id == task.id)
        assert updated.completed_by == [state.current_user.id]
        assert len(state.completion_events) == 1
        assert not state.completion_events[0].id.startswith("optimistic-")

    @pytest.mark.asyncio
    async def test_failure_rolls_back(self, state):
        await _signed_in(state)
        task = state.tasks[0]
        tasks_before = state.tasks
        events_before = state.completion_events
        state.services.tasks_service.toggle_task_completion = AsyncMock(
            side_effect=StoreError("offline")
        )

        with pytest.raises(StoreError):
            await state.toggle_task_completion(task.id)

        assert state.tasks is tasks_before
        assert state.completion_events is events_before

    @pytest.mark.asyncio
    async def test_unknown_task(self, state):
        await _signed_in(state)
        with pytest.raises(NotFoundError):
            await state.toggle_task_completion("missing")


class TestOptimisticGroceries:
    @pytest.mark.asyncio
    async def test_update_success(self, state):
        await _signed_in(state)
        item = await state.add_grocery("Milk")
        await state.update_grocery(item.id, completed=True)
        assert state.groceries[0].completed is True

    @pytest.mark.asyncio
    async def test_update_failure_rolls_back(self, state):
        await _signed_in(state)
        item = await state.add_grocery("Milk")
        state.services.groceries_service.update_grocery = AsyncMock(
            side_effect=StoreError("offline")
        )

        with pytest.raises(StoreError):
            await state.update_grocery(item.id, completed=True)

        assert state.groceries[0].completed is False

    @pytest.mark.asyncio
    async def test_clear_and_add_again(self, state):
        await _signed_in(state)
        await state.add_grocery("Milk", 2)
        await state.add_grocery("Bread")
        await state.clear_groceries()
        assert state.groceries == []

        preview = await state.preview_add_again_groceries()
        await state.add_grocery("milk")
        added = await state.add_again_groceries(preview)

        assert added == 1
        assert sorted(g.name for g in state.groceries) == ["Bread", "milk"]


class TestAdminActions:
    @pytest.mark.asyncio
    async def test_member_cannot_reset(self, state):
        await _signed_in(state, email="bo@example.com", name="Bo")
        with pytest.raises(PermissionError):
            await state.reset_completions()

    @pytest.mark.asyncio
    async def test_admin_reset_completions(self, state):
        await _signed_in(state)
        await state.toggle_task_completion(state.tasks[0].id)

        await state.reset_completions()

        assert state.completion_events == []
        assert all(t.completed_by == [] for t in state.tasks)

    @pytest.mark.asyncio
    async def test_admin_reset_tasks_reseeds(self, state):
        await _signed_in(state)
        await state.add_task("Custom", state.categories[0].id, "daily")

        await state.reset_tasks_to_defaults()

        assert len(state.tasks) == 19


class TestCategoryActions:
    @pytest.mark.asyncio
    async def test_delete_category_drops_its_tasks(self, state):
        await _signed_in(state)
        kitchen = next(c for c in state.categories if c.name == "Kitchen")

        await state.delete_category(kitchen.id)

        assert kitchen.id not in [c.id for c in state.categories]
        assert all(t.category_id != kitchen.id for t in state.tasks)


class TestDerivedViews:
    @pytest.mark.asyncio
    async def test_progress_and_points(self, state):
        await _signed_in(state)
        user_id = state.current_user.id
        lunch = next(t for t in state.tasks if t.title == "Lunch")
        state.completion_events = [
            CompletionEvent(
                id="e1", task_id=lunch.id, user_id=user_id,
                completed=True, occurred_at="2024-05-15T12:00:00",
            ),
        ]
        now = datetime(2024, 5, 15, 18, 0)

        daily = state.daily_progress(now)
        assert daily.completed == 1
        assert daily.total == len([t for t in state.tasks if t.frequency == "daily"])
        assert state.weekly_progress(now).completed == 0
        assert state.points_today(now) == 3

    @pytest.mark.asyncio
    async def test_monthly_leaderboard(self, state):
        await _signed_in(state)
        user_id = state.current_user.id
        dinner = next(t for t in state.tasks if t.title == "Dinner")
        state.completion_events = [
            CompletionEvent(
                id="e1", task_id=dinner.id, user_id=user_id,
                completed=True, occurred_at="2024-05-02T19:00:00",
            ),
            CompletionEvent(
                id="e2", task_id=dinner.id, user_id=user_id,
                completed=True, occurred_at="2024-05-03T19:00:00",
            ),
        ]

        board = state.monthly_leaderboard(datetime(2024, 5, 15, 18, 0))

        assert board[0][0].id == user_id
        assert board[0][1].points == 6
