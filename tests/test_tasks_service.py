"""Tests for household.services.tasks_service and categories_service."""

import pytest

from household.ports.store_port import NotFoundError


async def _kitchen(services):
    return await services.categories_service.add_category("Kitchen", "ChefHat", "#fff")


async def _dishes(services, **kwargs):
    kitchen = await _kitchen(services)
    return await services.tasks_service.add_task("Dishes", kitchen.id, "daily", **kwargs)


class TestToggleTaskCompletion:
    @pytest.mark.asyncio
    async def test_toggle_adds_user_and_logs_event(self, services):
        task = await _dishes(services)
        result = await services.tasks_service.toggle_task_completion(task.id, "u1")

        assert result.task.completed_by == ["u1"]
        assert result.event.completed is True
        assert result.event.task_id == task.id
        assert result.event.user_id == "u1"

    @pytest.mark.asyncio
    async def test_toggle_twice_restores_and_logs_both(self, services):
        task = await _dishes(services)
        await services.tasks_service.toggle_task_completion(task.id, "u1")
        second = await services.tasks_service.toggle_task_completion(task.id, "u1")

        assert second.task.completed_by == []
        events = await services.completion_repository.list_for_task(task.id)
        assert [e.completed for e in events] == [True, False]

    @pytest.mark.asyncio
    async def test_other_users_untouched(self, services):
        task = await _dishes(services)
        await services.tasks_service.toggle_task_completion(task.id, "u1")
        result = await services.tasks_service.toggle_task_completion(task.id, "u2")
        assert result.task.completed_by == ["u1", "u2"]

    @pytest.mark.asyncio
    async def test_missing_task(self, services):
        with pytest.raises(NotFoundError, match="Task not found"):
            await services.tasks_service.toggle_task_completion("missing", "u1")
        assert await services.completion_repository.list_all() == []


class TestTaskCrud:
    @pytest.mark.asyncio
    async def test_add_validates(self, services):
        kitchen = await _kitchen(services)
        with pytest.raises(ValueError):
            await services.tasks_service.add_task("  ", kitchen.id, "daily")
        with pytest.raises(ValueError):
            await services.tasks_service.add_task("Dishes", kitchen.id, "monthly")
        with pytest.raises(ValueError):
            await services.tasks_service.add_task("Dishes", kitchen.id, "daily", rating=0)

    @pytest.mark.asyncio
    async def test_add_with_unknown_category(self, services):
        with pytest.raises(NotFoundError, match="Category not found"):
            await services.tasks_service.add_task("Orphan", "no-such-category", "daily")
        assert await services.tasks_repository.list() == []

    @pytest.mark.asyncio
    async def test_add_with_category_of_other_household(self, services):
        from household.data.repositories import CategoriesRepository

        foreign = await CategoriesRepository(services.tasks_repository._store, "h2").add(
            "Garage", "", "",
        )
        with pytest.raises(NotFoundError, match="Category not found"):
            await services.tasks_service.add_task("Orphan", foreign.id, "daily")

    @pytest.mark.asyncio
    async def test_move_to_unknown_category(self, services):
        task = await _dishes(services)
        with pytest.raises(NotFoundError, match="Category not found"):
            await services.tasks_service.update_task(task.id, category_id="no-such-category")
        assert (await services.tasks_repository.get_by_id(task.id)).category_id == task.category_id

    @pytest.mark.asyncio
    async def test_move_to_existing_category(self, services):
        task = await _dishes(services)
        garden = await services.categories_service.add_category("Garden", "Tree", "#0f0")
        moved = await services.tasks_service.update_task(task.id, category_id=garden.id)
        assert moved.category_id == garden.id

    @pytest.mark.asyncio
    async def test_update_missing_task(self, services):
        with pytest.raises(NotFoundError, match="Task not found"):
            await services.tasks_service.update_task("missing", title="X")

    @pytest.mark.asyncio
    async def test_update_and_delete(self, services):
        task = await _dishes(services, rating=2)
        updated = await services.tasks_service.update_task(task.id, title="Wash up", rating=3)
        assert (updated.title, updated.rating) == ("Wash up", 3)

        await services.tasks_service.delete_task(task.id)
        assert await services.tasks_repository.get_by_id(task.id) is None


class TestCategoriesService:
    @pytest.mark.asyncio
    async def test_delete_cascades_to_tasks(self, services):
        kitchen = await _kitchen(services)
        garden = await services.categories_service.add_category("Garden", "Tree", "#0f0")
        await services.tasks_service.add_task("Dishes", kitchen.id, "daily")
        await services.tasks_service.add_task("Water plants", garden.id, "weekly")

        await services.categories_service.delete_category(kitchen.id)

        assert [c.name for c in await services.categories_repository.list()] == ["Garden"]
        assert [t.title for t in await services.tasks_repository.list()] == ["Water plants"]

    @pytest.mark.asyncio
    async def test_empty_name_rejected(self, services):
        with pytest.raises(ValueError):
            await services.categories_service.add_category(" ", "", "")

    @pytest.mark.asyncio
    async def test_update(self, services):
        category = await _kitchen(services)
        updated = await services.categories_service.update_category(category.id, color="#123")
        assert updated.color == "#123"
        assert updated.name == "Kitchen"
