"""Tests for household.data.repositories — household-scoped data access."""

import pytest

from household.data.models import GroceryItem, UserProfile
from household.data.repositories import (
    CategoriesRepository,
    CompletionEventsRepository,
    GroceriesRepository,
    ProfilesRepository,
    TasksRepository,
)
from household.ports.store_port import NotFoundError


class TestScoping:
    @pytest.mark.asyncio
    async def test_households_do_not_see_each_other(self, store):
        ours = CategoriesRepository(store, "h1")
        theirs = CategoriesRepository(store, "h2")
        await ours.add("Kitchen", "ChefHat", "#fff")
        await theirs.add("Garage", "Car", "#000")

        assert [c.name for c in await ours.list()] == ["Kitchen"]
        assert [c.name for c in await theirs.list()] == ["Garage"]

    @pytest.mark.asyncio
    async def test_update_in_other_household_is_not_found(self, store):
        category = await CategoriesRepository(store, "h1").add("Kitchen", "", "")
        with pytest.raises(NotFoundError):
            await CategoriesRepository(store, "h2").update(category.id, name="Stolen")


class TestProfilesRepository:
    @pytest.mark.asyncio
    async def test_upsert_get_and_list(self, store):
        repo = ProfilesRepository(store, "h1")
        await repo.upsert(UserProfile(id="u2", name="Zed", email="z@x", role="member"))
        await repo.upsert(UserProfile(id="u1", name="Ana", email="a@x", role="admin"))

        assert (await repo.get_by_id("u1")).is_admin
        assert await repo.get_by_id("missing") is None
        assert [p.name for p in await repo.list_by_household()] == ["Ana", "Zed"]

    @pytest.mark.asyncio
    async def test_delete(self, store):
        repo = ProfilesRepository(store, "h1")
        await repo.upsert(UserProfile(id="u1", name="Ana", email="a@x"))
        await repo.delete_by_id("u1")
        assert await repo.list_by_household() == []


class TestTasksRepository:
    @pytest.mark.asyncio
    async def test_add_defaults(self, store):
        task = await TasksRepository(store, "h1").add("Dishes", "c1", "daily")
        assert task.rating == 1
        assert task.completed_by == []
        assert task.created_at

    @pytest.mark.asyncio
    async def test_update_and_get(self, store):
        repo = TasksRepository(store, "h1")
        task = await repo.add("Dishes", "c1", "daily")
        updated = await repo.update(task.id, completed_by=["u1"], rating=3)
        assert updated.completed_by == ["u1"]
        assert (await repo.get_by_id(task.id)).rating == 3

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, store):
        with pytest.raises(NotFoundError):
            await TasksRepository(store, "h1").update("missing", title="X")

    @pytest.mark.asyncio
    async def test_delete_by_category_and_clear(self, store):
        repo = TasksRepository(store, "h1")
        await repo.add("A", "c1", "daily", completed_by=["u1"])
        await repo.add("B", "c2", "weekly", completed_by=["u1", "u2"])
        await repo.delete_by_category("c1")
        await repo.clear_completed_by()

        tasks = await repo.list()
        assert [t.title for t in tasks] == ["B"]
        assert tasks[0].completed_by == []

        await repo.delete_all()
        assert await repo.list() == []


class TestGroceriesRepository:
    @pytest.mark.asyncio
    async def test_add_list_update(self, store):
        repo = GroceriesRepository(store, "h1")
        item = await repo.add("Milk", 2, "", False)
        await repo.update(item.id, completed=True)
        [listed] = await repo.list()
        assert listed.completed is True
        assert listed.quantity == 2

    @pytest.mark.asyncio
    async def test_archives_newest_first(self, store):
        repo = GroceriesRepository(store, "h1")
        first = await repo.create_archive()
        second = await repo.create_archive()
        await repo.add_archive_items(first.id, [GroceryItem(id="", name="Milk")])
        await repo.add_archive_items(second.id, [GroceryItem(id="", name="Eggs", quantity=6)])

        archives = await repo.list_archives(5)
        assert [a.id for a in archives] == [second.id, first.id]

        items = await repo.list_archive_items([second.id])
        assert [(i.name, i.quantity) for i in items] == [("Eggs", 6)]
        assert await repo.list_archive_items([]) == []

    @pytest.mark.asyncio
    async def test_add_many(self, store):
        repo = GroceriesRepository(store, "h1")
        added = await repo.add_many([
            GroceryItem(id="", name="Milk"), GroceryItem(id="", name="Bread", note="rye"),
        ])
        assert [i.name for i in added] == ["Milk", "Bread"]
        assert await repo.add_many([]) == []


class TestCompletionEventsRepository:
    @pytest.mark.asyncio
    async def test_list_recent_window(self, store):
        repo = CompletionEventsRepository(store, "h1")
        await repo.add("t1", "u1", True, "2000-01-01T00:00:00+00:00")
        recent = await repo.add("t1", "u1", False, "2999-01-01T00:00:00+00:00")

        events = await repo.list_recent(30)
        assert [e.id for e in events] == [recent.id]
        assert len(await repo.list_all()) == 2

    @pytest.mark.asyncio
    async def test_delete_by_user(self, store):
        repo = CompletionEventsRepository(store, "h1")
        await repo.add("t1", "u1", True, "2024-05-15T08:00:00+00:00")
        await repo.add("t1", "u2", True, "2024-05-15T08:00:00+00:00")
        await repo.delete_by_user("u1")
        assert [e.user_id for e in await repo.list_for_task("t1")] == ["u2"]
