"""Tests for household.core.defaults — seed categories and chores."""

from household.core.defaults import default_categories, default_tasks
from household.data.models import Category


def _categories():
    return [
        Category(id=f"c-{c.name}", name=c.name, icon=c.icon, color=c.color)
        for c in default_categories()
    ]


class TestDefaultCategories:
    def test_five_categories(self):
        names = [c.name for c in default_categories()]
        assert names == ["Living Room", "Kitchen", "Bedroom", "Bathroom", "Outdoor"]


class TestDefaultTasks:
    def test_links_by_category_name(self):
        tasks = default_tasks(_categories())
        assert len(tasks) == 19
        by_title = {t.title: t for t in tasks}
        assert by_title["Wash dishes"].category_id == "c-Kitchen"
        assert by_title["Washing Machine"].category_id == "c-Bathroom"
        assert by_title["Car wash"].frequency == "weekly"

    def test_ratings(self):
        by_title = {t.title: t for t in default_tasks(_categories())}
        assert by_title["Lunch"].rating == 3
        assert by_title["Dinner"].rating == 3
        assert by_title["Breakfast"].rating == 2
        assert by_title["Make beds"].rating == 1

    def test_missing_category_falls_back_to_first(self):
        only = [Category(id="only", name="Garage", icon="", color="")]
        tasks = default_tasks(only)
        assert len(tasks) == 19
        assert {t.category_id for t in tasks} == {"only"}

    def test_no_categories(self):
        assert default_tasks([]) == []
