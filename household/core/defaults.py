"""
Household Chores — Default seed data.

A fresh household gets these categories and chores. Loading a household
re-adds any default chore whose title is missing, so this list only ever
grows what users see; it never removes their own tasks.
"""

from __future__ import annotations

from dataclasses import dataclass

from household.data.models import FREQUENCY_DAILY, FREQUENCY_WEEKLY, Category


@dataclass
class NewCategory:
    name: str
    icon: str
    color: str


@dataclass
class NewTask:
    title: str
    category_id: str
    frequency: str
    rating: int = 1


_DEFAULT_CATEGORIES: list[tuple[str, str, str]] = [
    ("Living Room", "Sofa", "#E3F2FD"),
    ("Kitchen", "ChefHat", "#FFF3E0"),
    ("Bedroom", "Bed", "#F3E5F5"),
    ("Bathroom", "Bath", "#E0F2F1"),
    ("Outdoor", "TreePine", "#E8F5E9"),
]

# (title, category name, frequency, rating)
_DEFAULT_TASKS: list[tuple[str, str, str, int]] = [
    ("Vacuum the carpet", "Living Room", FREQUENCY_WEEKLY, 1),
    ("Dust furniture", "Living Room", FREQUENCY_WEEKLY, 1),
    ("Wash dishes", "Kitchen", FREQUENCY_DAILY, 1),
    ("Clean countertops", "Kitchen", FREQUENCY_DAILY, 1),
    ("Take out trash", "Kitchen", FREQUENCY_DAILY, 1),
    ("Binxi food/water", "Kitchen", FREQUENCY_DAILY, 2),
    ("Breakfast", "Kitchen", FREQUENCY_DAILY, 2),
    ("Lunch", "Kitchen", FREQUENCY_DAILY, 3),
    ("Market", "Kitchen", FREQUENCY_DAILY, 1),
    ("Dishwasher", "Kitchen", FREQUENCY_DAILY, 2),
    ("Washing Machine", "Bathroom", FREQUENCY_DAILY, 2),
    ("Dinner", "Kitchen", FREQUENCY_DAILY, 3),
    ("Make beds", "Bedroom", FREQUENCY_DAILY, 1),
    ("Change bedsheets", "Bedroom", FREQUENCY_WEEKLY, 1),
    ("Clean toilet", "Bathroom", FREQUENCY_WEEKLY, 1),
    ("Wipe mirrors", "Bathroom", FREQUENCY_WEEKLY, 1),
    ("Clean kitchen", "Kitchen", FREQUENCY_WEEKLY, 1),
    ("Water plants", "Outdoor", FREQUENCY_WEEKLY, 1),
    ("Car wash", "Outdoor", FREQUENCY_WEEKLY, 1),
]


def default_categories() -> list[NewCategory]:
    return [NewCategory(name, icon, color) for name, icon, color in _DEFAULT_CATEGORIES]


def default_tasks(categories: list[Category]) -> list[NewTask]:
    """Default chores linked to categories by name.

    Falls back to the first category when a name is missing; returns an
    empty list when there are no categories at all.
    """
    if not categories:
        return []

    fallback_id = categories[0].id
    by_name: dict[str, str] = {}
    for category in categories:
        by_name.setdefault(category.name, category.id)

    return [
        NewTask(
            title=title,
            category_id=by_name.get(category_name, fallback_id),
            frequency=frequency,
            rating=rating,
        )
        for title, category_name, frequency, rating in _DEFAULT_TASKS
    ]
