"""Row <-> model translation for the persisted tables.

Rows are plain dicts with snake_case columns as returned by a StorePort.
"""

from __future__ import annotations

from household.data.models import (
    Category,
    CompletionEvent,
    GroceryArchive,
    GroceryArchiveItem,
    GroceryItem,
    Task,
    UserProfile,
)


def row_to_profile(row: dict) -> UserProfile:
    return UserProfile(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        avatar=row.get("avatar") or "",
        color=row.get("color") or "",
        role=row.get("role"),
    )


def row_to_category(row: dict) -> Category:
    return Category(
        id=row["id"],
        name=row["name"],
        icon=row.get("icon") or "",
        color=row.get("color") or "",
    )


def row_to_task(row: dict) -> Task:
    rating = row.get("rating")
    return Task(
        id=row["id"],
        title=row["title"],
        category_id=row["category_id"],
        frequency=row["frequency"],
        rating=rating if rating is not None else 1,
        completed_by=list(row.get("completed_by") or []),
        created_at=row.get("created_at") or "",
    )


def row_to_grocery(row: dict) -> GroceryItem:
    return GroceryItem(
        id=row["id"],
        name=row["name"],
        quantity=row["quantity"],
        note=row.get("note") or "",
        completed=bool(row.get("completed")),
        created_at=row.get("created_at") or "",
    )


def row_to_archive(row: dict) -> GroceryArchive:
    return GroceryArchive(id=row["id"], created_at=row.get("created_at") or "")


def row_to_archive_item(row: dict) -> GroceryArchiveItem:
    return GroceryArchiveItem(
        id=row["id"],
        archive_id=row["archive_id"],
        name=row["name"],
        quantity=row["quantity"],
        note=row.get("note") or "",
    )


def row_to_event(row: dict) -> CompletionEvent:
    return CompletionEvent(
        id=row["id"],
        task_id=row["task_id"],
        user_id=row["user_id"],
        completed=bool(row["completed"]),
        occurred_at=row["occurred_at"],
    )


# ---------------------------------------------------------------------------
# Partial update payloads: only fields that were actually supplied
# ---------------------------------------------------------------------------

_CATEGORY_FIELDS = frozenset({"name", "icon", "color"})
_TASK_FIELDS = frozenset({"title", "category_id", "completed_by", "frequency", "rating"})
_GROCERY_FIELDS = frozenset({"name", "quantity", "note", "completed"})


def _build_payload(updates: dict, columns: frozenset[str]) -> dict:
    unknown = set(updates) - columns
    if unknown:
        raise ValueError(f"Unknown fields: {sorted(unknown)}")
    return {key: value for key, value in updates.items() if value is not None}


def category_update_payload(updates: dict) -> dict:
    return _build_payload(updates, _CATEGORY_FIELDS)


def task_update_payload(updates: dict) -> dict:
    payload = _build_payload(updates, _TASK_FIELDS)
    if "completed_by" in payload:
        payload["completed_by"] = list(payload["completed_by"])
    return payload


def grocery_update_payload(updates: dict) -> dict:
    return _build_payload(updates, _GROCERY_FIELDS)
