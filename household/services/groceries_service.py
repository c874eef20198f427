"""
Household Chores — Groceries service.

One active list per household. Clearing the list first snapshots it into
an archive, and the most recent archives feed the "add again" picker.
Archive-then-delete is two independent calls: if the delete fails the
archive stays and the list is untouched.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterable

from household.core.groceries import dedupe_by_name, normalize_name
from household.data.models import GroceryItem

if TYPE_CHECKING:
    from household.data.repositories import GroceriesRepository

logger = logging.getLogger(__name__)


def _validate_quantity(quantity: int | None) -> None:
    if quantity is not None and quantity < 1:
        raise ValueError("Quantity must be a positive integer")


class GroceriesService:
    def __init__(self, groceries_repo: GroceriesRepository) -> None:
        self._groceries = groceries_repo

    async def list_groceries(self) -> list[GroceryItem]:
        return await self._groceries.list()

    async def add_grocery(
        self, name: str, quantity: int = 1, note: str = "", completed: bool = False,
    ) -> GroceryItem:
        if not name.strip():
            raise ValueError("Grocery name must not be empty")
        _validate_quantity(quantity)
        return await self._groceries.add(
            name=name.strip(), quantity=quantity, note=note or "", completed=completed,
        )

    async def update_grocery(self, item_id: str, **updates) -> GroceryItem:
        _validate_quantity(updates.get("quantity"))
        return await self._groceries.update(item_id, **updates)

    async def delete_grocery(self, item_id: str) -> None:
        await self._groceries.delete(item_id)

    async def clear_groceries(self, items: list[GroceryItem]) -> None:
        """Archive ``items`` (when there are any), then empty the active list."""
        if items:
            await self.archive_groceries(items)
        await self._groceries.delete_all()
        logger.info("Grocery list cleared (%d item(s) archived)", len(items))

    async def archive_groceries(self, items: list[GroceryItem]) -> None:
        if not items:
            return
        archive = await self._groceries.create_archive()
        await self._groceries.add_archive_items(archive.id, items)

    async def get_recent_archive_items(self, limit: int = 3) -> list[GroceryItem]:
        """Items from the ``limit`` newest archives, one per normalized name.

        Newer archives come first, so a repeated name keeps its most recent
        quantity and note.
        """
        archives = await self._groceries.list_archives(limit)
        if not archives:
            return []

        items = await self._groceries.list_archive_items([a.id for a in archives])
        if not items:
            return []

        rank = {archive.id: position for position, archive in enumerate(archives)}
        created = {archive.id: archive.created_at for archive in archives}
        fallback = datetime.now(timezone.utc).isoformat()
        ordered = sorted(items, key=lambda item: rank.get(item.archive_id, len(rank)))
        merged = [
            GroceryItem(
                id=item.id,
                name=item.name,
                quantity=item.quantity,
                note=item.note or "",
                completed=False,
                created_at=created.get(item.archive_id) or fallback,
            )
            for item in ordered
        ]
        return dedupe_by_name(merged)

    async def restore_selected_groceries(
        self, selected: list[GroceryItem], existing_names: Iterable[str],
    ) -> list[GroceryItem]:
        """Re-add selected archive items whose name is not already on the list."""
        if not selected:
            return []

        existing = {normalize_name(name) for name in existing_names}
        to_insert = [item for item in selected if normalize_name(item.name) not in existing]
        if not to_insert:
            return []

        restored = await self._groceries.add_many([
            GroceryItem(
                id="", name=item.name, quantity=item.quantity, note=item.note or "",
                completed=False,
            )
            for item in to_insert
        ])
        logger.info("Restored %d grocery item(s) from archive", len(restored))
        return restored
