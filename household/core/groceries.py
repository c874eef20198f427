"""Grocery list helpers."""

from __future__ import annotations

from typing import Iterable, TypeVar

T = TypeVar("T")


def normalize_name(name: str) -> str:
    """Case-insensitive, whitespace-trimmed comparison key."""
    return name.strip().lower()


def dedupe_by_name(items: Iterable[T]) -> list[T]:
    """Keep the first item per normalized name, preserving order."""
    seen: set[str] = set()
    result: list[T] = []
    for item in items:
        key = normalize_name(item.name)  # type: ignore[attr-defined]
        if key in seen:
            continue
        seen.add(key)
        result.append(item)
    return result
