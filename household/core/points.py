"""
Household Chores — Points and scoring.

Every task is worth its rating in points (1 when unrated). Summaries
count a (user, task) pair at most once per calendar day: the latest event
of that day decides, and only completed results score.
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Mapping, Sequence

from household.core.period import day_key, local_now, month_key, to_local, week_start
from household.data.models import CompletionEvent, Task


@dataclass
class UserStats:
    count: int = 0
    points: int = 0
    task_ids: list[str] = field(default_factory=list)


def task_points(task_id: str, rating_by_task: Mapping[str, int]) -> int:
    return rating_by_task.get(task_id) or 1


def sum_points(task_ids: Iterable[str], rating_by_task: Mapping[str, int]) -> int:
    """Sum of task_points over task_ids. Duplicates count every time."""
    return sum(task_points(task_id, rating_by_task) for task_id in task_ids)


def rating_map(tasks: Iterable[Task]) -> dict[str, int]:
    return {task.id: task.rating or 1 for task in tasks}


def progress_percent(completed: int, total: int) -> int:
    """Whole percent, halves rounded up."""
    if total <= 0:
        return 0
    return math.floor(completed * 100 / total + 0.5)


def latest_by_day(
    events: Sequence[CompletionEvent], now: datetime | None = None,
) -> dict[str, dict[tuple[str, str], CompletionEvent]]:
    """Latest event per (user_id, task_id) for each local calendar day.

    Ties on timestamp go to the event appended later.
    """
    if now is None:
        now = local_now()
    latest: dict[str, dict[tuple[str, str], tuple[datetime, int, CompletionEvent]]] = (
        defaultdict(dict)
    )
    for position, event in enumerate(events):
        occurred = to_local(event.occurred_at, now)
        day = latest[day_key(occurred)]
        key = (event.user_id, event.task_id)
        existing = day.get(key)
        if existing is None or (occurred, position) > (existing[0], existing[1]):
            day[key] = (occurred, position, event)
    return {
        day: {key: entry[2] for key, entry in by_pair.items()}
        for day, by_pair in latest.items()
    }


def _accumulate(
    resolved: Iterable[CompletionEvent],
    rating_by_task: Mapping[str, int],
    into: dict[str, UserStats],
) -> None:
    for event in resolved:
        if not event.completed:
            continue
        stats = into.setdefault(event.user_id, UserStats())
        stats.count += 1
        stats.points += task_points(event.task_id, rating_by_task)
        stats.task_ids.append(event.task_id)


def daily_stats(
    events: Sequence[CompletionEvent],
    rating_by_task: Mapping[str, int],
    now: datetime | None = None,
) -> dict[str, dict[str, UserStats]]:
    """Per-day, per-user totals. Days without a completed result are omitted."""
    result: dict[str, dict[str, UserStats]] = {}
    for day, by_pair in latest_by_day(events, now).items():
        per_user: dict[str, UserStats] = {}
        _accumulate(by_pair.values(), rating_by_task, per_user)
        if per_user:
            result[day] = per_user
    return result


def weekly_totals(
    events: Sequence[CompletionEvent],
    rating_by_task: Mapping[str, int],
    now: datetime | None = None,
) -> dict[str, UserStats]:
    """Per-user totals for the days of the current Monday-start week."""
    if now is None:
        now = local_now()
    start = week_start(now)
    week_days = {day_key(start + timedelta(days=offset)) for offset in range(7)}
    totals: dict[str, UserStats] = {}
    for day, by_pair in latest_by_day(events, now).items():
        if day in week_days:
            _accumulate(by_pair.values(), rating_by_task, totals)
    return totals


def monthly_totals(
    events: Sequence[CompletionEvent],
    rating_by_task: Mapping[str, int],
    now: datetime | None = None,
) -> dict[str, UserStats]:
    """Per-user totals for now's calendar month, one result per (user, task, day)."""
    if now is None:
        now = local_now()
    current_month = month_key(now)
    totals: dict[str, UserStats] = {}
    for day, by_pair in latest_by_day(events, now).items():
        if day[:7] == current_month:
            _accumulate(by_pair.values(), rating_by_task, totals)
    return totals
