"""
Household Chores — Completion periods.

Decides whether a task is "done" for a user in its current recurrence
window, using only the append-only completion log. A daily task resets at
local midnight, a weekly task at local midnight on Monday.

Resolution is latest-wins: within the window, the most recent event for a
(task, user) pair decides. Two events with the same timestamp are ordered
by their position in the log, so the one appended later wins.
"""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Iterable, Sequence
from zoneinfo import ZoneInfo

from household.data.models import (
    FREQUENCY_DAILY,
    FREQUENCY_WEEKLY,
    CompletionEvent,
    Task,
)

# (log position, event, local timestamp)
_Entry = tuple[int, CompletionEvent, datetime]

_FRACTION = re.compile(r"(?<=\d\d:\d\d:\d\d)\.(\d+)")


@dataclass
class CompletionCount:
    completed: int
    total: int


def local_now() -> datetime:
    """Current time in the household's configured timezone."""
    from household.config import settings

    return datetime.now(ZoneInfo(settings.TIMEZONE))


def _pad_fraction(match: re.Match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing 'Z' for UTC.

    Fractional seconds of any length are normalized to six digits.
    """
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    value = _FRACTION.sub(_pad_fraction, value, count=1)
    return datetime.fromisoformat(value)


def to_local(value: str | datetime, now: datetime) -> datetime:
    """Express a timestamp in the same clock as ``now``.

    Aware ``now``: convert into its timezone (naive values are read as
    wall-clock time there). Naive ``now``: convert aware values to the
    process local zone and drop the offset.
    """
    dt = parse_timestamp(value) if isinstance(value, str) else value
    if now.tzinfo is None:
        if dt.tzinfo is not None:
            dt = dt.astimezone().replace(tzinfo=None)
        return dt
    if dt.tzinfo is None:
        return dt.replace(tzinfo=now.tzinfo)
    return dt.astimezone(now.tzinfo)


def day_key(dt: datetime) -> str:
    """Calendar-day key ``YYYY-MM-DD`` of an already-local datetime."""
    return f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"


def month_key(dt: datetime) -> str:
    return f"{dt.year:04d}-{dt.month:02d}"


def period_start(frequency: str, now: datetime | None = None) -> datetime:
    """Start of the recurrence window containing ``now``.

    daily  -> local midnight of today
    weekly -> local midnight of the Monday on or before today
    """
    if now is None:
        now = local_now()
    today = now.date()
    if frequency == FREQUENCY_DAILY:
        start_day = today
    elif frequency == FREQUENCY_WEEKLY:
        # Monday=0 ... Sunday=6, i.e. Sunday goes back 6 days
        start_day = today - timedelta(days=today.weekday())
    else:
        raise ValueError(f"Unknown frequency: {frequency!r}")
    return datetime.combine(start_day, time.min, tzinfo=now.tzinfo)


def week_start(now: datetime | None = None) -> datetime:
    return period_start(FREQUENCY_WEEKLY, now)


def index_events(
    events: Sequence[CompletionEvent], now: datetime,
) -> dict[tuple[str, str], list[_Entry]]:
    """Group the log by (task_id, user_id), keeping log positions."""
    index: dict[tuple[str, str], list[_Entry]] = defaultdict(list)
    for position, event in enumerate(events):
        index[(event.task_id, event.user_id)].append(
            (position, event, to_local(event.occurred_at, now))
        )
    return index


def _latest(entries: Iterable[_Entry]) -> CompletionEvent | None:
    latest = max(entries, key=lambda entry: (entry[2], entry[0]), default=None)
    return latest[1] if latest is not None else None


def _completed_since(entries: Iterable[_Entry], start: datetime) -> bool:
    latest = _latest(e for e in entries if e[2] >= start)
    return latest.completed if latest is not None else False


def _completed_on_day(entries: Iterable[_Entry], key: str) -> bool:
    latest = _latest(e for e in entries if day_key(e[2]) == key)
    return latest.completed if latest is not None else False


def is_completed_in_period(
    task_id: str,
    user_id: str,
    frequency: str,
    events: Sequence[CompletionEvent],
    now: datetime | None = None,
) -> bool:
    """Latest event for (task, user) since the period start, else False."""
    if now is None:
        now = local_now()
    entries = index_events(events, now).get((task_id, user_id), [])
    return _completed_since(entries, period_start(frequency, now))


def is_completed_today(
    task_id: str,
    user_id: str,
    events: Sequence[CompletionEvent],
    now: datetime | None = None,
) -> bool:
    """Like is_completed_in_period, but the window is today's day key."""
    if now is None:
        now = local_now()
    entries = index_events(events, now).get((task_id, user_id), [])
    return _completed_on_day(entries, day_key(now))


def completion_counts(
    tasks: Sequence[Task],
    user_id: str,
    frequency: str,
    events: Sequence[CompletionEvent],
    now: datetime | None = None,
) -> CompletionCount:
    """How many tasks of ``frequency`` the user has done this period."""
    if now is None:
        now = local_now()
    index = index_events(events, now)
    selected = [t for t in tasks if t.frequency == frequency]

    if frequency == FREQUENCY_DAILY:
        key = day_key(now)
        done = sum(
            1 for t in selected if _completed_on_day(index.get((t.id, user_id), []), key)
        )
    else:
        start = period_start(frequency, now)
        done = sum(
            1 for t in selected if _completed_since(index.get((t.id, user_id), []), start)
        )
    return CompletionCount(completed=done, total=len(selected))


def resolve_completed_by(
    task_id: str, events: Sequence[CompletionEvent],
) -> list[str]:
    """Users whose latest event (whole history) for the task is completed.

    This is what Task.completed_by must equal; used to rebuild the cache
    from the log.
    """
    # Any aware reference works here, only relative order matters.
    reference = datetime.now().astimezone()
    latest_by_user: dict[str, _Entry] = {}
    for position, event in enumerate(events):
        if event.task_id != task_id:
            continue
        entry = (position, event, to_local(event.occurred_at, reference))
        current = latest_by_user.get(event.user_id)
        if current is None or (entry[2], entry[0]) > (current[2], current[0]):
            latest_by_user[event.user_id] = entry
    return [user for user, entry in latest_by_user.items() if entry[1].completed]
