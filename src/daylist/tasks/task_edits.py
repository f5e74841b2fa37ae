# src/daylist/tasks/task_edits.py

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import replace

from .projector import Bucket, bucket_items, with_bucket
from .task_models import (
    WEEKDAY_RANGE,
    Frequency,
    Idea,
    ListKind,
    ManualTask,
    RecurringTaskDefinition,
    Snapshot,
)

logger = logging.getLogger(__name__)


class IdAllocator:
    """
    Time-based ids (milliseconds), strictly increasing within a session.

    `floor` lets callers bump past ids already present in a loaded snapshot,
    so a clock that went backwards cannot produce a duplicate.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self, floor: int = 0) -> int:
        with self._lock:
            candidate = int(self._clock() * 1000)
            candidate = max(candidate, self._last + 1, floor + 1)
            self._last = candidate
            return candidate


def _clean_title(title: str) -> str:
    clean = (title or "").strip()
    if not clean:
        raise ValueError("title is required")
    return clean


def add_manual_task(
    snapshot: Snapshot,
    where: Bucket,
    title: str,
    *,
    task_id: int,
    emoji: str = "",
) -> Snapshot:
    """Append a task to a dated bucket, the backlog, or ideas."""
    clean = _clean_title(title)
    items = list(bucket_items(snapshot, where))
    if where == ListKind.IDEAS:
        items.append(Idea(id=task_id, title=clean, emoji=emoji))
    else:
        items.append(ManualTask(id=task_id, title=clean, emoji=emoji))
    logger.debug("Task added id=%s where=%s", task_id, where)
    return with_bucket(snapshot, where, items)


def rename_task(snapshot: Snapshot, where: Bucket, task_id: int, title: str) -> Snapshot:
    clean = _clean_title(title)
    items = bucket_items(snapshot, where)
    if not any(t.id == task_id for t in items):
        return snapshot
    return with_bucket(
        snapshot,
        where,
        [replace(t, title=clean) if t.id == task_id else t for t in items],
    )


def normalize_days(days: Iterable[int] | None) -> frozenset[int]:
    out: set[int] = set()
    for d in days or ():
        if int(d) not in WEEKDAY_RANGE:
            raise ValueError(f"day of week out of range: {d}")
        out.add(int(d))
    return frozenset(out)


def add_recurring_definition(
    snapshot: Snapshot,
    title: str,
    frequency: Frequency,
    days_of_week: Iterable[int] | None = None,
    *,
    task_id: int,
    emoji: str = "",
) -> Snapshot:
    clean = _clean_title(title)
    frequency = Frequency(frequency)
    days = normalize_days(days_of_week) if frequency == Frequency.WEEKLY else frozenset()
    if frequency == Frequency.WEEKLY and not days:
        raise ValueError("weekly recurring tasks need at least one day of week")

    definition = RecurringTaskDefinition(
        id=task_id,
        title=clean,
        frequency=frequency,
        days_of_week=days,
        emoji=emoji,
    )
    logger.debug("Recurring task added id=%s frequency=%s days=%s", task_id, frequency.value, sorted(days))
    return replace(snapshot, daily_tasks=(*snapshot.daily_tasks, definition))


def remove_recurring_definition(snapshot: Snapshot, task_id: int) -> Snapshot:
    """
    Drop a definition. Per-date completion/order entries that still mention the
    id are left alone; projection ignores them.
    """
    remaining = tuple(d for d in snapshot.daily_tasks if d.id != task_id)
    if len(remaining) == len(snapshot.daily_tasks):
        return snapshot
    return replace(snapshot, daily_tasks=remaining)
