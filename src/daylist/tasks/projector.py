# src/daylist/tasks/projector.py

from __future__ import annotations

"""
Recurring-task projection.

Pure functions over Snapshot:
- which recurring definitions apply to a date, with that date's completion state,
- how they are ordered (per-date override first, then definition order),
- how they merge with the date's manual tasks,
- reorder / toggle / delete as snapshot -> snapshot transforms.

Nothing here talks to the store; callers persist the returned snapshots.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import date
from typing import TypeVar

from ..core.errors import RECURRING_DELETE_MESSAGE, PolicyViolation
from .task_models import (
    GroupKind,
    Idea,
    ListItem,
    ListKind,
    ManualTask,
    RecurringInstance,
    RecurringTaskDefinition,
    Snapshot,
    TaskInstance,
    iso_day,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

Bucket = date | ListKind


def project_for_date(
    day: date,
    definitions: Iterable[RecurringTaskDefinition],
    completion_record: Mapping[str, Iterable[int]],
    order_override: Mapping[str, Sequence[int]],
) -> list[RecurringInstance]:
    key = iso_day(day)
    done = set(completion_record.get(key, ()))

    applicable: dict[int, RecurringInstance] = {}
    for d in definitions:
        if not d.applies_on(day) or d.id in applicable:
            continue
        applicable[d.id] = RecurringInstance(
            id=d.id,
            title=d.title,
            frequency=d.frequency,
            days_of_week=d.days_of_week,
            completed=d.id in done,
            emoji=d.emoji,
        )

    ordered: list[RecurringInstance] = []
    seen: set[int] = set()
    for tid in order_override.get(key, ()):
        inst = applicable.get(tid)
        if inst is None or tid in seen:
            continue
        ordered.append(inst)
        seen.add(tid)

    ordered.extend(inst for tid, inst in applicable.items() if tid not in seen)
    return ordered


def project_snapshot(snapshot: Snapshot, day: date) -> list[RecurringInstance]:
    return project_for_date(
        day,
        snapshot.daily_tasks,
        snapshot.completed_regular_tasks,
        snapshot.regular_tasks_order,
    )


def merge_with_manual(
    recurring_instances: Iterable[RecurringInstance],
    manual_tasks: Iterable[ManualTask],
) -> list[TaskInstance]:
    """Recurring group first, then manual tasks in stored order (fixed display policy)."""
    merged: list[TaskInstance] = list(recurring_instances)
    merged.extend(manual_tasks)
    return merged


def day_tasks(snapshot: Snapshot, day: date) -> list[TaskInstance]:
    return merge_with_manual(project_snapshot(snapshot, day), snapshot.manual_for(day))


def move_item(items: Sequence[T], from_index: int, to_index: int) -> list[T] | None:
    """Pop at from_index and insert at to_index. None when the move is a no-op."""
    n = len(items)
    if from_index == to_index:
        return None
    if not (0 <= from_index < n and 0 <= to_index < n):
        return None
    out = list(items)
    item = out.pop(from_index)
    out.insert(to_index, item)
    return out


def reorder(
    snapshot: Snapshot,
    day: date,
    group_kind: GroupKind,
    from_index: int,
    to_index: int,
    *,
    target_group: GroupKind | None = None,
) -> Snapshot:
    if target_group is not None and target_group != group_kind:
        logger.debug("Cross-group move %s -> %s ignored", group_kind, target_group)
        return snapshot

    key = iso_day(day)

    if group_kind == GroupKind.RECURRING:
        current = [inst.id for inst in project_snapshot(snapshot, day)]
        moved = move_item(current, from_index, to_index)
        if moved is None:
            return snapshot
        order = dict(snapshot.regular_tasks_order)
        order[key] = tuple(moved)
        return replace(snapshot, regular_tasks_order=order)

    manual = move_item(snapshot.manual_for(day), from_index, to_index)
    if manual is None:
        return snapshot
    by_date = dict(snapshot.tasks_by_date)
    by_date[key] = tuple(manual)
    return replace(snapshot, tasks_by_date=by_date)


def reorder_list(snapshot: Snapshot, list_kind: ListKind, from_index: int, to_index: int) -> Snapshot:
    if list_kind == ListKind.IDEAS:
        ideas = move_item(snapshot.ideas, from_index, to_index)
        return snapshot if ideas is None else replace(snapshot, ideas=tuple(ideas))
    tasks = move_item(snapshot.no_deadline_tasks, from_index, to_index)
    return snapshot if tasks is None else replace(snapshot, no_deadline_tasks=tuple(tasks))


# ---- bucket helpers ----


def bucket_items(snapshot: Snapshot, where: Bucket) -> tuple[ListItem, ...]:
    if isinstance(where, ListKind):
        return snapshot.ideas if where == ListKind.IDEAS else snapshot.no_deadline_tasks
    return snapshot.manual_for(where)


def with_bucket(snapshot: Snapshot, where: Bucket, items: Iterable[ListItem]) -> Snapshot:
    """Return a snapshot with the bucket replaced. Empty dated buckets are dropped."""
    if isinstance(where, ListKind):
        if where == ListKind.IDEAS:
            return replace(snapshot, ideas=tuple(i for i in items if isinstance(i, Idea)))
        return replace(snapshot, no_deadline_tasks=tuple(i for i in items if isinstance(i, ManualTask)))

    key = iso_day(where)
    by_date = dict(snapshot.tasks_by_date)
    tasks = tuple(i for i in items if isinstance(i, ManualTask))
    if tasks:
        by_date[key] = tasks
    else:
        by_date.pop(key, None)
    return replace(snapshot, tasks_by_date=by_date)


def _is_recurring_on(snapshot: Snapshot, day: date, task_id: int) -> bool:
    return any(d.id == task_id and d.applies_on(day) for d in snapshot.daily_tasks)


def toggle_completion(
    snapshot: Snapshot,
    where: Bucket,
    task_id: int,
    is_recurring: bool = False,
) -> Snapshot:
    if is_recurring:
        if isinstance(where, ListKind) or not _is_recurring_on(snapshot, where, task_id):
            logger.debug("Toggle of unknown recurring id=%s ignored", task_id)
            return snapshot
        key = iso_day(where)
        completed = dict(snapshot.completed_regular_tasks)
        ids = frozenset(completed.get(key, frozenset())) ^ {task_id}
        if ids:
            completed[key] = ids
        else:
            completed.pop(key, None)
        return replace(snapshot, completed_regular_tasks=completed)

    items = bucket_items(snapshot, where)
    if not any(t.id == task_id for t in items):
        logger.debug("Toggle of unknown task id=%s ignored", task_id)
        return snapshot
    return with_bucket(
        snapshot,
        where,
        [replace(t, completed=not t.completed) if t.id == task_id else t for t in items],
    )


def delete_manual_task(
    snapshot: Snapshot,
    where: Bucket | None,
    task_id: int,
    *,
    is_recurring: bool = False,
) -> Snapshot:
    """
    Remove a manual task (or idea) from its bucket. `where=None` means the backlog.

    Raises PolicyViolation for recurring instances: those are deleted only via
    the recurring-task management operation.
    """
    if where is None:
        where = ListKind.TASKS

    if is_recurring:
        raise PolicyViolation(RECURRING_DELETE_MESSAGE)

    items = bucket_items(snapshot, where)
    if not any(t.id == task_id for t in items):
        if not isinstance(where, ListKind) and _is_recurring_on(snapshot, where, task_id):
            raise PolicyViolation(RECURRING_DELETE_MESSAGE)
        logger.debug("Delete of unknown task id=%s ignored", task_id)
        return snapshot

    return with_bucket(snapshot, where, [t for t in items if t.id != task_id])
