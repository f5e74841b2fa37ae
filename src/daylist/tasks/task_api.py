# src/daylist/tasks/task_api.py

from __future__ import annotations

"""
Named operations on AppState.

Every mutation follows the same shape:
  pure snapshot transform -> state.commit(new_snapshot) -> background save.
Connectors call these instead of touching state.snapshot directly.
"""

import logging
from collections.abc import Iterable
from datetime import date, timedelta

from ..core.errors import StoreUnavailable
from ..core.state import AppState
from . import projector, task_edits
from .task_models import (
    Frequency,
    GroupKind,
    ListItem,
    ListKind,
    ManualTask,
    RecurringInstance,
    RecurringTaskDefinition,
    Snapshot,
    TaskInstance,
)

logger = logging.getLogger(__name__)

Bucket = projector.Bucket


def load_snapshot(state: AppState) -> bool:
    """
    Load the user's document into state.

    A missing document means a new user (empty snapshot). A store failure is
    logged and the current in-memory snapshot is kept; returns False.
    """
    try:
        snap = state.store.load_all(state.user_token)
    except StoreUnavailable:
        logger.exception("Failed to load document token=%s; continuing with local state", state.user_token)
        return False

    with state.lock:
        if snap is None:
            logger.info("No document yet for token=%s; starting empty", state.user_token)
            snap = Snapshot()
        state.snapshot = snap
        state.loaded = True

    logger.info(
        "Loaded document token=%s dated_buckets=%d recurring=%d",
        state.user_token,
        len(snap.tasks_by_date),
        len(snap.daily_tasks),
    )
    return True


def _next_id(state: AppState) -> int:
    return state.ids.next_id(floor=max(state.snapshot.all_ids(), default=0))


def _resolve(state: AppState, where: Bucket | None) -> Bucket:
    return state.current_date if where is None else where


# ---- views ----


def day_groups(state: AppState, day: date | None = None) -> tuple[list[RecurringInstance], list[ManualTask]]:
    day = day or state.current_date
    with state.lock:
        snap = state.snapshot
    return projector.project_snapshot(snap, day), list(snap.manual_for(day))


def day_view(state: AppState, day: date | None = None) -> list[TaskInstance]:
    recurring, manual = day_groups(state, day)
    return projector.merge_with_manual(recurring, manual)


def list_view(state: AppState, list_kind: ListKind) -> list[ListItem]:
    with state.lock:
        return list(projector.bucket_items(state.snapshot, list_kind))


def list_recurring_tasks(state: AppState) -> list[RecurringTaskDefinition]:
    with state.lock:
        return list(state.snapshot.daily_tasks)


def set_current_date(state: AppState, day: date) -> date:
    with state.lock:
        state.current_date = day
    return day


def shift_current_date(state: AppState, days: int) -> date:
    with state.lock:
        state.current_date = state.current_date + timedelta(days=days)
        return state.current_date


# ---- mutations ----


def add_task(state: AppState, title: str, where: Bucket | None = None, *, emoji: str = "") -> int:
    """Add a manual task to a date (default: current date), the backlog, or ideas."""
    with state.lock:
        target = _resolve(state, where)
        task_id = _next_id(state)
        state.commit(task_edits.add_manual_task(state.snapshot, target, title, task_id=task_id, emoji=emoji))
    logger.info("Task added id=%s where=%s", task_id, target)
    return task_id


def rename_task(state: AppState, where: Bucket | None, task_id: int, title: str) -> bool:
    with state.lock:
        target = _resolve(state, where)
        return state.commit(task_edits.rename_task(state.snapshot, target, task_id, title))


def toggle_task(state: AppState, where: Bucket | None, task_id: int, *, is_recurring: bool = False) -> bool:
    with state.lock:
        target = _resolve(state, where)
        return state.commit(
            projector.toggle_completion(state.snapshot, target, task_id, is_recurring=is_recurring)
        )


def delete_task(state: AppState, where: Bucket | None, task_id: int, *, is_recurring: bool = False) -> bool:
    """Delete a manual task or idea. Raises PolicyViolation for recurring instances."""
    with state.lock:
        target = _resolve(state, where)
        changed = state.commit(
            projector.delete_manual_task(state.snapshot, target, task_id, is_recurring=is_recurring)
        )
    if changed:
        logger.info("Task deleted id=%s where=%s", task_id, target)
    return changed


def move_task_in_day(
    state: AppState,
    group: GroupKind,
    from_index: int,
    to_index: int,
    *,
    day: date | None = None,
    target_group: GroupKind | None = None,
) -> bool:
    with state.lock:
        target = day or state.current_date
        return state.commit(
            projector.reorder(
                state.snapshot,
                target,
                group,
                from_index,
                to_index,
                target_group=target_group,
            )
        )


def move_task_in_list(state: AppState, list_kind: ListKind, from_index: int, to_index: int) -> bool:
    with state.lock:
        return state.commit(projector.reorder_list(state.snapshot, list_kind, from_index, to_index))


def add_recurring_task(
    state: AppState,
    title: str,
    frequency: Frequency,
    days_of_week: Iterable[int] | None = None,
    *,
    emoji: str = "",
) -> int:
    with state.lock:
        task_id = _next_id(state)
        state.commit(
            task_edits.add_recurring_definition(
                state.snapshot,
                title,
                frequency,
                days_of_week,
                task_id=task_id,
                emoji=emoji,
            )
        )
    logger.info("Recurring task added id=%s frequency=%s", task_id, Frequency(frequency).value)
    return task_id


def delete_recurring_task(state: AppState, task_id: int) -> bool:
    """The only path that removes a recurring task (management view)."""
    with state.lock:
        changed = state.commit(task_edits.remove_recurring_definition(state.snapshot, task_id))
    if changed:
        logger.info("Recurring task deleted id=%s", task_id)
    return changed
