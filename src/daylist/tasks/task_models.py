# src/daylist/tasks/task_models.py

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import Any, ClassVar

logger = logging.getLogger(__name__)

WEEKDAY_RANGE = range(0, 7)  # 0 = Sunday .. 6 = Saturday


class Frequency(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"

    @classmethod
    def from_raw(cls, raw: Any) -> Frequency:
        if isinstance(raw, str):
            try:
                return cls(raw.strip().lower())
            except ValueError:
                pass
        return cls.DAILY


class TaskKind(StrEnum):
    MANUAL = "manual"
    RECURRING = "recurring"
    IDEA = "idea"


class GroupKind(StrEnum):
    """The two independently ordered groups of a day view."""

    RECURRING = "recurring"
    MANUAL = "manual"


class ListKind(StrEnum):
    """Undated lists. Dated buckets are addressed by a `date` instead."""

    TASKS = "tasks"
    IDEAS = "ideas"


def iso_day(day: date) -> str:
    return day.isoformat()


def weekday_index(day: date) -> int:
    """Day of week with 0 = Sunday .. 6 = Saturday."""
    return (day.weekday() + 1) % 7


@dataclass(slots=True, frozen=True)
class RecurringTaskDefinition:
    id: int
    title: str
    frequency: Frequency = Frequency.DAILY
    days_of_week: frozenset[int] = frozenset()
    emoji: str = ""

    def applies_on(self, day: date) -> bool:
        if self.frequency == Frequency.DAILY:
            return True
        return weekday_index(day) in self.days_of_week


@dataclass(slots=True, frozen=True)
class ManualTask:
    id: int
    title: str
    completed: bool = False
    emoji: str = ""

    kind: ClassVar[TaskKind] = TaskKind.MANUAL
    is_recurring: ClassVar[bool] = False


@dataclass(slots=True, frozen=True)
class Idea:
    id: int
    title: str
    completed: bool = False
    emoji: str = ""

    kind: ClassVar[TaskKind] = TaskKind.IDEA
    is_recurring: ClassVar[bool] = False


@dataclass(slots=True, frozen=True)
class RecurringInstance:
    """A recurring definition materialized for one date (never persisted)."""

    id: int
    title: str
    frequency: Frequency
    days_of_week: frozenset[int]
    completed: bool
    emoji: str = ""

    kind: ClassVar[TaskKind] = TaskKind.RECURRING
    is_recurring: ClassVar[bool] = True


TaskInstance = ManualTask | RecurringInstance | Idea
ListItem = ManualTask | Idea


@dataclass(slots=True, frozen=True)
class Snapshot:
    """
    In-memory image of one user document.

    Treated as immutable: every operation returns a new Snapshot and never
    mutates the dicts/tuples of an existing one.
    """

    tasks_by_date: dict[str, tuple[ManualTask, ...]] = field(default_factory=dict)
    no_deadline_tasks: tuple[ManualTask, ...] = ()
    ideas: tuple[Idea, ...] = ()
    daily_tasks: tuple[RecurringTaskDefinition, ...] = ()
    completed_regular_tasks: dict[str, frozenset[int]] = field(default_factory=dict)
    regular_tasks_order: dict[str, tuple[int, ...]] = field(default_factory=dict)

    def manual_for(self, day: date) -> tuple[ManualTask, ...]:
        return self.tasks_by_date.get(iso_day(day), ())

    def all_ids(self) -> set[int]:
        ids: set[int] = {d.id for d in self.daily_tasks}
        for bucket in self.tasks_by_date.values():
            ids.update(t.id for t in bucket)
        ids.update(t.id for t in self.no_deadline_tasks)
        ids.update(t.id for t in self.ideas)
        return ids

    # ---- document (de)serialization ----

    def to_document(self) -> dict[str, Any]:
        return {
            "tasksByDate": {
                day: [_task_to_dict(t) for t in tasks] for day, tasks in self.tasks_by_date.items()
            },
            "noDeadlineTasks": [_task_to_dict(t) for t in self.no_deadline_tasks],
            "ideas": [_task_to_dict(t) for t in self.ideas],
            "dailyTasks": [_definition_to_dict(d) for d in self.daily_tasks],
            "completedRegularTasks": {
                day: sorted(ids) for day, ids in self.completed_regular_tasks.items()
            },
            "regularTasksOrder": {day: list(ids) for day, ids in self.regular_tasks_order.items()},
        }

    @classmethod
    def from_document(cls, doc: Mapping[str, Any] | None) -> Snapshot:
        """
        Lenient parse of a stored document.

        Malformed entries are skipped (logged at DEBUG); missing sections default to empty.
        """
        if not isinstance(doc, Mapping):
            return cls()

        tasks_by_date: dict[str, tuple[ManualTask, ...]] = {}
        raw_by_date = doc.get("tasksByDate")
        if isinstance(raw_by_date, Mapping):
            for day, items in raw_by_date.items():
                if not isinstance(day, str) or not isinstance(items, list):
                    continue
                tasks_by_date[day] = tuple(_parse_items(items, ManualTask))

        completed: dict[str, frozenset[int]] = {}
        raw_completed = doc.get("completedRegularTasks")
        if isinstance(raw_completed, Mapping):
            for day, ids in raw_completed.items():
                if isinstance(day, str) and isinstance(ids, list):
                    completed[day] = frozenset(_parse_ids(ids))

        order: dict[str, tuple[int, ...]] = {}
        raw_order = doc.get("regularTasksOrder")
        if isinstance(raw_order, Mapping):
            for day, ids in raw_order.items():
                if isinstance(day, str) and isinstance(ids, list):
                    order[day] = tuple(_parse_ids(ids))

        definitions: list[RecurringTaskDefinition] = []
        raw_defs = doc.get("dailyTasks")
        if isinstance(raw_defs, list):
            for raw in raw_defs:
                d = _parse_definition(raw)
                if d is not None:
                    definitions.append(d)

        return cls(
            tasks_by_date=tasks_by_date,
            no_deadline_tasks=tuple(_parse_items(_as_list(doc.get("noDeadlineTasks")), ManualTask)),
            ideas=tuple(_parse_items(_as_list(doc.get("ideas")), Idea)),
            daily_tasks=tuple(definitions),
            completed_regular_tasks=completed,
            regular_tasks_order=order,
        )


def _as_list(raw: Any) -> list[Any]:
    return raw if isinstance(raw, list) else []


def _coerce_id(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().lstrip("-").isdigit():
        return int(raw.strip())
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    return None


def _parse_ids(raw: Iterable[Any]) -> list[int]:
    out: list[int] = []
    for item in raw:
        tid = _coerce_id(item)
        if tid is not None:
            out.append(tid)
    return out


def _parse_items(raw: list[Any], factory: type[ManualTask] | type[Idea]) -> list[Any]:
    out: list[Any] = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        tid = _coerce_id(item.get("id"))
        title = item.get("title")
        if tid is None or not isinstance(title, str):
            logger.debug("Skipping malformed task entry: %r", item)
            continue
        out.append(
            factory(
                id=tid,
                title=title,
                completed=item.get("completed") is True,
                emoji=str(item.get("emoji") or ""),
            )
        )
    return out


def _parse_definition(raw: Any) -> RecurringTaskDefinition | None:
    if not isinstance(raw, Mapping):
        return None
    tid = _coerce_id(raw.get("id"))
    title = raw.get("title")
    if tid is None or not isinstance(title, str):
        logger.debug("Skipping malformed recurring definition: %r", raw)
        return None
    frequency = Frequency.from_raw(raw.get("frequency"))
    days: frozenset[int] = frozenset()
    if frequency == Frequency.WEEKLY:
        days = frozenset(d for d in _parse_ids(_as_list(raw.get("daysOfWeek"))) if d in WEEKDAY_RANGE)
    return RecurringTaskDefinition(
        id=tid,
        title=title,
        frequency=frequency,
        days_of_week=days,
        emoji=str(raw.get("emoji") or ""),
    )


def _task_to_dict(task: ManualTask | Idea) -> dict[str, Any]:
    return {"id": task.id, "title": task.title, "emoji": task.emoji, "completed": task.completed}


def _definition_to_dict(d: RecurringTaskDefinition) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": d.id,
        "title": d.title,
        "emoji": d.emoji,
        "frequency": d.frequency.value,
    }
    if d.frequency == Frequency.WEEKLY:
        out["daysOfWeek"] = sorted(d.days_of_week)
    return out
