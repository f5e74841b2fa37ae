# src/daylist/tasks/analytics.py

from __future__ import annotations

"""
Progress and completion statistics.

- day_progress covers the full day list (recurring instances + manual tasks),
  the same list the day view shows.
- Week / trend / overall figures cover persisted tasks only: recurring
  definitions carry no creation date, so projecting them into past weeks
  would invent work that never existed.
"""

from dataclasses import dataclass
from datetime import date, timedelta

from .projector import day_tasks
from .task_models import Snapshot, iso_day


def percent(completed: int, total: int) -> int:
    """Rounded half-up integer percentage; 0 for an empty total."""
    if total <= 0:
        return 0
    return (completed * 200 + total) // (2 * total)


@dataclass(slots=True, frozen=True)
class Progress:
    completed: int
    total: int

    @property
    def percentage(self) -> int:
        return percent(self.completed, self.total)


@dataclass(slots=True, frozen=True)
class DayStats:
    day: date
    completed: int
    total: int

    @property
    def percentage(self) -> int:
        return percent(self.completed, self.total)


@dataclass(slots=True, frozen=True)
class WeekStats:
    start: date
    end: date
    completed: int
    total: int

    @property
    def percentage(self) -> int:
        return percent(self.completed, self.total)


def week_start(day: date) -> date:
    """Monday of the week containing `day`."""
    return day - timedelta(days=day.weekday())


def day_progress(snapshot: Snapshot, day: date) -> Progress:
    tasks = day_tasks(snapshot, day)
    return Progress(completed=sum(1 for t in tasks if t.completed), total=len(tasks))


def _dated_stats(snapshot: Snapshot, day: date) -> DayStats:
    tasks = snapshot.tasks_by_date.get(iso_day(day), ())
    return DayStats(day=day, completed=sum(1 for t in tasks if t.completed), total=len(tasks))


def week_days_stats(snapshot: Snapshot, day: date) -> list[DayStats]:
    start = week_start(day)
    return [_dated_stats(snapshot, start + timedelta(days=i)) for i in range(7)]


def weekly_trend(snapshot: Snapshot, day: date, weeks: int = 4) -> list[WeekStats]:
    """Last `weeks` Monday-start weeks ending with the week of `day`, oldest first."""
    current = week_start(day)
    out: list[WeekStats] = []
    for back in range(max(1, weeks) - 1, -1, -1):
        start = current - timedelta(weeks=back)
        days = [_dated_stats(snapshot, start + timedelta(days=i)) for i in range(7)]
        out.append(
            WeekStats(
                start=start,
                end=start + timedelta(days=6),
                completed=sum(d.completed for d in days),
                total=sum(d.total for d in days),
            )
        )
    return out


def category_counts(snapshot: Snapshot) -> dict[str, int]:
    """Task counts per list; empty lists are left out."""
    counts = {
        "today": sum(len(tasks) for tasks in snapshot.tasks_by_date.values()),
        "tasks": len(snapshot.no_deadline_tasks),
        "ideas": len(snapshot.ideas),
    }
    return {name: n for name, n in counts.items() if n > 0}


def overall_completion(snapshot: Snapshot) -> Progress:
    items = [t for tasks in snapshot.tasks_by_date.values() for t in tasks]
    items.extend(snapshot.no_deadline_tasks)
    items.extend(snapshot.ideas)
    return Progress(completed=sum(1 for t in items if t.completed), total=len(items))
