# tests/test_projector.py

from __future__ import annotations

import copy
from datetime import date, timedelta

import pytest

from daylist.core.errors import PolicyViolation
from daylist.tasks.projector import (
    delete_manual_task,
    merge_with_manual,
    project_for_date,
    project_snapshot,
    reorder,
    reorder_list,
    toggle_completion,
)
from daylist.tasks.task_edits import remove_recurring_definition
from daylist.tasks.task_models import (
    GroupKind,
    Idea,
    ListKind,
    ManualTask,
    RecurringInstance,
    Snapshot,
    weekday_index,
)

from .conftest import MONDAY, TUESDAY, WEDNESDAY, daily, weekly


def _ids(items) -> list[int]:
    return [t.id for t in items]


def test_weekday_index_uses_sunday_zero() -> None:
    assert weekday_index(date(2023, 12, 31)) == 0  # Sunday
    assert weekday_index(MONDAY) == 1
    assert weekday_index(date(2024, 1, 6)) == 6  # Saturday


def test_daily_definition_appears_on_every_date() -> None:
    defs = [daily(1)]
    for offset in range(14):
        day = MONDAY + timedelta(days=offset)
        assert _ids(project_for_date(day, defs, {}, {})) == [1]


def test_weekly_definition_appears_only_on_listed_days() -> None:
    defs = [weekly(5, {1, 3})]
    sunday = date(2023, 12, 31)
    for offset in range(7):
        day = sunday + timedelta(days=offset)
        expected = [5] if weekday_index(day) in {1, 3} else []
        assert _ids(project_for_date(day, defs, {}, {})) == expected


def test_instances_carry_definition_fields_and_date_completion() -> None:
    defs = [weekly(5, {1}, title="Gym")]
    [inst] = project_for_date(MONDAY, defs, {"2024-01-01": [5]}, {})
    assert isinstance(inst, RecurringInstance)
    assert inst.is_recurring is True
    assert inst.title == "Gym"
    assert inst.days_of_week == frozenset({1})
    assert inst.completed is True


def test_completion_toggle_is_independent_per_date() -> None:
    snap = Snapshot(daily_tasks=(daily(7),))

    toggled = toggle_completion(snap, MONDAY, 7, is_recurring=True)

    assert project_snapshot(toggled, MONDAY)[0].completed is True
    assert project_snapshot(toggled, TUESDAY)[0].completed is False
    assert "2024-01-02" not in toggled.completed_regular_tasks

    back = toggle_completion(toggled, MONDAY, 7, is_recurring=True)
    assert project_snapshot(back, MONDAY)[0].completed is False
    assert back.completed_regular_tasks == {}


def test_override_ids_come_first_then_definition_order() -> None:
    defs = [daily(1, "A"), daily(2, "B"), daily(3, "C")]
    out = project_for_date(MONDAY, defs, {}, {"2024-01-01": [3, 1]})
    assert [t.title for t in out] == ["C", "A", "B"]


def test_stray_override_ids_are_dropped() -> None:
    defs = [daily(1, "A"), daily(2, "B"), daily(3, "C")]
    out = project_for_date(MONDAY, defs, {}, {"2024-01-01": [99, 1]})
    assert [t.title for t in out] == ["A", "B", "C"]


def test_override_ignores_duplicates_and_non_applicable_ids() -> None:
    defs = [daily(1), weekly(2, {3}), daily(3)]
    # Monday: weekly(2) does not apply, so it is dropped from the override.
    out = project_for_date(MONDAY, defs, {}, {"2024-01-01": [3, 2, 3, 1]})
    assert _ids(out) == [3, 1]


def test_override_for_another_date_is_not_used() -> None:
    defs = [daily(1), daily(2)]
    out = project_for_date(TUESDAY, defs, {}, {"2024-01-01": [2, 1]})
    assert _ids(out) == [1, 2]


def test_projection_does_not_mutate_inputs() -> None:
    defs = [daily(1), daily(2)]
    completion = {"2024-01-01": {1}}
    order = {"2024-01-01": [2, 99]}
    before = (list(defs), copy.deepcopy(completion), copy.deepcopy(order))

    project_for_date(MONDAY, defs, completion, order)

    assert (defs, completion, order) == before


def test_merge_puts_recurring_before_manual() -> None:
    x = RecurringInstance(id=1, title="X", frequency=daily(1).frequency, days_of_week=frozenset(), completed=False)
    y = ManualTask(id=2, title="Y")
    assert merge_with_manual([x], [y]) == [x, y]


def test_reorder_recurring_writes_only_that_dates_override() -> None:
    snap = Snapshot(daily_tasks=(daily(1), daily(2), daily(3)))

    moved = reorder(snap, MONDAY, GroupKind.RECURRING, 0, 2)

    assert moved.regular_tasks_order == {"2024-01-01": (2, 3, 1)}
    assert _ids(project_snapshot(moved, MONDAY)) == [2, 3, 1]
    assert _ids(project_snapshot(moved, TUESDAY)) == [1, 2, 3]
    assert moved.tasks_by_date == snap.tasks_by_date


def test_reorder_manual_writes_only_the_date_bucket() -> None:
    bucket = (ManualTask(1, "a"), ManualTask(2, "b"), ManualTask(3, "c"))
    snap = Snapshot(tasks_by_date={"2024-01-01": bucket}, daily_tasks=(daily(9),))

    moved = reorder(snap, MONDAY, GroupKind.MANUAL, 2, 0)

    assert _ids(moved.tasks_by_date["2024-01-01"]) == [3, 1, 2]
    assert moved.regular_tasks_order == {}
    assert _ids(snap.tasks_by_date["2024-01-01"]) == [1, 2, 3]


def test_cross_group_and_degenerate_moves_are_noops() -> None:
    snap = Snapshot(
        tasks_by_date={"2024-01-01": (ManualTask(1, "a"), ManualTask(2, "b"))},
        daily_tasks=(daily(8), daily(9)),
    )

    assert reorder(snap, MONDAY, GroupKind.RECURRING, 0, 1, target_group=GroupKind.MANUAL) is snap
    assert reorder(snap, MONDAY, GroupKind.MANUAL, 1, 1) is snap
    assert reorder(snap, MONDAY, GroupKind.MANUAL, 0, 5) is snap
    assert reorder(snap, MONDAY, GroupKind.RECURRING, -1, 0) is snap


def test_reorder_list_moves_backlog_and_ideas() -> None:
    snap = Snapshot(
        no_deadline_tasks=(ManualTask(1, "a"), ManualTask(2, "b")),
        ideas=(Idea(3, "x"), Idea(4, "y"), Idea(5, "z")),
    )
    assert _ids(reorder_list(snap, ListKind.TASKS, 0, 1).no_deadline_tasks) == [2, 1]
    assert _ids(reorder_list(snap, ListKind.IDEAS, 2, 0).ideas) == [5, 3, 4]


def test_toggle_manual_task_and_unknown_ids() -> None:
    snap = Snapshot(
        tasks_by_date={"2024-01-01": (ManualTask(1, "a"),)},
        ideas=(Idea(2, "idea"),),
        daily_tasks=(weekly(3, {3}),),
    )

    toggled = toggle_completion(snap, MONDAY, 1)
    assert toggled.tasks_by_date["2024-01-01"][0].completed is True

    assert toggle_completion(snap, ListKind.IDEAS, 2).ideas[0].completed is True
    assert toggle_completion(snap, MONDAY, 404) is snap
    assert toggle_completion(snap, TUESDAY, 1) is snap
    # weekly(3) runs on Wednesdays only
    assert toggle_completion(snap, MONDAY, 3, is_recurring=True) is snap
    assert toggle_completion(snap, WEDNESDAY, 3, is_recurring=True) is not snap


def test_delete_manual_task_from_each_bucket() -> None:
    snap = Snapshot(
        tasks_by_date={"2024-01-01": (ManualTask(1, "a"), ManualTask(2, "b"))},
        no_deadline_tasks=(ManualTask(3, "c"),),
        ideas=(Idea(4, "d"),),
    )

    out = delete_manual_task(snap, MONDAY, 1)
    assert _ids(out.tasks_by_date["2024-01-01"]) == [2]

    assert delete_manual_task(snap, None, 3).no_deadline_tasks == ()
    assert delete_manual_task(snap, ListKind.IDEAS, 4).ideas == ()
    assert delete_manual_task(snap, MONDAY, 404) is snap

    emptied = delete_manual_task(delete_manual_task(snap, MONDAY, 1), MONDAY, 2)
    assert "2024-01-01" not in emptied.tasks_by_date


def test_deleting_a_recurring_instance_is_a_policy_violation() -> None:
    snap = Snapshot(
        tasks_by_date={"2024-01-01": (ManualTask(1, "a"),)},
        daily_tasks=(daily(7),),
        completed_regular_tasks={"2024-01-01": frozenset({7})},
    )
    before = snap.to_document()

    with pytest.raises(PolicyViolation, match="recurring-task management view"):
        delete_manual_task(snap, MONDAY, 7)
    with pytest.raises(PolicyViolation):
        delete_manual_task(snap, MONDAY, 1, is_recurring=True)

    assert snap.to_document() == before


def test_removed_definition_disappears_and_leaves_stale_ids_alone() -> None:
    snap = Snapshot(
        daily_tasks=(daily(1), daily(2)),
        completed_regular_tasks={"2024-01-01": frozenset({1})},
        regular_tasks_order={"2024-01-01": (1, 2)},
    )

    out = remove_recurring_definition(snap, 1)

    for offset in range(7):
        assert _ids(project_snapshot(out, MONDAY + timedelta(days=offset))) == [2]
    assert out.completed_regular_tasks == {"2024-01-01": frozenset({1})}
    assert out.regular_tasks_order == {"2024-01-01": (1, 2)}
