# tests/conftest.py

from __future__ import annotations

from datetime import date
from pathlib import Path
from types import SimpleNamespace

import pytest

from daylist.core.state import AppState
from daylist.tasks.task_models import Frequency, RecurringTaskDefinition

from .fakes import FakeDocumentStore, RecordingSink

# 2024-01-01 is a Monday (weekday index 1).
MONDAY = date(2024, 1, 1)
TUESDAY = date(2024, 1, 2)
WEDNESDAY = date(2024, 1, 3)


def daily(task_id: int, title: str = "") -> RecurringTaskDefinition:
    return RecurringTaskDefinition(id=task_id, title=title or f"daily-{task_id}")


def weekly(task_id: int, days: set[int], title: str = "") -> RecurringTaskDefinition:
    return RecurringTaskDefinition(
        id=task_id,
        title=title or f"weekly-{task_id}",
        frequency=Frequency.WEEKLY,
        days_of_week=frozenset(days),
    )


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="daylist-test",
        data_dir=tmp_path,
        local_store_path=tmp_path / "documents.json",
        user_token_path=tmp_path / "user_token",
        user_token=None,
        save_debounce_seconds=0.0,
    )


@pytest.fixture()
def store() -> FakeDocumentStore:
    return FakeDocumentStore()


@pytest.fixture()
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def state(settings: SimpleNamespace, store: FakeDocumentStore, sink: RecordingSink) -> AppState:
    """AppState wired with an in-memory store and a recording saver, pinned to MONDAY."""
    return AppState(
        settings=settings,
        store=store,
        user_token="tok12345",
        saver=sink,
        current_date=MONDAY,
    )
