# tests/fakes.py

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from typing import Any

from daylist.core.errors import StoreUnavailable
from daylist.core.ports import DocumentStore, SnapshotSink
from daylist.tasks.task_models import Snapshot


class FakeDocumentStore(DocumentStore):
    """
    In-memory DocumentStore.

    Documents go through a real JSON encode/decode so tests see exactly what a
    remote store would hand back.
    """

    def __init__(self, docs: dict[str, dict[str, Any]] | None = None) -> None:
        self.docs: dict[str, str] = {k: json.dumps(v) for k, v in (docs or {}).items()}
        self.saves: list[tuple[str, Snapshot]] = []
        self.loads = 0

    def load_all(self, user_token: str) -> Snapshot | None:
        self.loads += 1
        raw = self.docs.get(user_token)
        if raw is None:
            return None
        return Snapshot.from_document(json.loads(raw))

    def save_all(self, user_token: str, snapshot: Snapshot) -> None:
        self.docs[user_token] = json.dumps(snapshot.to_document())
        self.saves.append((user_token, snapshot))

    def describe(self) -> str:
        return "fake"


class FailingDocumentStore(DocumentStore):
    """Every call fails the way an unreachable remote would."""

    def __init__(self) -> None:
        self.calls = 0

    def load_all(self, user_token: str) -> Snapshot | None:
        self.calls += 1
        raise StoreUnavailable("connection refused")

    def save_all(self, user_token: str, snapshot: Snapshot) -> None:
        self.calls += 1
        raise StoreUnavailable("connection refused")

    def describe(self) -> str:
        return "failing"


@dataclass(slots=True)
class RecordingSink(SnapshotSink):
    """Stands in for the save queue: records what the controller enqueues."""

    enqueued: list[Snapshot] = field(default_factory=list)

    def enqueue(self, snapshot: Snapshot) -> None:
        self.enqueued.append(snapshot)


class FlakyDocumentStore(FakeDocumentStore):
    """Saves fail while `down` is set, then behave like FakeDocumentStore."""

    def __init__(self) -> None:
        super().__init__()
        self.down = True
        self.failed_saves = 0

    def save_all(self, user_token: str, snapshot: Snapshot) -> None:
        if self.down:
            self.failed_saves += 1
            raise StoreUnavailable("connection refused")
        super().save_all(user_token, snapshot)


class SlowFirstSaveStore(FakeDocumentStore):
    """The first save blocks until `release` is set; `saves` records completion order."""

    def __init__(self) -> None:
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def save_all(self, user_token: str, snapshot: Snapshot) -> None:
        if not self.started.is_set():
            self.started.set()
            self.release.wait(timeout=5.0)
        super().save_all(user_token, snapshot)
