# src/daylist/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ..tasks.task_edits import IdAllocator
from ..tasks.task_models import Snapshot
from .ports import DocumentStore, SnapshotSink


@dataclass
class AppState:
    """
    Application state owned by the top-level controller.

    The snapshot is replaced wholesale by task_api operations (never edited in
    place); each replacement is handed to `saver` for background persistence.
    """

    # Settings object (real Settings or a test SimpleNamespace).
    settings: Any

    store: DocumentStore
    user_token: str
    saver: SnapshotSink | None = None

    snapshot: Snapshot = field(default_factory=Snapshot)
    current_date: date = field(default_factory=date.today)
    loaded: bool = False

    ids: IdAllocator = field(default_factory=IdAllocator)
    lock: threading.RLock = field(default_factory=threading.RLock)

    def commit(self, snapshot: Snapshot) -> bool:
        """Install a new snapshot and enqueue it for saving. False if nothing changed."""
        if snapshot is self.snapshot:
            return False
        self.snapshot = snapshot
        if self.saver is not None:
            self.saver.enqueue(snapshot)
        return True
