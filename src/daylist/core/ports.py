# src/daylist/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The controller and the save queue depend on Protocols instead of concrete
stores. This keeps the remote/local backends swappable and makes testing easier.
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..tasks.task_models import Snapshot


class DocumentStore(Protocol):
    """
    One JSON document per user token, saved and loaded as a whole.

    - load_all returns None when no document exists yet (new user).
    - both methods raise StoreUnavailable on transport / IO failures.
    """

    def load_all(self, user_token: str) -> Snapshot | None: ...

    def save_all(self, user_token: str, snapshot: Snapshot) -> None: ...

    def describe(self) -> str: ...


class SnapshotSink(Protocol):
    """Where the controller hands freshly mutated snapshots (the save queue)."""

    def enqueue(self, snapshot: Snapshot) -> None: ...
