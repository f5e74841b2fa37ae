# src/daylist/tasks/save_queue.py

from __future__ import annotations

"""
Debounced background saver.

Mutations enqueue the whole snapshot; the worker waits a short coalescing
window and then saves only the latest one. Persistence is eventual and
last-write-wins: local state is never rolled back when a save fails, and the
failed snapshot stays pending until the next flush succeeds.
"""

import asyncio
import contextlib
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from ..core.errors import StoreUnavailable
from ..core.ports import DocumentStore
from .task_models import Snapshot

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[Exception], None]


class DebouncedSaveQueue:
    def __init__(
        self,
        store: DocumentStore,
        user_token: str,
        *,
        delay_seconds: float = 0.5,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self._store = store
        self._token = user_token
        self._delay = max(0.0, float(delay_seconds))
        self.on_error = on_error

        self._lock = threading.Lock()
        self._pending: Snapshot | None = None
        self._stopping = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._wakeup: asyncio.Event | None = None
        self._stop_evt: asyncio.Event | None = None
        # One save in flight at a time; the worker and /sync both flush through it.
        self._save_lock = asyncio.Lock()

        self.saves = 0
        self.last_saved: Snapshot | None = None
        self.last_error: Exception | None = None

    @property
    def has_pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    # ---- producer side (any thread) ----

    def enqueue(self, snapshot: Snapshot) -> None:
        with self._lock:
            self._pending = snapshot
            loop, wakeup = self._loop, self._wakeup
        if loop is not None and wakeup is not None:
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(wakeup.set)

    def request_stop(self) -> None:
        """Ask the worker to flush what is pending and return."""
        with self._lock:
            self._stopping = True
            loop, wakeup, stop_evt = self._loop, self._wakeup, self._stop_evt
        if loop is not None and wakeup is not None and stop_evt is not None:
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(wakeup.set)
                loop.call_soon_threadsafe(stop_evt.set)

    # ---- saving ----

    def _take(self) -> Snapshot | None:
        with self._lock:
            snap, self._pending = self._pending, None
            return snap

    def _save_sync(self, snapshot: Snapshot) -> bool:
        try:
            self._store.save_all(self._token, snapshot)
        except StoreUnavailable as exc:
            logger.exception("Background save failed token=%s", self._token)
            # Keep it unsaved unless a newer snapshot arrived meanwhile.
            with self._lock:
                self._pending = self._pending or snapshot
            self.last_error = exc
            if self.on_error is not None:
                try:
                    self.on_error(exc)
                except Exception:
                    logger.debug("Save error callback failed.", exc_info=True)
            return False

        self.saves += 1
        self.last_saved = snapshot
        self.last_error = None
        logger.debug("Snapshot saved token=%s saves=%s", self._token, self.saves)
        return True

    async def flush(self) -> bool:
        """Save the pending snapshot now. True if nothing failed."""
        async with self._save_lock:
            # Taken under the lock so a later flush never overtakes an earlier one.
            snap = self._take()
            if snap is None:
                return True
            return await asyncio.to_thread(self._save_sync, snap)

    def flush_blocking(self, timeout: float | None = 30.0) -> bool:
        """
        Flush from a non-async caller (console thread).

        Routed through the worker loop when it runs, otherwise saved inline.
        """
        with self._lock:
            loop = self._loop
        if loop is not None and loop.is_running():
            fut = asyncio.run_coroutine_threadsafe(self.flush(), loop)
            return fut.result(timeout=timeout)
        snap = self._take()
        if snap is None:
            return True
        return self._save_sync(snap)

    # ---- worker ----

    async def run(self) -> None:
        """
        Worker loop. Returns after request_stop() (with a final flush).
        Cancelling the task stops it immediately without flushing.
        """
        wakeup = asyncio.Event()
        stop_evt = asyncio.Event()
        with self._lock:
            self._loop = asyncio.get_running_loop()
            self._wakeup = wakeup
            self._stop_evt = stop_evt
            if self._stopping:
                stop_evt.set()
            if self._pending is not None or self._stopping:
                wakeup.set()

        logger.info("Save queue started (delay=%.2fs)", self._delay)
        try:
            while not stop_evt.is_set():
                await wakeup.wait()
                wakeup.clear()

                # Coalescing window: later enqueues replace the pending snapshot.
                if self._delay > 0 and not stop_evt.is_set():
                    with contextlib.suppress(TimeoutError):
                        await asyncio.wait_for(stop_evt.wait(), timeout=self._delay)

                await self.flush()
        finally:
            with self._lock:
                self._loop = None
                self._wakeup = None
                self._stop_evt = None

        await self.flush()
        if self.has_pending:
            logger.warning("Save queue stopped with unsaved changes token=%s", self._token)
        logger.info("Save queue stopped (saves=%s)", self.saves)


@dataclass(slots=True)
class SaveQueueBackgroundRunner:
    thread: threading.Thread
    queue: DebouncedSaveQueue

    def stop(self) -> None:
        self.queue.request_stop()

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_save_queue_in_background(queue: DebouncedSaveQueue) -> SaveQueueBackgroundRunner:
    """
    Run the save worker on its own event loop in a daemon thread.

    The console REPL blocks on input(), so the worker cannot share its thread.
    """
    ready = threading.Event()

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            loop.call_soon(ready.set)
            loop.run_until_complete(queue.run())
        except Exception:
            logger.exception("Save queue worker crashed.")
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="daylist-save-queue", daemon=True)
    t.start()
    ready.wait(timeout=5.0)
    logger.info("Save queue background thread started.")
    return SaveQueueBackgroundRunner(thread=t, queue=queue)
