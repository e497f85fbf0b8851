"""Change notification for completion records.

The store publishes an invalidate signal for a roll number after each
committed write. Signals carry no record data: subscribers re-fetch the
full snapshot and recompute from scratch, so out-of-order or coalesced
signals can never leave a view half-updated.
"""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING, Callable

import structlog

from credit_portal.core.errors import NotFoundError
from credit_portal.core.models import DEFAULT_CREDIT_TARGET
from credit_portal.core.progress import ProgressSummary, summarize

if TYPE_CHECKING:
    from credit_portal.core.store import ProgressStore

logger = structlog.get_logger(__name__)

ChangeCallback = Callable[[str], None]


class ChangeFeed:
    """In-process publish/subscribe channel keyed by roll number.

    Thread-safe: writers may publish from any thread.
    """

    def __init__(self):
        self._subscribers: dict[str, list[ChangeCallback]] = {}
        self._lock = threading.Lock()

    def subscribe(self, roll_no: str, on_change: ChangeCallback) -> Callable[[], None]:
        """Register a callback for a student's changes.

        Returns:
            A function that removes the subscription (safe to call twice)
        """
        with self._lock:
            self._subscribers.setdefault(roll_no, []).append(on_change)

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(roll_no, [])
                if on_change in callbacks:
                    callbacks.remove(on_change)
                if not callbacks:
                    self._subscribers.pop(roll_no, None)

        return unsubscribe

    def publish(self, roll_no: str) -> int:
        """Signal every subscriber of a student.

        A failing subscriber is logged and does not stop the others.

        Returns:
            Number of subscribers signalled
        """
        with self._lock:
            callbacks = list(self._subscribers.get(roll_no, []))

        for callback in callbacks:
            try:
                callback(roll_no)
            except Exception:
                logger.exception("change_feed.subscriber_failed", roll_no=roll_no)

        logger.debug("change_feed.published", roll_no=roll_no, subscribers=len(callbacks))
        return len(callbacks)

    def subscriber_count(self, roll_no: str) -> int:
        with self._lock:
            return len(self._subscribers.get(roll_no, []))


class LiveProgress:
    """Keeps a student's progress summary current with the change feed.

    Each signal triggers a full re-fetch and recompute. Signals that pile up
    while a recompute is pending are coalesced into one.

    Usage:
        async with LiveProgress(store, "VU1F2021") as live:
            summary = live.snapshot()
            summary = await live.next_summary()
    """

    def __init__(
        self,
        store: ProgressStore,
        roll_no: str,
        credit_target: int = DEFAULT_CREDIT_TARGET,
    ):
        self.store = store
        self.roll_no = roll_no
        self.credit_target = credit_target
        self._signals: asyncio.Queue[str] = asyncio.Queue()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._unsubscribe: Callable[[], None] | None = None

    async def __aenter__(self) -> LiveProgress:
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    def start(self) -> None:
        """Subscribe to the store's changes. Must run inside the event loop."""
        self._loop = asyncio.get_running_loop()
        self._unsubscribe = self.store.subscribe_to_changes(self.roll_no, self._on_change)
        logger.debug("live_progress.started", roll_no=self.roll_no)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
            logger.debug("live_progress.closed", roll_no=self.roll_no)

    def _on_change(self, roll_no: str) -> None:
        if self._loop is None or self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._signals.put_nowait, roll_no)

    @property
    def pending_signals(self) -> int:
        return self._signals.qsize()

    def snapshot(self) -> ProgressSummary:
        """Re-fetch everything and recompute the summary.

        Raises:
            NotFoundError: If the student no longer exists
        """
        student = self.store.fetch_student(self.roll_no)
        if student is None:
            raise NotFoundError("student", self.roll_no)
        subjects = self.store.fetch_subjects()
        records = self.store.fetch_completion_records(self.roll_no)
        return summarize(student, subjects, records, self.credit_target)

    async def next_summary(self, timeout: float | None = None) -> ProgressSummary:
        """Wait for the next invalidate signal and return a fresh summary.

        Raises:
            asyncio.TimeoutError: If no signal arrives within timeout
        """
        await asyncio.wait_for(self._signals.get(), timeout=timeout)
        while not self._signals.empty():
            self._signals.get_nowait()
        return self.snapshot()
