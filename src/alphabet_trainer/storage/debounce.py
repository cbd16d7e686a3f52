"""Write-coalescing queue in front of a progress store."""

import asyncio
import time
from collections.abc import Callable

import structlog

from alphabet_trainer.models.progress import UserProgress
from alphabet_trainer.storage.progress_store import ProgressStore

logger = structlog.get_logger()


class DebouncedWriter:
    """Batches rapid saves into one write (last write wins).

    Each ``submit`` replaces the pending snapshot and restarts the quiet
    window. Nothing is written until ``poll`` observes an elapsed window, or
    ``flush`` forces the write. Save failures are logged, never raised.

    Args:
        store: Destination store.
        delay_seconds: Quiet window before a pending snapshot is written.
        clock: Monotonic time source.
    """

    def __init__(
        self,
        store: ProgressStore,
        delay_seconds: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.delay_seconds = delay_seconds
        self._clock = clock
        self._pending: UserProgress | None = None
        self._deadline: float | None = None
        self.writes = 0
        self.coalesced = 0

    @property
    def pending(self) -> UserProgress | None:
        return self._pending

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def submit(self, progress: UserProgress) -> None:
        if self._pending is not None:
            self.coalesced += 1
        self._pending = progress
        self._deadline = self._clock() + self.delay_seconds

    def poll(self) -> bool:
        """Write the pending snapshot if its window has elapsed."""
        if self._pending is None or self._deadline is None:
            return False
        if self._clock() < self._deadline:
            return False
        return self.flush()

    def flush(self) -> bool:
        """Write the pending snapshot now. Returns True if it was written."""
        progress = self._pending
        if progress is None:
            return False
        self._pending = None
        self._deadline = None
        try:
            self.store.save(progress)
        except OSError as e:
            logger.error("progress_save_failed", error=str(e))
            return False
        self.writes += 1
        return True

    def cancel(self) -> None:
        """Drop the pending snapshot without writing it."""
        if self._pending is not None:
            logger.debug("pending_save_cancelled")
        self._pending = None
        self._deadline = None

    async def run(self, interval: float = 0.1) -> None:
        """Poll until cancelled, flushing whatever is left on the way out."""
        try:
            while True:
                self.poll()
                await asyncio.sleep(interval)
        finally:
            self.flush()
