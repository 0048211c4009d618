"""Coalescing, serialised persistence of judging sheets.

Each sheet key has a single pending slot holding a snapshot *factory*.
Scheduling again replaces the slot, and the snapshot is only built when the
write actually happens. Writes run one at a time under a lock, so the store
always ends up with the newest state.
"""

import logging
import threading
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field

from judging.stores.base import StoreError

logger = logging.getLogger(__name__)


@dataclass
class SaveReport:
    """Outcome of draining the queue.

    Attributes:
        saved: Keys written successfully
        failed: Keys that failed every attempt, mapped to the last error
    """
    saved: list[Hashable] = field(default_factory=list)
    failed: dict[Hashable, StoreError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class SaveQueue:
    """Single-slot-per-key save queue with retry and exponential backoff.

    Args:
        write: Callable persisting one snapshot; raises StoreError on failure
        max_attempts: Attempts per key per drain before giving up
        backoff_seconds: Delay before the second attempt; doubles each retry
        sleep: Injected for tests
    """

    def __init__(
        self,
        write: Callable[[object], None],
        max_attempts: int = 3,
        backoff_seconds: float = 0.2,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._write = write
        self.max_attempts = max(max_attempts, 1)
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep
        self._pending: dict[Hashable, Callable[[], object]] = {}
        self._generation: dict[Hashable, int] = {}
        self._pending_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def schedule(self, key: Hashable, snapshot: Callable[[], object]) -> None:
        """Queue a write for key, replacing any write not yet started."""
        with self._pending_lock:
            self._pending[key] = snapshot
            self._generation[key] = self._generation.get(key, 0) + 1

    def discard(self, key: Hashable) -> None:
        """Drop a pending write for key without performing it."""
        with self._pending_lock:
            self._pending.pop(key, None)

    def has_pending(self, key: Hashable | None = None) -> bool:
        with self._pending_lock:
            if key is None:
                return bool(self._pending)
            return key in self._pending

    def drain(self, keys: list[Hashable] | None = None) -> SaveReport:
        """Write pending snapshots, optionally only for the given keys."""
        report = SaveReport()
        with self._write_lock:
            with self._pending_lock:
                selected = [k for k in self._pending if keys is None or k in keys]
                batch = {k: (self._pending.pop(k), self._generation[k]) for k in selected}

            for key, (snapshot, generation) in batch.items():
                error = self._write_with_retry(key, snapshot)
                if error is None:
                    report.saved.append(key)
                    continue
                report.failed[key] = error
                with self._pending_lock:
                    # Keep the failed write queued unless something newer replaced it
                    if self._generation[key] == generation:
                        self._pending[key] = snapshot
        return report

    def _write_with_retry(self, key: Hashable, snapshot: Callable[[], object]) -> StoreError | None:
        last_error = None
        for attempt in range(self.max_attempts):
            if attempt:
                self._sleep(self.backoff_seconds * 2 ** (attempt - 1))
            try:
                self._write(snapshot())
                return None
            except StoreError as e:
                last_error = e
                logger.warning(
                    "Save of %s failed (attempt %d/%d): %s",
                    key, attempt + 1, self.max_attempts, e,
                )
        logger.error("Giving up saving %s after %d attempts", key, self.max_attempts)
        return last_error

    def start(self, interval: float) -> None:
        """Drain in a background thread every interval seconds."""
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, args=(interval,), name="save-queue", daemon=True
        )
        self._thread.start()

    def stop(self) -> SaveReport:
        """Stop the background thread and write anything still pending."""
        if self._thread is not None:
            self._stop.set()
            self._thread.join()
            self._thread = None
        return self.drain()

    def _run(self, interval: float) -> None:
        while not self._stop.wait(interval):
            self.drain()
