"""Tests for the coalescing save queue."""

import threading

from judging.saving import SaveQueue
from judging.stores.base import StoreError


class FlakyWriter:
    """Records writes; fails the first `failures` calls."""

    def __init__(self, failures: int = 0):
        self.failures = failures
        self.calls = 0
        self.written = []

    def __call__(self, snapshot):
        self.calls += 1
        if self.calls <= self.failures:
            raise StoreError(f"write {self.calls} failed")
        self.written.append(snapshot)


class TestSaveQueue:
    def setup_method(self):
        self.sleeps = []

    def make_queue(self, writer, max_attempts=3):
        return SaveQueue(writer, max_attempts=max_attempts, backoff_seconds=0.5,
                         sleep=self.sleeps.append)

    def test_coalesces_to_latest_snapshot(self):
        writer = FlakyWriter()
        queue = self.make_queue(writer)
        for value in range(5):
            queue.schedule("k", lambda value=value: value)
        report = queue.drain()
        assert writer.written == [4]
        assert report.saved == ["k"]
        assert report.ok

    def test_snapshot_built_at_write_time(self):
        writer = FlakyWriter()
        queue = self.make_queue(writer)
        state = {"value": 1}
        queue.schedule("k", lambda: state["value"])
        state["value"] = 2
        queue.drain()
        assert writer.written == [2]

    def test_separate_keys_each_written(self):
        writer = FlakyWriter()
        queue = self.make_queue(writer)
        queue.schedule("a", lambda: "A")
        queue.schedule("b", lambda: "B")
        assert queue.drain().saved == ["a", "b"]
        assert writer.written == ["A", "B"]
        assert not queue.has_pending()

    def test_drain_selected_keys(self):
        writer = FlakyWriter()
        queue = self.make_queue(writer)
        queue.schedule("a", lambda: "A")
        queue.schedule("b", lambda: "B")
        queue.drain(["b"])
        assert writer.written == ["B"]
        assert queue.has_pending("a")
        assert not queue.has_pending("b")

    def test_retries_with_exponential_backoff(self):
        writer = FlakyWriter(failures=2)
        queue = self.make_queue(writer)
        queue.schedule("k", lambda: "v")
        report = queue.drain()
        assert report.ok
        assert writer.calls == 3
        assert self.sleeps == [0.5, 1.0]

    def test_gives_up_and_keeps_pending(self):
        writer = FlakyWriter(failures=10)
        queue = self.make_queue(writer, max_attempts=2)
        queue.schedule("k", lambda: "v")
        report = queue.drain()
        assert not report.ok
        assert isinstance(report.failed["k"], StoreError)
        assert queue.has_pending("k")

        writer.failures = 0
        assert queue.drain().saved == ["k"]
        assert writer.written == ["v"]

    def test_newer_schedule_wins_over_failed_write(self):
        queue_ref = {}

        def writer(snapshot):
            # A newer change arrives while the first write is failing
            if snapshot == "old":
                queue_ref["q"].schedule("k", lambda: "new")
                raise StoreError("down")
            written.append(snapshot)

        written = []
        queue = SaveQueue(writer, max_attempts=1, sleep=lambda s: None)
        queue_ref["q"] = queue
        queue.schedule("k", lambda: "old")
        assert not queue.drain().ok
        queue.drain()
        assert written == ["new"]

    def test_discard(self):
        writer = FlakyWriter()
        queue = self.make_queue(writer)
        queue.schedule("k", lambda: "v")
        queue.discard("k")
        assert not queue.has_pending()
        assert queue.drain().saved == []
        assert writer.written == []

    def test_background_thread_drains(self):
        done = threading.Event()

        def writer(snapshot):
            done.set()

        queue = SaveQueue(writer)
        queue.start(0.01)
        queue.schedule("k", lambda: "v")
        assert done.wait(2.0)
        queue.stop()
        assert not queue.has_pending()

    def test_stop_flushes_pending(self):
        writer = FlakyWriter()
        queue = self.make_queue(writer)
        queue.start(60.0)
        queue.schedule("k", lambda: "v")
        report = queue.stop()
        assert report.saved == ["k"]
        assert writer.written == ["v"]
