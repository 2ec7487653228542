"""Tests for the single-flight evaluation queue."""

from __future__ import annotations

import threading
import time
from concurrent.futures import CancelledError

import pytest

from evalbars.evaluation import Evaluation
from evalbars.EvaluationQueue import EvaluationQueue


class RecordingBackend:
    def __init__(self, delay_s: float = 0.0) -> None:
        self.delay_s = delay_s
        self.calls: list[str] = []
        self.active = 0
        self.max_active = 0
        self.stopped = 0
        self.closed = False
        self._lock = threading.Lock()

    def evaluate(self, fen, on_progress=None):
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            self.calls.append(fen)
        time.sleep(self.delay_s)
        with self._lock:
            self.active -= 1
        if fen == "boom":
            raise RuntimeError("engine failure")
        result = Evaluation(float(len(self.calls)))
        if on_progress is not None:
            on_progress(result)
        return result

    def stop(self) -> None:
        self.stopped += 1

    def close(self) -> None:
        self.closed = True


def test_requests_run_one_at_a_time_in_submission_order() -> None:
    backend = RecordingBackend(delay_s=0.01)
    queue = EvaluationQueue(backend, cooldown_s=0)

    futures = [queue.submit(f"fen-{index}") for index in range(5)]
    results = [future.result(timeout=5) for future in futures]

    assert backend.calls == [f"fen-{index}" for index in range(5)]
    assert backend.max_active == 1
    assert [result.evaluation for result in results] == [1.0, 2.0, 3.0, 4.0, 5.0]
    queue.close()


def test_concurrent_callers_are_serialized() -> None:
    backend = RecordingBackend(delay_s=0.01)
    queue = EvaluationQueue(backend, cooldown_s=0)
    results: list[Evaluation | None] = []

    threads = [
        threading.Thread(target=lambda index=index: results.append(queue.evaluate(f"fen-{index}")))
        for index in range(4)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert len(results) == 4
    assert backend.max_active == 1
    queue.close()


def test_failure_is_delivered_to_caller_and_queue_keeps_running() -> None:
    backend = RecordingBackend()
    queue = EvaluationQueue(backend, cooldown_s=0)

    with pytest.raises(RuntimeError):
        queue.evaluate("boom")
    assert queue.evaluate("fen") is not None
    queue.close()


def test_progress_callback_runs_on_worker() -> None:
    backend = RecordingBackend()
    queue = EvaluationQueue(backend, cooldown_s=0)
    seen: list[Evaluation] = []

    result = queue.evaluate("fen", seen.append)

    assert seen == [result]
    queue.close()


def test_stop_forwards_to_backend() -> None:
    backend = RecordingBackend()
    queue = EvaluationQueue(backend)

    queue.stop()

    assert backend.stopped == 1


def test_close_cancels_pending_requests_and_closes_backend() -> None:
    backend = RecordingBackend(delay_s=0.2)
    queue = EvaluationQueue(backend, cooldown_s=0)
    running = queue.submit("first")
    while not backend.calls:
        time.sleep(0.005)
    pending = queue.submit("second")

    queue.close()

    assert running.result(timeout=5) is not None
    with pytest.raises(CancelledError):
        pending.result(timeout=5)
    assert backend.closed
    assert queue.pending == 0
    with pytest.raises(RuntimeError):
        queue.submit("late")
