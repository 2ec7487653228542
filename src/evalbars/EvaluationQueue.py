"""Single-flight FIFO in front of a backend that can only search once at a time."""

# pylint: disable=invalid-name

from __future__ import annotations

import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from queue import Queue
from threading import Lock, Thread

from evalbars.evaluation import Evaluation
from evalbars.ports.evaluation_backend import EvaluationBackend, ProgressCallback
from evalbars.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class QueuedEvaluation:
    fen: str
    on_progress: ProgressCallback | None = None
    future: Future[Evaluation | None] = field(default_factory=Future)


class EvaluationQueue:
    """Runs backend searches one at a time, in submission order.

    A single worker thread drains the queue and pauses `cooldown_s` between
    searches. Failures are delivered to the waiting caller through its future.
    """

    def __init__(self, backend: EvaluationBackend, cooldown_s: float = 0.05) -> None:
        self.backend = backend
        self.cooldown_s = cooldown_s
        self._jobs: Queue[QueuedEvaluation | None] = Queue()
        self._worker: Thread | None = None
        self._lock = Lock()
        self._closed = False

    @property
    def pending(self) -> int:
        return self._jobs.qsize()

    def _ensure_worker(self) -> None:
        with self._lock:
            if self._closed:
                raise RuntimeError("Evaluation queue is closed")
            if self._worker is None or not self._worker.is_alive():
                self._worker = Thread(target=self._run, name="evalbars-engine", daemon=True)
                self._worker.start()

    def submit(
        self,
        fen: str,
        on_progress: ProgressCallback | None = None,
    ) -> Future[Evaluation | None]:
        """Enqueue a search and return a future for its result."""
        self._ensure_worker()
        job = QueuedEvaluation(fen=fen, on_progress=on_progress)
        self._jobs.put(job)
        return job.future

    def evaluate(
        self,
        fen: str,
        on_progress: ProgressCallback | None = None,
    ) -> Evaluation | None:
        return self.submit(fen, on_progress).result()

    def _run(self) -> None:
        while True:
            job = self._jobs.get()
            if job is None:
                return
            if not job.future.set_running_or_notify_cancel():
                continue
            try:
                job.future.set_result(self.backend.evaluate(job.fen, job.on_progress))
            except Exception as exc:
                job.future.set_exception(exc)
            if self.cooldown_s > 0:
                time.sleep(self.cooldown_s)

    def stop(self) -> None:
        """Stop the search in flight; queued requests still run."""
        self.backend.stop()

    def close(self) -> None:
        """Cancel queued requests, finish the worker and close the backend."""
        with self._lock:
            self._closed = True
            worker = self._worker
        while not self._jobs.empty():
            job = self._jobs.get_nowait()
            if job is not None:
                job.future.cancel()
        self.backend.stop()
        self._jobs.put(None)
        if worker is not None:
            worker.join(timeout=5)
        self.backend.close()
