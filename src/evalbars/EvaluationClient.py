"""Evaluation oracle client: validation, caching and a pluggable backend."""

# pylint: disable=invalid-name

from __future__ import annotations

import threading

from evalbars.config import EVALUATOR_REMOTE, Settings
from evalbars.evaluation import Evaluation
from evalbars.EvaluationCache import EvaluationCache
from evalbars.EvaluationQueue import EvaluationQueue
from evalbars.infra.clients.remote_eval_client import RemoteEvaluationBackend
from evalbars.ports.evaluation_backend import EvaluationBackend, ProgressCallback
from evalbars.StockfishEngine import StockfishEngine
from evalbars.utils.logger import funclogger, get_logger
from evalbars.validate_fen import is_valid_fen

logger = get_logger(__name__)


class EvaluationClient:
    """Front door for position scoring.

    Malformed FENs return None without reaching the backend. Successful results are
    cached by exact FEN, so a repeated position is answered from the cache with the
    identical `Evaluation` object. A search cut short by `stop()` is returned but
    not cached, so the position is searched in full the next time. Backend
    failures propagate to the caller.
    """

    def __init__(
        self,
        backend: EvaluationBackend,
        cache: EvaluationCache | None = None,
    ) -> None:
        self.backend = backend
        self.cache = cache or EvaluationCache()
        self._stops = 0
        self._stops_lock = threading.Lock()

    def __enter__(self) -> EvaluationClient:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:
        self.close()

    @funclogger
    def evaluate(
        self,
        fen: str,
        on_progress: ProgressCallback | None = None,
    ) -> Evaluation | None:
        if not is_valid_fen(fen):
            logger.debug("Rejected malformed FEN: %r", fen)
            return None
        cached = self.cache.get(fen)
        if cached is not None:
            return cached
        with self._stops_lock:
            stops_before = self._stops
        result = self.backend.evaluate(fen, on_progress)
        with self._stops_lock:
            interrupted = self._stops != stops_before
        if result is not None and not interrupted:
            self.cache.put(fen, result)
        return result

    def stop(self) -> None:
        """Stop the current search so a superseded position stops using engine time."""
        with self._stops_lock:
            self._stops += 1
        self.backend.stop()

    def close(self) -> None:
        self.backend.close()


def build_evaluation_backend(settings: Settings) -> EvaluationBackend:
    """Return the backend selected by `settings.evaluator`."""
    if settings.evaluator == EVALUATOR_REMOTE:
        return RemoteEvaluationBackend(settings.remote)
    engine = StockfishEngine(settings.engine)
    return EvaluationQueue(engine, cooldown_s=settings.engine.cooldown_ms / 1000)


def build_evaluation_client(settings: Settings) -> EvaluationClient:
    return EvaluationClient(
        build_evaluation_backend(settings),
        EvaluationCache(settings.cache_capacity),
    )
