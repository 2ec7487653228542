"""Bounded least-recently-used store of evaluations keyed by FEN."""

# pylint: disable=invalid-name

from __future__ import annotations

from collections import OrderedDict
from threading import Lock

from evalbars.evaluation import Evaluation

DEFAULT_CACHE_CAPACITY = 100


class EvaluationCache:
    def __init__(self, capacity: int = DEFAULT_CACHE_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("Cache capacity must be at least 1")
        self.capacity = capacity
        self._entries: OrderedDict[str, Evaluation] = OrderedDict()
        self._lock = Lock()

    def get(self, fen: str) -> Evaluation | None:
        """Return the cached evaluation and mark it as most recently used."""
        with self._lock:
            cached = self._entries.get(fen)
            if cached is not None:
                self._entries.move_to_end(fen)
            return cached

    def put(self, fen: str, evaluation: Evaluation) -> None:
        with self._lock:
            self._entries[fen] = evaluation
            self._entries.move_to_end(fen)
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, fen: object) -> bool:
        with self._lock:
            return fen in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
