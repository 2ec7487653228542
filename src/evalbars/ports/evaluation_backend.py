"""Port interface for evaluation backends."""

# pylint: disable=too-few-public-methods

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from evalbars.evaluation import Evaluation

ProgressCallback = Callable[[Evaluation], None]


class EvaluationBackend(Protocol):
    """Scores one FEN at a time for the evaluation client."""

    def evaluate(
        self,
        fen: str,
        on_progress: ProgressCallback | None = None,
    ) -> Evaluation | None:
        """Return the evaluation for the position, or None if none could be produced."""

    def stop(self) -> None:
        """Abandon the search currently in flight, if any."""

    def close(self) -> None:
        """Release processes, sessions and threads held by the backend."""
