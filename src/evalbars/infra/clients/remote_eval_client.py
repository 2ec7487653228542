"""HTTP evaluation service adapter."""

from __future__ import annotations

from collections.abc import Mapping

import requests

from evalbars.config import RemoteEvalSettings
from evalbars.errors import EvaluationBackendError
from evalbars.evaluation import MATE_SENTINEL, Evaluation
from evalbars.ports.evaluation_backend import ProgressCallback
from evalbars.utils.logger import Logger

logger = Logger(__name__)

_EVALUATION_KEYS = ("evaluation", "eval", "score")
_BEST_MOVE_KEYS = ("best_move", "bestMove", "bestmove")


def _first_present(payload: Mapping[str, object], keys: tuple[str, ...]) -> object | None:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def _coerce_float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _coerce_int(value: object) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None


def _normalize_payload(payload: object) -> Evaluation:
    """Normalize a service response into an Evaluation.

    Raises:
        EvaluationBackendError: The payload has no numeric evaluation.
    """
    if not isinstance(payload, Mapping):
        raise EvaluationBackendError("Evaluation response is not a JSON object")
    mate_in = _coerce_int(payload.get("mate"))
    value = _coerce_float(_first_present(payload, _EVALUATION_KEYS))
    if value is None and mate_in is None:
        raise EvaluationBackendError("Evaluation response has no evaluation field")
    if mate_in is not None and mate_in != 0:
        value = MATE_SENTINEL if mate_in > 0 else -MATE_SENTINEL
    best_move = _first_present(payload, _BEST_MOVE_KEYS)
    depth = _coerce_int(payload.get("depth")) or 0
    return Evaluation(
        evaluation=value if value is not None else 0.0,
        depth=depth,
        mate_in=mate_in,
        best_move=str(best_move) if best_move else None,
    )


class RemoteEvaluationBackend:
    """Scores positions with one HTTP request per FEN.

    Failures are not retried here: a failed request raises
    `EvaluationBackendError` and the next tracker cycle asks again.
    """

    def __init__(
        self,
        settings: RemoteEvalSettings,
        session: requests.Session | None = None,
    ) -> None:
        self.settings = settings
        self.session = session or requests.Session()

    def _request(self, fen: str) -> requests.Response:
        if self.settings.method == "get":
            return self.session.get(
                self.settings.url,
                params={self.settings.fen_param: fen},
                timeout=self.settings.timeout_s,
            )
        return self.session.post(
            self.settings.url,
            json={"fen": fen},
            timeout=self.settings.timeout_s,
        )

    def evaluate(
        self,
        fen: str,
        on_progress: ProgressCallback | None = None,
    ) -> Evaluation | None:
        try:
            response = self._request(fen)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Remote evaluation failed for %s: %s", fen, exc)
            raise EvaluationBackendError(f"Remote evaluation failed: {exc}") from exc
        evaluation = _normalize_payload(payload)
        if on_progress is not None:
            on_progress(evaluation)
        return evaluation

    def stop(self) -> None:
        """Requests are not interruptible; nothing to stop."""

    def close(self) -> None:
        self.session.close()
