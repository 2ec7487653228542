from __future__ import annotations

from dataclasses import dataclass

import chess
import chess.engine

MATE_SENTINEL = 100.0
_MATE_SCORE_CP = 100000


@dataclass(frozen=True, slots=True)
class Evaluation:
    """Position score in pawns from White's point of view.

    Mates are reported as `+/-MATE_SENTINEL`, signed by the side delivering mate,
    with `mate_in` carrying the engine's signed distance when known.
    """

    evaluation: float
    depth: int = 0
    mate_in: int | None = None
    best_move: str | None = None

    @property
    def is_mate(self) -> bool:
        return abs(self.evaluation) >= MATE_SENTINEL

    @classmethod
    def from_engine_info(cls, info: chess.engine.InfoDict) -> Evaluation | None:
        """Build an evaluation from one engine `info` update, or None if it has no score."""
        score = info.get("score")
        depth = info.get("depth")
        if score is None or depth is None:
            return None
        white_score = _white_score(score)
        mate_in = white_score.mate()
        if mate_in is not None:
            value = MATE_SENTINEL if white_score.score(mate_score=_MATE_SCORE_CP) > 0 else -MATE_SENTINEL
        else:
            value = (white_score.score() or 0) / 100
        return cls(
            evaluation=value,
            depth=int(depth),
            mate_in=mate_in,
            best_move=_best_move_from_info(info),
        )


def _white_score(score: chess.engine.PovScore | chess.engine.Score) -> chess.engine.Score:
    if isinstance(score, chess.engine.PovScore):
        return score.white()
    return score


def _best_move_from_info(info: chess.engine.InfoDict) -> str | None:
    pv = info.get("pv") or []
    return pv[0].uci() if pv else None
