"""Replay a game block's moves to reach its current position."""

from __future__ import annotations

from dataclasses import dataclass

import chess

from evalbars._movetext_tokens import result_token, san_tokens
from evalbars._normalize_castling import _normalize_castling
from evalbars._starting_board import _starting_board
from evalbars.game_result import GameResult
from evalbars.GameBlock import GameBlock
from evalbars.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ReplayedPosition:
    """Final position reached by replaying a block.

    Attributes:
        fen: FEN of the final position.
        turn: Side to move in the final position.
        fullmove_number: Full-move counter of the final position.
        moves_applied: Number of SAN tokens that were legal and applied.
        result: Result read from the movetext or `Result` tag.
        illegal_move: First token that could not be applied, if replay stopped early.
    """

    fen: str
    turn: chess.Color
    fullmove_number: int
    moves_applied: int
    result: GameResult = GameResult.ONGOING
    illegal_move: str | None = None

    @property
    def ply(self) -> int:
        return fen_ply(self.fen)


def fen_ply(fen: str) -> int:
    """Return a half-move index derived from a FEN's turn and full-move fields."""
    fields = fen.split()
    try:
        fullmove = int(fields[5]) if len(fields) > 5 else 1
    except ValueError:
        fullmove = 1
    black_to_move = len(fields) > 1 and fields[1] == "b"
    return (max(fullmove, 1) - 1) * 2 + (1 if black_to_move else 0)


def resolve_result(block: GameBlock) -> GameResult:
    """Return the game result, preferring the movetext's trailing token over the tag."""
    from_movetext = GameResult.from_token(result_token(block.movetext))
    if from_movetext is not None:
        return from_movetext
    return GameResult.from_token(block.headers.get("Result")) or GameResult.ONGOING


def _apply_san(board: chess.Board, token: str) -> bool:
    try:
        board.push_san(_normalize_castling(token))
    except ValueError:
        return False
    return True


def replay_position(block: GameBlock) -> ReplayedPosition | None:
    """Replay the block's SAN moves, stopping at the first move that cannot be played.

    Partially streamed or garbled movetext never raises: the position reached
    before the bad token is reported, which is the starting position when the
    very first move fails. Returns None only when the block's `FEN` tag itself
    cannot be read.
    """
    try:
        board = _starting_board(block)
    except ValueError as exc:
        logger.warning("Unreadable FEN tag %r: %s", block.starting_fen, exc)
        return None

    applied = 0
    illegal_move = None
    for token in san_tokens(block.movetext):
        if not _apply_san(board, token):
            illegal_move = token
            logger.debug(
                "Stopped replay of %s vs %s at %r after %s moves",
                block.white,
                block.black,
                token,
                applied,
            )
            break
        applied += 1

    return ReplayedPosition(
        fen=board.fen(),
        turn=board.turn,
        fullmove_number=board.fullmove_number,
        moves_applied=applied,
        result=resolve_result(block),
        illegal_move=illegal_move,
    )
