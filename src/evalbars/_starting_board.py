"""Resolve the starting position of a game block."""

from __future__ import annotations

import chess

from evalbars.GameBlock import GameBlock

_CHESS960_MARKERS = ("960", "freestyle", "fischer")


def _is_chess960_variant(variant: str) -> bool:
    lowered = variant.lower()
    return any(marker in lowered for marker in _CHESS960_MARKERS)


def _starting_board(block: GameBlock) -> chess.Board:
    """Return the initial board for the block.

    A `FEN` tag replaces the standard start. Boards built from a `FEN` tag are put
    in Chess960 mode whenever the variant says so or the castling rights refer to
    non-standard rook files.

    Raises:
        ValueError: The `FEN` tag is not a readable position.
    """
    fen = block.starting_fen
    if fen is None:
        return chess.Board()
    board = chess.Board(fen, chess960=True)
    board.chess960 = _is_chess960_variant(block.variant) or board.has_chess960_castling_rights()
    return board
