"""Per-cycle observation of a tracked game, from either feed shape."""

from __future__ import annotations

from dataclasses import dataclass

import chess

from evalbars.extract_clocks import extract_clocks
from evalbars.game_result import GameResult
from evalbars.GameBlock import GameBlock
from evalbars.models.broadcast import SnapshotGame
from evalbars.replay_position import fen_ply, replay_position
from evalbars.time_control import base_time_seconds


@dataclass(frozen=True, slots=True)
class GameObservation:
    fen: str
    result: GameResult
    white_seconds: float
    black_seconds: float
    side_to_move: chess.Color
    move_number: int

    @property
    def ply(self) -> int:
        return fen_ply(self.fen)


def observe_block(block: GameBlock) -> GameObservation | None:
    """Replay a streamed block and read its clocks."""
    position = replay_position(block)
    if position is None:
        return None
    clocks = extract_clocks(block.movetext, base_time_seconds(block.time_control))
    return GameObservation(
        fen=position.fen,
        result=position.result,
        white_seconds=clocks.white_seconds,
        black_seconds=clocks.black_seconds,
        side_to_move=clocks.side_to_move,
        move_number=clocks.move_number,
    )


def _ms_to_seconds(value: int | None) -> float:
    if not value:
        return 0
    seconds = value / 1000
    return int(seconds) if seconds.is_integer() else seconds


def observe_snapshot_game(game: SnapshotGame) -> GameObservation | None:
    """Read a polled game's position and clocks; the FEN comes straight from the server."""
    if not game.fen:
        return None
    fields = game.fen.split()
    side_to_move = chess.BLACK if len(fields) > 1 and fields[1] == "b" else chess.WHITE
    try:
        move_number = int(fields[5]) if len(fields) > 5 else 1
    except ValueError:
        move_number = 1
    white, black = game.white_player, game.black_player
    return GameObservation(
        fen=game.fen,
        result=GameResult.from_token(game.status) or GameResult.ONGOING,
        white_seconds=_ms_to_seconds(white.clock if white else None),
        black_seconds=_ms_to_seconds(black.clock if black else None),
        side_to_move=side_to_move,
        move_number=move_number,
    )
