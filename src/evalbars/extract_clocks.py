"""Derive both players' remaining time from clock annotations."""

from __future__ import annotations

from dataclasses import dataclass

import chess

from evalbars._clock_to_seconds import _clock_to_seconds
from evalbars.CLK_PATTERN import CLK_PATTERN


@dataclass(frozen=True, slots=True)
class ClockState:
    white_seconds: float
    black_seconds: float
    side_to_move: chess.Color
    move_number: int


def clock_tokens(movetext: str) -> list[str]:
    """Return every `[%clk ...]` token in order of appearance."""
    return CLK_PATTERN.findall(movetext or "")


def extract_clocks(movetext: str, base_seconds: float = 0) -> ClockState:
    """Assign the most recent clock annotations to each side.

    Annotations alternate white, black, white, ... so an odd count means white
    made the last recorded move and black is to move, and an even count means the
    reverse. With a single annotation only white's clock is known; black keeps
    `base_seconds`. Without annotations both sides show `base_seconds`.
    """
    tokens = clock_tokens(movetext)
    count = len(tokens)
    white_seconds: float = base_seconds
    black_seconds: float = base_seconds
    if count % 2:
        white_seconds = _clock_to_seconds(tokens[-1])
        if count > 1:
            black_seconds = _clock_to_seconds(tokens[-2])
        side_to_move = chess.BLACK
    else:
        if count:
            black_seconds = _clock_to_seconds(tokens[-1])
            white_seconds = _clock_to_seconds(tokens[-2])
        side_to_move = chess.WHITE
    return ClockState(
        white_seconds=white_seconds,
        black_seconds=black_seconds,
        side_to_move=side_to_move,
        move_number=count // 2 + 1,
    )
