"""Tracked overlay slot model."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from evalbars.game_result import GameResult


class TrackedLink(BaseModel):
    """One evaluation bar: a player pairing and the last state seen for it.

    Attributes:
        white: White player's name as written in the PGN `White` tag.
        black: Black player's name as written in the PGN `Black` tag.
        last_fen: FEN of the last position that was successfully evaluated.
        result: Last known result; `*` while the game is in progress.
        white_seconds: White's remaining clock.
        black_seconds: Black's remaining clock.
        side_to_move: `white`, `black`, or empty before the first update.
        move_number: Move number shown for the side to move.
        evaluation: Last score in pawns from White's side; +/-100 for mate.
        depth: Search depth behind `evaluation`.
        error: Reason the last cycle did not update the link, if any.
        updated_at: Time of the last successful update.
    """

    white: str
    black: str
    last_fen: str = ""
    result: GameResult = GameResult.ONGOING
    white_seconds: float = 0
    black_seconds: float = 0
    side_to_move: str = ""
    move_number: int = 0
    evaluation: float | None = None
    depth: int | None = None
    error: str | None = None
    updated_at: datetime | None = None

    @property
    def game_id(self) -> str:
        return f"{self.white}-vs-{self.black}"


def parse_game_id(game_id: str) -> tuple[str, str] | None:
    """Split a `White-vs-Black` game id into its player names."""
    white, separator, black = game_id.partition("-vs-")
    if not separator or not white.strip() or not black.strip():
        return None
    return white.strip(), black.strip()
