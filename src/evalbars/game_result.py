from __future__ import annotations

from enum import StrEnum


class GameResult(StrEnum):
    """
    Outcome of a tracked game.

    Attributes:
        ONGOING: No result recorded yet (`*`).
        WHITE_WIN: `1-0`.
        BLACK_WIN: `0-1`.
        DRAW: `1/2-1/2`.
    """

    ONGOING = "*"
    WHITE_WIN = "1-0"
    BLACK_WIN = "0-1"
    DRAW = "1/2-1/2"

    @classmethod
    def from_token(cls, token: str | None) -> GameResult | None:
        """Return the result for a PGN result token, or None if it is not one."""
        if token is None:
            return None
        normalized = token.strip().replace("½", "1/2")
        try:
            return cls(normalized)
        except ValueError:
            return None

    @property
    def is_decisive(self) -> bool:
        return self in (GameResult.WHITE_WIN, GameResult.BLACK_WIN)
