"""A single game parsed out of a broadcast PGN block."""

# pylint: disable=invalid-name

from __future__ import annotations

from dataclasses import dataclass, field

from evalbars._parse_block_headers import _parse_block_headers


@dataclass(frozen=True, slots=True)
class GameBlock:
    """Headers and movetext of one PGN game.

    Attributes:
        raw: The block text exactly as segmented from the stream.
        headers: Tag name to value mapping (`White`, `Black`, `FEN`, ...).
        movetext: Move section with blank lines removed, comments included.
    """

    raw: str
    headers: dict[str, str] = field(default_factory=dict)
    movetext: str = ""

    @classmethod
    def from_text(cls, text: str) -> GameBlock:
        headers, movetext = _parse_block_headers(text)
        return cls(raw=text, headers=headers, movetext=movetext)

    @property
    def white(self) -> str | None:
        value = self.headers.get("White")
        return value.strip() if value is not None else None

    @property
    def black(self) -> str | None:
        value = self.headers.get("Black")
        return value.strip() if value is not None else None

    @property
    def starting_fen(self) -> str | None:
        value = self.headers.get("FEN", "").strip()
        return value or None

    @property
    def variant(self) -> str:
        return self.headers.get("Variant", "").strip()

    @property
    def time_control(self) -> str:
        return self.headers.get("TimeControl", "").strip()

    @property
    def pairing(self) -> tuple[str, str] | None:
        if self.white is None or self.black is None:
            return None
        return self.white, self.black
