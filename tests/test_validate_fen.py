from __future__ import annotations

import chess
import pytest

from evalbars.validate_fen import is_valid_fen


@pytest.mark.parametrize(
    "fen",
    [
        chess.STARTING_FEN,
        "nrbbqkrn/pppppppp/8/8/8/8/PPPPPPPP/NRBBQKRN w KQkq - 0 1",
        "4k3/8/8/8/8/8/4P3/4K3 b - -",
    ],
)
def test_accepts_well_formed_fens(fen: str) -> None:
    assert is_valid_fen(fen)


@pytest.mark.parametrize(
    "fen",
    [
        "",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP w KQkq - 0 1",
        "rnbqkbnr/ppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",
        "rnbqkbnr/pppppppp/9/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",
        "rnbqkbnr/ppppxppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR x KQkq - 0 1",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBN\u00b2 w KQkq - 0 1",
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBN\u0661 w KQkq - 0 1",
    ],
)
def test_rejects_malformed_fens(fen: str) -> None:
    assert not is_valid_fen(fen)


def test_rejects_non_strings() -> None:
    assert not is_valid_fen(None)
