"""Structural FEN validation performed before any backend call."""

from __future__ import annotations

_MIN_FEN_FIELDS = 4
_RANK_COUNT = 8
_RANK_WIDTH = 8
_PIECE_CHARS = frozenset("pnbrqkPNBRQK")
_EMPTY_RUNS = frozenset("12345678")
_SIDES = frozenset({"w", "b"})


def _rank_width(rank: str) -> int | None:
    width = 0
    for char in rank:
        if char in _EMPTY_RUNS:
            width += int(char)
        elif char in _PIECE_CHARS:
            width += 1
        else:
            return None
    return width


def is_valid_fen(fen: object) -> bool:
    """Return True when the FEN is well formed enough to send to an evaluator.

    Requires at least four space-separated fields, a board field of exactly eight
    ranks each covering eight squares, and a side-to-move field of `w` or `b`.
    """
    if not isinstance(fen, str):
        return False
    fields = fen.split()
    if len(fields) < _MIN_FEN_FIELDS:
        return False
    ranks = fields[0].split("/")
    if len(ranks) != _RANK_COUNT:
        return False
    if any(_rank_width(rank) != _RANK_WIDTH for rank in ranks):
        return False
    return fields[1] in _SIDES
