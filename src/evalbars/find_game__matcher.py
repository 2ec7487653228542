"""Locate tracked games among streamed PGN blocks."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from evalbars.GameBlock import GameBlock


def _as_block(block: GameBlock | str) -> GameBlock:
    return block if isinstance(block, GameBlock) else GameBlock.from_text(block)


def find_game(
    blocks: Sequence[GameBlock | str],
    white: str,
    black: str,
) -> GameBlock | None:
    """Return the most recently appended block for the given pairing.

    Blocks are scanned newest first so a restarted game shadows an earlier block
    with the same players. Names match exactly once surrounding whitespace is
    removed from the header values; blocks without both player tags are skipped.
    """
    for candidate in reversed(blocks):
        block = _as_block(candidate)
        if block.pairing is None:
            continue
        if block.pairing == (white, black):
            return block
    return None


def list_pairings(blocks: Iterable[GameBlock | str]) -> list[tuple[str, str]]:
    """Return unique (white, black) pairings in order of first appearance."""
    seen: dict[tuple[str, str], None] = {}
    for candidate in blocks:
        pairing = _as_block(candidate).pairing
        if pairing is not None:
            seen.setdefault(pairing, None)
    return list(seen)
