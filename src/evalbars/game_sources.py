"""Game sources over the two feed shapes: streamed PGN and polled JSON."""

from __future__ import annotations

from evalbars.find_game__matcher import find_game, list_pairings
from evalbars.GameBlock import GameBlock
from evalbars.models.broadcast import RoundSnapshot, SnapshotGame
from evalbars.observation import GameObservation, observe_block, observe_snapshot_game
from evalbars.StreamBuffer import StreamBuffer


class StreamGameSource:
    """Blocks segmented from the stream buffer once, at construction."""

    def __init__(self, buffer: StreamBuffer) -> None:
        self.blocks = [GameBlock.from_text(block) for block in buffer.segment()]

    def observe(self, white: str, black: str) -> GameObservation | None:
        block = find_game(self.blocks, white, black)
        if block is None:
            return None
        return observe_block(block)

    def pairings(self) -> list[tuple[str, str]]:
        return list_pairings(self.blocks)


class SnapshotGameSource:
    """Games from a polled round snapshot."""

    def __init__(self, snapshot: RoundSnapshot) -> None:
        self.snapshot = snapshot

    def _find(self, white: str, black: str) -> SnapshotGame | None:
        for game in reversed(self.snapshot.games):
            if game.pairing == (white, black):
                return game
        return None

    def observe(self, white: str, black: str) -> GameObservation | None:
        game = self._find(white, black)
        if game is None:
            return None
        return observe_snapshot_game(game)

    def pairings(self) -> list[tuple[str, str]]:
        seen: dict[tuple[str, str], None] = {}
        for game in self.snapshot.games:
            if game.pairing is not None:
                seen.setdefault(game.pairing, None)
        return list(seen)


class EmptyGameSource:
    """Stand-in used before a round is selected."""

    def observe(self, white: str, black: str) -> GameObservation | None:  # noqa: ARG002
        return None

    def pairings(self) -> list[tuple[str, str]]:
        return []
