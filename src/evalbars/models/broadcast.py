"""Models for broadcast round snapshots and the tournament index."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SnapshotPlayer(BaseModel):
    """A player entry of a polled round game. `clock` is in milliseconds."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    clock: int | None = None


class SnapshotGame(BaseModel):
    """One game of a polled round: position, clocks and status."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    fen: str | None = None
    players: list[SnapshotPlayer] = Field(default_factory=list)
    status: str = "*"

    @property
    def white_player(self) -> SnapshotPlayer | None:
        return self.players[0] if self.players else None

    @property
    def black_player(self) -> SnapshotPlayer | None:
        return self.players[1] if len(self.players) > 1 else None

    @property
    def pairing(self) -> tuple[str, str] | None:
        white, black = self.white_player, self.black_player
        if white is None or black is None or not white.name or not black.name:
            return None
        return white.name.strip(), black.name.strip()


class RoundSnapshot(BaseModel):
    """The JSON document describing every game of a round."""

    model_config = ConfigDict(extra="ignore")

    games: list[SnapshotGame] = Field(default_factory=list)


class BroadcastTournament(BaseModel):
    """A tournament with an ongoing round, as offered for selection."""

    tournament_id: str
    name: str
    round_id: str
    round_name: str = ""
    game_ids: list[str] = Field(default_factory=list)
