from evalbars.models.broadcast import (
    BroadcastTournament,
    RoundSnapshot,
    SnapshotGame,
    SnapshotPlayer,
)
from evalbars.models.tracked_link import TrackedLink, parse_game_id

__all__ = [
    "BroadcastTournament",
    "RoundSnapshot",
    "SnapshotGame",
    "SnapshotPlayer",
    "TrackedLink",
    "parse_game_id",
]
