"""Port interface for per-cycle game sources."""

# pylint: disable=too-few-public-methods

from __future__ import annotations

from typing import Protocol

from evalbars.observation import GameObservation


class GameSource(Protocol):
    """A read-only view of a round's games for one tracker cycle."""

    def observe(self, white: str, black: str) -> GameObservation | None:
        """Return the latest observation for the pairing, or None if it is not in the feed."""

    def pairings(self) -> list[tuple[str, str]]:
        """Return the pairings currently available in the feed."""
