"""Owns the tracked links and refreshes them once per cycle."""

# pylint: disable=invalid-name

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterable
from typing import Protocol

import chess

from evalbars.BlunderDetector import BlunderDetector
from evalbars.config import TrackerSettings
from evalbars.evaluation import Evaluation
from evalbars.models.tracked_link import TrackedLink, parse_game_id
from evalbars.observation import GameObservation
from evalbars.ports.game_source import GameSource
from evalbars.replay_position import fen_ply
from evalbars.utils.logger import get_logger
from evalbars.utils.now import Now

logger = get_logger(__name__)

BlunderCallback = Callable[[int, TrackedLink], None]


class Evaluator(Protocol):
    def evaluate(self, fen: str) -> Evaluation | None: ...

    def stop(self) -> None: ...


class LinkStateTracker:
    """The set of evaluation bars and the cycle that keeps them current.

    Links are addressed by list index, matching the overlay slots. A cycle
    observes every link through a `GameSource`, re-evaluates links whose
    position or result changed, and hands swings to the `BlunderDetector`.
    Failures are recorded on the link and never stop the cycle.
    """

    def __init__(
        self,
        evaluator: Evaluator,
        settings: TrackerSettings | None = None,
        detector: BlunderDetector | None = None,
        on_blunder: BlunderCallback | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.evaluator = evaluator
        self.settings = settings or TrackerSettings()
        self.detector = detector or BlunderDetector(self.settings)
        self.on_blunder = on_blunder
        self._sleep = sleep
        self._links: list[TrackedLink] = []
        self._round = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._links)

    def links(self) -> list[TrackedLink]:
        """Return copies of every link, in slot order."""
        with self._lock:
            return [link.model_copy() for link in self._links]

    def add_link(self, white: str, black: str) -> int:
        """Track a pairing and return its index; an existing pairing keeps its slot."""
        white, black = white.strip(), black.strip()
        if not white or not black:
            raise ValueError("Both player names are required")
        with self._lock:
            for index, link in enumerate(self._links):
                if (link.white, link.black) == (white, black):
                    return index
            self._links.append(TrackedLink(white=white, black=black))
            index = len(self._links) - 1
        logger.info("Tracking %s vs %s in slot %s", white, black, index)
        return index

    def add_links_from_game_ids(self, game_ids: Iterable[str]) -> list[int]:
        indexes = []
        for game_id in game_ids:
            pairing = parse_game_id(game_id)
            if pairing is None:
                logger.warning("Ignoring malformed game id: %r", game_id)
                continue
            index = self.add_link(*pairing)
            if index not in indexes:
                indexes.append(index)
        return indexes

    def remove_link(self, index: int) -> TrackedLink:
        """Stop tracking the link in slot `index`.

        Raises:
            IndexError: No link occupies that slot.
        """
        with self._lock:
            if not 0 <= index < len(self._links):
                raise IndexError(f"No tracked link at index {index}")
            removed = self._links.pop(index)
        self.detector.forget(index)
        logger.info("Stopped tracking %s vs %s", removed.white, removed.black)
        return removed

    def reset_round(self) -> None:
        """Forget every link's observed state, keeping the pairings.

        Searches still running for the old round finish without writing.
        """
        with self._lock:
            self._round += 1
            self._links = [
                TrackedLink(white=link.white, black=link.black) for link in self._links
            ]
        self.evaluator.stop()
        self.detector.clear()

    def active_alerts(self) -> list[int]:
        return self.detector.active_alerts()

    def _record_error(
        self, index: int, pairing: tuple[str, str], round_: int, message: str
    ) -> None:
        with self._lock:
            if self._is_current(index, pairing, round_):
                self._links[index] = self._links[index].model_copy(update={"error": message})

    def _is_current(self, index: int, pairing: tuple[str, str], round_: int) -> bool:
        # Caller holds _lock.
        if round_ != self._round or index >= len(self._links):
            return False
        link = self._links[index]
        return (link.white, link.black) == pairing

    def _snapshot(self, index: int) -> tuple[TrackedLink, int] | None:
        with self._lock:
            if not 0 <= index < len(self._links):
                return None
            return self._links[index].model_copy(), self._round

    def _is_stale(self, link: TrackedLink, observation: GameObservation) -> bool:
        if observation.fen == link.last_fen and observation.result == link.result:
            return True
        return bool(link.last_fen) and observation.ply < fen_ply(link.last_fen)

    def update_link(self, index: int, source: GameSource) -> bool:
        """Refresh one link from the source; return True if the record changed."""
        snapshot = self._snapshot(index)
        if snapshot is None:
            return False
        link, round_ = snapshot
        pairing = (link.white, link.black)
        try:
            observation = source.observe(link.white, link.black)
        except Exception as exc:
            logger.warning("Could not read %s vs %s: %s", link.white, link.black, exc)
            self._record_error(index, pairing, round_, str(exc))
            return False
        if observation is None:
            self._record_error(index, pairing, round_, "Game not found in feed")
            return False
        if self._is_stale(link, observation):
            return False

        try:
            evaluation = self.evaluator.evaluate(observation.fen)
        except Exception as exc:
            logger.warning("Evaluation failed for %s vs %s: %s", link.white, link.black, exc)
            self._record_error(index, pairing, round_, str(exc))
            return False
        if evaluation is None:
            self._record_error(index, pairing, round_, "Evaluation unavailable")
            return False

        updated = link.model_copy(
            update={
                "last_fen": observation.fen,
                "result": observation.result,
                "white_seconds": observation.white_seconds,
                "black_seconds": observation.black_seconds,
                "side_to_move": chess.COLOR_NAMES[observation.side_to_move],
                "move_number": observation.move_number,
                "evaluation": evaluation.evaluation,
                "depth": evaluation.depth,
                "error": None,
                "updated_at": Now.as_datetime(),
            }
        )
        with self._lock:
            if not self._is_current(index, pairing, round_):
                logger.debug("Discarded stale update for %s vs %s", link.white, link.black)
                return False
            self._links[index] = updated

        if self.detector.check(
            index,
            link.evaluation,
            updated.evaluation,
            link.result,
            updated.result,
        ) and self.on_blunder is not None:
            self.on_blunder(index, updated.model_copy())
        return True

    def run_cycle(self, source: GameSource) -> int:
        """Refresh every link once, pausing between links; return how many changed."""
        updated = 0
        count = len(self)
        for index in range(count):
            if index and self.settings.link_delay_s > 0:
                self._sleep(self.settings.link_delay_s)
            if self.update_link(index, source):
                updated += 1
        return updated

    def run_forever(
        self,
        stop_event: threading.Event,
        source_provider: Callable[[], GameSource],
    ) -> None:
        """Run cycles every `poll_interval_s` until `stop_event` is set."""
        while not stop_event.is_set():
            try:
                self.run_cycle(source_provider())
            except Exception:
                logger.exception("Tracker cycle failed")
            stop_event.wait(self.settings.poll_interval_s)
