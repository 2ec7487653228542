"""Default wiring of the feed, evaluator and tracker for one process."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field

from evalbars.config import Settings, get_settings
from evalbars.EvaluationClient import EvaluationClient, build_evaluation_client
from evalbars.infra.clients.broadcast_client import BroadcastClient
from evalbars.LinkStateTracker import LinkStateTracker
from evalbars.RoundFeed import RoundFeed
from evalbars.utils.logger import get_logger, set_level

logger = get_logger(__name__)


@dataclass
class Runtime:
    """Owns every long-lived resource: the engine, the feed thread and the cycle thread."""

    settings: Settings
    broadcast: BroadcastClient
    feed: RoundFeed
    evaluator: EvaluationClient
    tracker: LinkStateTracker
    _stop_event: threading.Event = field(default_factory=threading.Event)
    _thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def select_round(self, round_id: str, game_ids: Iterable[str] = ()) -> None:
        """Follow a new round; link state from the old round is discarded."""
        logger.info("Selecting round %s", round_id)
        self.tracker.reset_round()
        self.feed.start(round_id)
        self.tracker.add_links_from_game_ids(game_ids)

    def pairings(self) -> list[tuple[str, str]]:
        return self.feed.current_source().pairings()

    def start(self) -> None:
        """Start the configured round, if any, and the periodic tracker cycle."""
        if self.running:
            return
        if self.settings.round_id:
            self.select_round(self.settings.round_id, self.settings.game_ids)
        elif self.settings.game_ids:
            self.tracker.add_links_from_game_ids(self.settings.game_ids)
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self.tracker.run_forever,
            args=(self._stop_event, self.feed.current_source),
            name="evalbars-tracker",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop both threads and release the engine and HTTP sessions."""
        self._stop_event.set()
        self.evaluator.stop()
        self.feed.stop()
        if self._thread is not None:
            self._thread.join(timeout=self.settings.tracker.poll_interval_s + 5)
            self._thread = None
        self.evaluator.close()
        self.broadcast.close()


def build_runtime(settings: Settings | None = None) -> Runtime:
    settings = settings or get_settings()
    set_level(settings.log_level)
    broadcast = BroadcastClient(settings.broadcast)
    evaluator = build_evaluation_client(settings)
    return Runtime(
        settings=settings,
        broadcast=broadcast,
        feed=RoundFeed(broadcast, settings.tracker),
        evaluator=evaluator,
        tracker=LinkStateTracker(evaluator, settings.tracker),
    )
