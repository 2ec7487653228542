"""Evaluation-swing heuristic and the alerts it raises."""

# pylint: disable=invalid-name

from __future__ import annotations

from collections.abc import Callable
from threading import Lock

from evalbars.config import TrackerSettings
from evalbars.game_result import GameResult
from evalbars.utils.logger import get_logger
from evalbars.utils.now import Now

logger = get_logger(__name__)


class BlunderDetector:
    """Decides when a link update deserves a notification.

    A swing counts when the previous score sat inside the contested band and the
    new score moved by at least the threshold. A game turning decisive always
    counts. Either way a single cooldown, shared across links, throttles
    swing notifications, and nothing fires during the warm-up after start.
    """

    def __init__(
        self,
        settings: TrackerSettings | None = None,
        clock: Callable[[], float] = Now.monotonic,
    ) -> None:
        self.settings = settings or TrackerSettings()
        self._clock = clock
        self._started_at = clock()
        self._last_notified_at: float | None = None
        self._alerts: dict[int, float] = {}
        self._lock = Lock()

    @property
    def warming_up(self) -> bool:
        return self._clock() - self._started_at < self.settings.warmup_s

    def is_swing(self, previous: float | None, current: float | None) -> bool:
        if previous is None or current is None:
            return False
        if abs(previous) > self.settings.contested_band:
            return False
        return abs(current - previous) >= self.settings.blunder_threshold

    def _cooling_down(self, now: float) -> bool:
        if self._last_notified_at is None:
            return False
        return now - self._last_notified_at < self.settings.blunder_cooldown_s

    def check(
        self,
        index: int,
        previous_evaluation: float | None,
        evaluation: float | None,
        previous_result: GameResult = GameResult.ONGOING,
        result: GameResult = GameResult.ONGOING,
    ) -> bool:
        """Return True and raise an alert for `index` if this update should notify."""
        now = self._clock()
        decided = previous_result == GameResult.ONGOING and result.is_decisive
        with self._lock:
            if now - self._started_at < self.settings.warmup_s:
                return False
            if not decided:
                if not self.is_swing(previous_evaluation, evaluation):
                    return False
                if self._cooling_down(now):
                    logger.debug("Swing on link %s suppressed by cooldown", index)
                    return False
            self._last_notified_at = now
            self._alerts[index] = now + self.settings.alert_duration_s
        logger.info(
            "Alert on link %s: %s -> %s (%s)",
            index,
            previous_evaluation,
            evaluation,
            result.value,
        )
        return True

    def active_alerts(self) -> list[int]:
        """Return link indexes whose alert has not yet expired."""
        now = self._clock()
        with self._lock:
            self._alerts = {index: until for index, until in self._alerts.items() if until > now}
            return sorted(self._alerts)

    def forget(self, index: int) -> None:
        """Drop the alert for a removed link and shift the ones after it down."""
        with self._lock:
            self._alerts = {
                (key - 1 if key > index else key): until
                for key, until in self._alerts.items()
                if key != index
            }

    def clear(self) -> None:
        with self._lock:
            self._alerts.clear()
            self._last_notified_at = None
