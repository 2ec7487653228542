"""Tests for link bookkeeping and the tracker cycle."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock

import chess
import pytest

from evalbars.BlunderDetector import BlunderDetector
from evalbars.config import TrackerSettings
from evalbars.errors import EvaluationBackendError
from evalbars.evaluation import Evaluation
from evalbars.EvaluationClient import EvaluationClient
from evalbars.game_result import GameResult
from evalbars.game_sources import EmptyGameSource, SnapshotGameSource, StreamGameSource
from evalbars.LinkStateTracker import LinkStateTracker
from evalbars.models.broadcast import RoundSnapshot, SnapshotGame, SnapshotPlayer
from evalbars.StreamBuffer import StreamBuffer
from tests.fixture_helpers import CHESS960_MOVES, CHESS960_START_FEN, read_fixture, replay_san

AFTER_E4 = replay_san(["e4"]).fen()
AFTER_E4_E5 = replay_san(["e4", "e5"]).fen()


def _settings(**overrides: float) -> TrackerSettings:
    values = {"warmup_s": 0, "link_delay_s": 0, "poll_interval_s": 0.01, **overrides}
    return TrackerSettings(**values)


def _tracker(evaluator=None, **overrides: float) -> LinkStateTracker:
    settings = _settings(**overrides)
    if evaluator is None:
        evaluator = MagicMock()
        evaluator.evaluate.return_value = Evaluation(0.3, depth=18)
    return LinkStateTracker(evaluator, settings, BlunderDetector(settings))


def _snapshot_source(fen: str, status: str = "*", white: str = "A", black: str = "B"):
    game = SnapshotGame(
        id="g1",
        fen=fen,
        status=status,
        players=[SnapshotPlayer(name=white, clock=61500), SnapshotPlayer(name=black, clock=30000)],
    )
    return SnapshotGameSource(RoundSnapshot(games=[game]))


def test_add_link_deduplicates_and_strips_names() -> None:
    tracker = _tracker()

    assert tracker.add_link("A", "B") == 0
    assert tracker.add_link(" A ", "B ") == 0
    assert tracker.add_link("B", "A") == 1
    assert [link.game_id for link in tracker.links()] == ["A-vs-B", "B-vs-A"]


def test_add_link_requires_both_names() -> None:
    with pytest.raises(ValueError):
        _tracker().add_link("A", " ")


def test_add_links_from_game_ids_skips_malformed_ids() -> None:
    tracker = _tracker()

    indexes = tracker.add_links_from_game_ids(["A-vs-B", "nonsense", "C-vs-D", "A-vs-B"])

    assert indexes == [0, 1]
    assert len(tracker) == 2


def test_remove_link_shifts_slots() -> None:
    tracker = _tracker()
    tracker.add_links_from_game_ids(["A-vs-B", "C-vs-D"])

    removed = tracker.remove_link(0)

    assert removed.white == "A"
    assert [link.white for link in tracker.links()] == ["C"]
    with pytest.raises(IndexError):
        tracker.remove_link(5)


def test_links_returns_copies() -> None:
    tracker = _tracker()
    tracker.add_link("A", "B")

    tracker.links()[0].last_fen = "mutated"

    assert tracker.links()[0].last_fen == ""


def test_cycle_updates_link_from_snapshot() -> None:
    tracker = _tracker()
    tracker.add_link("A", "B")

    assert tracker.run_cycle(_snapshot_source(AFTER_E4)) == 1

    link = tracker.links()[0]
    assert link.last_fen == AFTER_E4
    assert link.evaluation == 0.3
    assert link.depth == 18
    assert link.white_seconds == 61.5
    assert link.black_seconds == 30
    assert link.side_to_move == "black"
    assert link.move_number == 1
    assert link.error is None
    assert link.updated_at is not None


def test_unchanged_position_is_not_re_evaluated() -> None:
    tracker = _tracker()
    tracker.add_link("A", "B")
    source = _snapshot_source(AFTER_E4)

    tracker.run_cycle(source)
    assert tracker.run_cycle(source) == 0

    tracker.evaluator.evaluate.assert_called_once_with(AFTER_E4)


def test_result_change_on_same_position_updates_link() -> None:
    tracker = _tracker()
    tracker.add_link("A", "B")
    tracker.run_cycle(_snapshot_source(AFTER_E4))

    assert tracker.run_cycle(_snapshot_source(AFTER_E4, status="1-0")) == 1
    assert tracker.links()[0].result == GameResult.WHITE_WIN


def test_older_position_is_ignored_until_round_reset() -> None:
    tracker = _tracker()
    tracker.add_link("A", "B")
    tracker.run_cycle(_snapshot_source(AFTER_E4_E5))

    assert tracker.run_cycle(_snapshot_source(AFTER_E4)) == 0
    assert tracker.links()[0].last_fen == AFTER_E4_E5

    tracker.reset_round()
    tracker.evaluator.stop.assert_called_once()
    assert tracker.links()[0].last_fen == ""
    assert tracker.run_cycle(_snapshot_source(AFTER_E4)) == 1
    assert tracker.links()[0].last_fen == AFTER_E4


class StoppableEvaluator:
    """Blocks each search until `stop()` and then returns a shallow score."""

    def __init__(self) -> None:
        self.searching = threading.Event()
        self.stopped = threading.Event()

    def evaluate(self, fen: str) -> Evaluation:  # noqa: ARG002
        self.searching.set()
        self.stopped.wait(timeout=5)
        return Evaluation(1.5, depth=4)

    def stop(self) -> None:
        self.stopped.set()


def test_search_interrupted_by_round_reset_does_not_write_old_position() -> None:
    evaluator = StoppableEvaluator()
    tracker = _tracker(evaluator)
    tracker.add_link("A", "B")
    old_round = replay_san(["e4", "e5", "Nf3", "Nc6", "Bb5", "a6"]).fen()
    results: list[bool] = []
    worker = threading.Thread(
        target=lambda: results.append(tracker.update_link(0, _snapshot_source(old_round)))
    )

    worker.start()
    assert evaluator.searching.wait(timeout=5)
    tracker.reset_round()
    worker.join(timeout=5)

    assert results == [False]
    link = tracker.links()[0]
    assert link.last_fen == ""
    assert link.evaluation is None

    assert tracker.update_link(0, _snapshot_source(AFTER_E4)) is True
    assert tracker.links()[0].last_fen == AFTER_E4


def test_missing_game_records_error() -> None:
    tracker = _tracker()
    tracker.add_link("A", "B")

    tracker.run_cycle(EmptyGameSource())

    link = tracker.links()[0]
    assert link.error == "Game not found in feed"
    assert link.last_fen == ""


def test_evaluation_failure_keeps_state_and_retries_next_cycle() -> None:
    evaluator = MagicMock()
    evaluator.evaluate.side_effect = [
        Evaluation(0.1),
        EvaluationBackendError("service down"),
        Evaluation(0.2),
    ]
    tracker = _tracker(evaluator)
    tracker.add_link("A", "B")
    tracker.run_cycle(_snapshot_source(AFTER_E4))

    assert tracker.run_cycle(_snapshot_source(AFTER_E4_E5)) == 0
    failed = tracker.links()[0]
    assert failed.error == "service down"
    assert failed.last_fen == AFTER_E4
    assert failed.evaluation == 0.1

    assert tracker.run_cycle(_snapshot_source(AFTER_E4_E5)) == 1
    recovered = tracker.links()[0]
    assert recovered.error is None
    assert recovered.last_fen == AFTER_E4_E5


def test_unavailable_evaluation_records_error() -> None:
    evaluator = MagicMock()
    evaluator.evaluate.return_value = None
    tracker = _tracker(evaluator)
    tracker.add_link("A", "B")

    assert tracker.run_cycle(_snapshot_source(AFTER_E4)) == 0
    assert tracker.links()[0].error == "Evaluation unavailable"


def test_source_failure_is_recorded_per_link() -> None:
    tracker = _tracker()
    tracker.add_links_from_game_ids(["A-vs-B", "C-vs-D"])
    source = MagicMock()
    source.observe.side_effect = RuntimeError("feed broke")

    assert tracker.run_cycle(source) == 0
    assert [link.error for link in tracker.links()] == ["feed broke", "feed broke"]


def test_swing_notifies_callback_with_link_index() -> None:
    evaluator = MagicMock()
    evaluator.evaluate.side_effect = [Evaluation(1.5), Evaluation(4.0)]
    tracker = _tracker(evaluator)
    notified = []
    tracker.on_blunder = lambda index, link: notified.append((index, link.evaluation))
    tracker.add_link("A", "B")

    tracker.run_cycle(_snapshot_source(AFTER_E4))
    tracker.run_cycle(_snapshot_source(AFTER_E4_E5))

    assert notified == [(0, 4.0)]
    assert tracker.active_alerts() == [0]


def test_link_delay_pauses_between_links() -> None:
    sleep = MagicMock()
    settings = _settings(link_delay_s=0.2)
    evaluator = MagicMock()
    evaluator.evaluate.return_value = Evaluation(0.0)
    tracker = LinkStateTracker(evaluator, settings, BlunderDetector(settings), sleep=sleep)
    tracker.add_links_from_game_ids(["A-vs-B", "C-vs-D", "E-vs-F"])

    tracker.run_cycle(EmptyGameSource())

    assert sleep.call_count == 2
    sleep.assert_called_with(0.2)


def test_run_forever_survives_failing_cycles_until_stopped() -> None:
    tracker = _tracker()
    stop_event = threading.Event()
    calls = []

    def provider():
        calls.append(1)
        if len(calls) >= 3:
            stop_event.set()
        raise RuntimeError("no source")

    tracker.run_forever(stop_event, provider)

    assert len(calls) == 3


def test_end_to_end_chess960_stream() -> None:
    backend = MagicMock()
    backend.evaluate.return_value = Evaluation(0.25, depth=18, best_move="f1g1")
    client = EvaluationClient(backend)
    settings = _settings()
    tracker = LinkStateTracker(client, settings, BlunderDetector(settings))
    tracker.add_link("Nepomniachtchi, Ian", "Giri, Anish")
    buffer = StreamBuffer("round-960")
    text = read_fixture("chess960_round.pgn")
    buffer.append(text[:200])
    buffer.append(text[200:])

    tracker.run_cycle(StreamGameSource(buffer))
    tracker.run_cycle(StreamGameSource(buffer))

    link = tracker.links()[0]
    expected = replay_san(CHESS960_MOVES, CHESS960_START_FEN, chess960=True)
    assert link.last_fen == expected.fen()
    assert link.move_number == 6
    assert link.side_to_move == "white"
    assert link.white_seconds == 5310
    assert link.black_seconds == 5295
    assert link.evaluation == 0.25
    backend.evaluate.assert_called_once()
    assert backend.evaluate.call_args.args[0] == expected.fen()


def test_stream_source_lists_pairings() -> None:
    buffer = StreamBuffer()
    buffer.append(read_fixture("round_stream.pgn"))

    assert StreamGameSource(buffer).pairings() == [
        ("Carlsen, Magnus", "Nakamura, Hikaru"),
        ("Firouzja, Alireza", "Caruana, Fabiano"),
    ]


def test_stream_source_observes_finished_game() -> None:
    buffer = StreamBuffer()
    buffer.append(read_fixture("round_stream.pgn"))

    observation = StreamGameSource(buffer).observe("Firouzja, Alireza", "Caruana, Fabiano")

    assert observation is not None
    assert observation.result == GameResult.BLACK_WIN
    assert observation.side_to_move == chess.WHITE
    assert observation.move_number == 3
