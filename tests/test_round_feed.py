"""Tests for the background round feed and its polling fallback."""

from __future__ import annotations

import threading
import time
from unittest.mock import MagicMock

import requests

from evalbars.config import TrackerSettings
from evalbars.errors import StreamUnavailableError
from evalbars.game_sources import EmptyGameSource, SnapshotGameSource, StreamGameSource
from evalbars.models.broadcast import RoundSnapshot, SnapshotGame, SnapshotPlayer
from evalbars.RoundFeed import FeedMode, RoundFeed
from tests.fixture_helpers import read_fixture
from tests.http_fakes import FakeResponse


class BlockingResponse:
    """Streams one chunk, then blocks until closed like an idle live stream."""

    def __init__(self, first_chunk: bytes) -> None:
        self.first_chunk = first_chunk
        self.closed = threading.Event()

    def iter_content(self, chunk_size: int = 1):  # noqa: ARG002
        yield self.first_chunk
        self.closed.wait(timeout=5)
        raise requests.ConnectionError("connection closed")

    def close(self) -> None:
        self.closed.set()


class BrokenResponse:
    """Streams its chunks, then drops the connection."""

    def __init__(self, chunks: list[bytes]) -> None:
        self.chunks = chunks
        self.closed = False

    def iter_content(self, chunk_size: int = 1):  # noqa: ARG002
        yield from self.chunks
        raise requests.ConnectionError("connection reset")

    def close(self) -> None:
        self.closed = True


def _wait_for(condition, timeout: float = 3.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return False


def _snapshot() -> RoundSnapshot:
    return RoundSnapshot(
        games=[
            SnapshotGame(
                fen="rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1",
                players=[SnapshotPlayer(name="A", clock=1000), SnapshotPlayer(name="B", clock=2000)],
            )
        ]
    )


def _feed(client: MagicMock) -> RoundFeed:
    return RoundFeed(client, TrackerSettings(poll_interval_s=0.01))


def test_idle_feed_has_empty_source() -> None:
    feed = _feed(MagicMock())

    assert feed.mode == FeedMode.IDLE
    assert isinstance(feed.current_source(), EmptyGameSource)


def test_stream_chunks_are_buffered() -> None:
    text = read_fixture("round_stream.pgn")
    client = MagicMock()
    client.open_round_stream.return_value = FakeResponse(
        chunks=[text[start : start + 50].encode() for start in range(0, len(text), 50)]
    )
    client.fetch_round_snapshot.side_effect = requests.ConnectionError("no snapshot")
    feed = _feed(client)

    feed.start("round-1")

    assert _wait_for(lambda: len(feed.current_source().pairings()) == 2)
    source = feed.current_source()
    assert isinstance(source, StreamGameSource)
    assert feed.round_id == "round-1"
    feed.stop()
    assert feed.mode == FeedMode.IDLE


def test_unavailable_stream_falls_back_to_polling() -> None:
    client = MagicMock()
    client.open_round_stream.side_effect = StreamUnavailableError("404")
    client.fetch_round_snapshot.return_value = _snapshot()
    feed = _feed(client)

    feed.start("round-2")

    assert _wait_for(lambda: isinstance(feed.current_source(), SnapshotGameSource))
    assert feed.mode == FeedMode.POLL
    assert feed.current_source().pairings() == [("A", "B")]
    feed.stop()
    client.fetch_round_snapshot.assert_called_with("round-2")


def test_switching_rounds_aborts_stream_and_resets_buffer() -> None:
    first = BlockingResponse(b'[White "Old"]\n[Black "Round"]\n\n1. e4 *')
    client = MagicMock()
    client.open_round_stream.side_effect = [first, StreamUnavailableError("gone")]
    client.fetch_round_snapshot.return_value = _snapshot()
    feed = _feed(client)

    feed.start("old")
    assert _wait_for(lambda: feed.current_source().pairings() == [("Old", "Round")])
    assert feed.mode == FeedMode.STREAM

    feed.start("new")

    assert first.closed.is_set()
    assert feed.round_id == "new"
    assert _wait_for(lambda: feed.current_source().pairings() == [("A", "B")])
    assert "Old" not in feed.buffer.text()
    feed.stop()


def test_broken_stream_falls_back_to_polling() -> None:
    response = BrokenResponse([b'[White "Old"]\n[Black "Round"]\n\n1. e4 *'])
    client = MagicMock()
    client.open_round_stream.return_value = response
    client.fetch_round_snapshot.return_value = _snapshot()
    feed = _feed(client)

    feed.start("round-3")

    assert _wait_for(lambda: isinstance(feed.current_source(), SnapshotGameSource))
    assert feed.mode == FeedMode.POLL
    assert response.closed
    assert feed.current_source().pairings() == [("A", "B")]
    feed.stop()
    client.fetch_round_snapshot.assert_called_with("round-3")


def test_ended_stream_falls_back_to_polling() -> None:
    client = MagicMock()
    client.open_round_stream.return_value = FakeResponse(chunks=[b'[White "A"]\n[Black "B"]\n\n*'])
    client.fetch_round_snapshot.return_value = _snapshot()
    feed = _feed(client)

    feed.start("round-4")

    assert _wait_for(lambda: isinstance(feed.current_source(), SnapshotGameSource))
    assert feed.mode == FeedMode.POLL
    feed.stop()
