"""Keeps the selected round's games flowing into the process."""

# pylint: disable=invalid-name

from __future__ import annotations

import threading
from enum import StrEnum

import requests

from evalbars.config import TrackerSettings
from evalbars.errors import StreamUnavailableError
from evalbars.game_sources import EmptyGameSource, SnapshotGameSource, StreamGameSource
from evalbars.infra.clients.broadcast_client import BroadcastClient, iter_round_chunks
from evalbars.models.broadcast import RoundSnapshot
from evalbars.ports.game_source import GameSource
from evalbars.StreamBuffer import StreamBuffer
from evalbars.utils.logger import get_logger

logger = get_logger(__name__)

_JOIN_TIMEOUT_S = 5


class FeedMode(StrEnum):
    IDLE = "idle"
    STREAM = "stream"
    POLL = "poll"


class RoundFeed:
    """Reads one round at a time on a background thread.

    The live PGN stream is preferred. When it cannot be opened, breaks or ends,
    the feed falls back to polling the round's JSON snapshot every
    `poll_interval_s`. Selecting another round aborts the current read and
    discards everything buffered for the old round.
    """

    def __init__(
        self,
        client: BroadcastClient,
        settings: TrackerSettings | None = None,
        buffer: StreamBuffer | None = None,
    ) -> None:
        self.client = client
        self.settings = settings or TrackerSettings()
        self.buffer = buffer or StreamBuffer()
        self.mode = FeedMode.IDLE
        self._snapshot: RoundSnapshot | None = None
        self._response: requests.Response | None = None
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def round_id(self) -> str | None:
        return self.buffer.round_id

    def start(self, round_id: str) -> None:
        """Switch the feed to `round_id`, abandoning any previous round."""
        self.stop()
        self.buffer.clear(round_id)
        with self._lock:
            self._snapshot = None
        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._run,
            args=(round_id, stop_event),
            name=f"evalbars-feed-{round_id}",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Abort the in-flight read and wait for the reader thread to finish."""
        self._stop_event.set()
        with self._lock:
            response, self._response = self._response, None
        if response is not None:
            response.close()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=_JOIN_TIMEOUT_S)
        self.mode = FeedMode.IDLE

    def current_source(self) -> GameSource:
        """Return a read-only view of the round's games for one tracker cycle."""
        with self._lock:
            snapshot = self._snapshot
        if self.mode == FeedMode.POLL and snapshot is not None:
            return SnapshotGameSource(snapshot)
        if self.round_id is None:
            return EmptyGameSource()
        return StreamGameSource(self.buffer)

    def _run(self, round_id: str, stop_event: threading.Event) -> None:
        if self._read_stream(round_id, stop_event) and not stop_event.is_set():
            logger.warning("Stream for round %s ended; polling snapshots", round_id)
        if not stop_event.is_set():
            self._poll(round_id, stop_event)

    def _read_stream(self, round_id: str, stop_event: threading.Event) -> bool:
        """Append stream chunks until the stream ends; False if it never opened."""
        try:
            response = self.client.open_round_stream(round_id)
        except StreamUnavailableError:
            logger.warning("Falling back to snapshot polling for round %s", round_id)
            return False
        with self._lock:
            if stop_event.is_set():
                response.close()
                return True
            self._response = response
        self.mode = FeedMode.STREAM
        try:
            for chunk in iter_round_chunks(response):
                if stop_event.is_set():
                    break
                self.buffer.append(chunk)
        except requests.RequestException as exc:
            if not stop_event.is_set():
                logger.warning("Stream for round %s broke: %s", round_id, exc)
        finally:
            response.close()
            with self._lock:
                if self._response is response:
                    self._response = None
        return True

    def _poll(self, round_id: str, stop_event: threading.Event) -> None:
        self.mode = FeedMode.POLL
        while not stop_event.is_set():
            try:
                snapshot = self.client.fetch_round_snapshot(round_id)
            except (requests.RequestException, ValueError) as exc:
                logger.warning("Snapshot poll failed for round %s: %s", round_id, exc)
            else:
                with self._lock:
                    if not stop_event.is_set():
                        self._snapshot = snapshot
            stop_event.wait(self.settings.poll_interval_s)
