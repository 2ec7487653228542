"""Append-only text buffer for one broadcast round."""

# pylint: disable=invalid-name

from __future__ import annotations

from threading import Lock

from evalbars.split_pgn_blocks import split_pgn_blocks


class StreamBuffer:
    """Accumulates decoded stream chunks and segments them into game blocks.

    The buffer is only ever appended to while a round is live. `clear` is reserved
    for round changes, when the whole buffer is discarded.
    """

    def __init__(self, round_id: str | None = None) -> None:
        self.round_id = round_id
        self._chunks: list[str] = []
        self._lock = Lock()

    def append(self, chunk: str) -> None:
        """Append a decoded chunk of PGN text."""
        if not chunk:
            return
        with self._lock:
            self._chunks.append(chunk)

    def text(self) -> str:
        """Return the full buffered text."""
        with self._lock:
            joined = "".join(self._chunks)
            self._chunks = [joined] if joined else []
        return joined

    def segment(self) -> list[str]:
        """Return a fresh list of raw game blocks found so far."""
        return split_pgn_blocks(self.text())

    def clear(self, round_id: str | None = None) -> None:
        """Drop all buffered text, optionally re-keying the buffer to a new round."""
        with self._lock:
            self._chunks = []
            self.round_id = round_id

    def __len__(self) -> int:
        with self._lock:
            return sum(len(chunk) for chunk in self._chunks)
