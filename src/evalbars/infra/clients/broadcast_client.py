"""Broadcast feed adapter: live PGN stream, round snapshots and the tournament index."""

from __future__ import annotations

import codecs
import json
import logging
from collections.abc import Iterator, Mapping

import requests
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from evalbars.config import BroadcastSettings
from evalbars.errors import StreamUnavailableError
from evalbars.models.broadcast import BroadcastTournament, RoundSnapshot
from evalbars.utils.logger import Logger

logger = Logger(__name__)

_CHUNK_SIZE = 1024


def _player_name(entry: object) -> str | None:
    if isinstance(entry, Mapping):
        name = entry.get("name")
        if isinstance(name, str) and name.strip():
            return name.strip()
    return None


def _game_id_for(game: Mapping[str, object]) -> str | None:
    """Return `White-vs-Black` for a round game entry in either payload shape."""
    white = _player_name(game.get("white"))
    black = _player_name(game.get("black"))
    players = game.get("players")
    if (white is None or black is None) and isinstance(players, list) and len(players) > 1:
        white, black = _player_name(players[0]), _player_name(players[1])
    if white is None or black is None:
        return None
    return f"{white}-vs-{black}"


def _select_round(rounds: list[Mapping[str, object]]) -> Mapping[str, object] | None:
    for round_entry in rounds:
        if round_entry.get("ongoing") is True:
            return round_entry
    return rounds[0] if rounds else None


def _parse_tournament(entry: Mapping[str, object]) -> BroadcastTournament | None:
    """Build a tournament summary from one index line, or None if no round is ongoing."""
    tour = entry.get("tour")
    rounds = [item for item in entry.get("rounds") or [] if isinstance(item, Mapping)]
    if not isinstance(tour, Mapping) or not any(item.get("ongoing") is True for item in rounds):
        return None
    selected = _select_round(rounds)
    if selected is None or not selected.get("id"):
        return None
    games = [game for game in selected.get("games") or [] if isinstance(game, Mapping)]
    game_ids = [game_id for game_id in map(_game_id_for, games) if game_id]
    return BroadcastTournament(
        tournament_id=str(tour.get("id", "")),
        name=str(tour.get("name", "")),
        round_id=str(selected["id"]),
        round_name=str(selected.get("name", "")),
        game_ids=game_ids,
    )


def _parse_ndjson(text: str) -> list[Mapping[str, object]]:
    entries = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError:
            logger.warning("Skipping malformed broadcast index line: %.80s", line)
            continue
        if isinstance(payload, Mapping):
            entries.append(payload)
    return entries


def iter_round_chunks(response: requests.Response) -> Iterator[str]:
    """Yield decoded text from a streaming response as it arrives.

    Multi-byte characters split across network chunks are held back until the
    rest arrives; undecodable bytes are replaced rather than raised.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    for raw in response.iter_content(chunk_size=_CHUNK_SIZE):
        if not raw:
            continue
        text = decoder.decode(raw)
        if text:
            yield text
    tail = decoder.decode(b"", final=True)
    if tail:
        yield tail


class BroadcastClient:
    """Reads broadcast rounds from the chess server."""

    def __init__(
        self,
        settings: BroadcastSettings | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.settings = settings or BroadcastSettings()
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.settings.base_url.rstrip('/')}{path}"

    def stream_url(self, round_id: str) -> str:
        return self._url(self.settings.stream_path.format(round_id=round_id))

    def round_url(self, round_id: str) -> str:
        return self._url(self.settings.round_path.format(round_id=round_id))

    def open_round_stream(self, round_id: str) -> requests.Response:
        """Open the live PGN stream for a round.

        Raises:
            StreamUnavailableError: The stream could not be opened.
        """
        url = self.stream_url(round_id)
        try:
            response = self.session.get(url, stream=True, timeout=self.settings.stream_timeout_s)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Broadcast stream unavailable for round %s: %s", round_id, exc)
            raise StreamUnavailableError(f"Stream unavailable for round {round_id}: {exc}") from exc
        logger.info("Opened broadcast stream: %s", url)
        return response

    @retry(
        retry=retry_if_exception_type(requests.RequestException),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
    def fetch_round_snapshot(self, round_id: str) -> RoundSnapshot:
        """Fetch the JSON description of every game in a round, with retry."""
        response = self.session.get(
            self.round_url(round_id),
            timeout=self.settings.stream_timeout_s,
        )
        response.raise_for_status()
        return RoundSnapshot.model_validate(response.json())

    @retry(
        retry=retry_if_exception_type(requests.RequestException),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
    def list_ongoing_tournaments(self, nb: int | None = None) -> list[BroadcastTournament]:
        """Return tournaments that have a round in progress, with retry.

        The index is newline-delimited JSON, one tournament per line. The round
        offered for each tournament is its ongoing one.
        """
        response = self.session.get(
            self._url(self.settings.tournaments_path),
            params={"nb": nb or self.settings.tournaments_limit},
            timeout=self.settings.stream_timeout_s,
        )
        response.raise_for_status()
        tournaments = []
        for entry in _parse_ndjson(response.text):
            tournament = _parse_tournament(entry)
            if tournament is not None:
                tournaments.append(tournament)
        return tournaments

    def close(self) -> None:
        self.session.close()
