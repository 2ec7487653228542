from __future__ import annotations

import os
from dataclasses import MISSING, dataclass, field
from pathlib import Path

from dotenv import load_dotenv

_MISSING = object()
_SETTINGS_ALIAS_FIELDS = (
    "stockfish_path",
    "stockfish_fallback_path",
    "stockfish_threads",
    "stockfish_hash_mb",
    "stockfish_depth",
    "stockfish_timeout_s",
    "stockfish_cooldown_ms",
    "remote_eval_url",
    "remote_eval_method",
    "broadcast_base_url",
    "poll_interval_s",
    "link_delay_s",
    "blunder_cooldown_s",
    "warmup_s",
)

load_dotenv()

DEFAULT_REMOTE_EVAL_URL = "https://stockfish.chessfolio.fun/analyze_stockfish"
DEFAULT_BROADCAST_BASE_URL = "https://lichess.org"
EVALUATOR_ENGINE = "engine"
EVALUATOR_REMOTE = "remote"
_EVALUATORS = {EVALUATOR_ENGINE, EVALUATOR_REMOTE}


def _optional_path(value: str | None) -> Path | None:
    return Path(value) if value else None


def _split_game_ids(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _field_value(name: str, field_info: object, kwargs: dict[str, object]) -> object:
    value = kwargs.pop(name, _MISSING)
    if value is not _MISSING:
        return value
    default_factory = getattr(field_info, "default_factory", MISSING)
    if default_factory is not MISSING:
        return default_factory()
    default = getattr(field_info, "default", MISSING)
    if default is not MISSING:
        return default
    raise TypeError(f"Missing required argument: {name}")


def _apply_settings_aliases(settings: Settings, kwargs: dict[str, object]) -> None:
    for alias in _SETTINGS_ALIAS_FIELDS:
        value = kwargs.pop(alias, _MISSING)
        if value is not _MISSING:
            setattr(settings, alias, value)


def _raise_on_unexpected_kwargs(kwargs: dict[str, object]) -> None:
    if kwargs:
        unexpected = next(iter(kwargs))
        raise TypeError(f"Settings.__init__() got an unexpected keyword argument '{unexpected}'")


@dataclass(slots=True)
class EngineSettings:
    """Local UCI engine configuration."""

    path: Path = Path(os.getenv("STOCKFISH_PATH", "stockfish"))
    fallback_path: Path | None = _optional_path(os.getenv("STOCKFISH_FALLBACK_PATH"))
    threads: int = int(os.getenv("STOCKFISH_THREADS", "1"))
    hash_mb: int = int(os.getenv("STOCKFISH_HASH", "16"))
    max_depth: int = int(os.getenv("STOCKFISH_DEPTH", "18"))
    search_timeout_s: float = float(os.getenv("STOCKFISH_TIMEOUT_S", "10"))
    init_timeout_s: float = float(os.getenv("STOCKFISH_INIT_TIMEOUT_S", "30"))
    cooldown_ms: int = int(os.getenv("STOCKFISH_COOLDOWN_MS", "50"))


@dataclass(slots=True)
class RemoteEvalSettings:
    """Remote HTTP evaluation service configuration."""

    url: str = os.getenv("EVALBARS_REMOTE_EVAL_URL", DEFAULT_REMOTE_EVAL_URL)
    method: str = os.getenv("EVALBARS_REMOTE_EVAL_METHOD", "post").lower()
    fen_param: str = os.getenv("EVALBARS_REMOTE_EVAL_FEN_PARAM", "fen")
    timeout_s: float = float(os.getenv("EVALBARS_REMOTE_EVAL_TIMEOUT_S", "15"))


@dataclass(slots=True)
class BroadcastSettings:
    """Broadcast feed endpoints on the chess server."""

    base_url: str = os.getenv("EVALBARS_BROADCAST_BASE_URL", DEFAULT_BROADCAST_BASE_URL)
    stream_path: str = "/api/stream/broadcast/round/{round_id}.pgn"
    round_path: str = "/api/broadcast/-/-/{round_id}"
    tournaments_path: str = "/api/broadcast"
    tournaments_limit: int = int(os.getenv("EVALBARS_TOURNAMENTS_LIMIT", "50"))
    stream_timeout_s: float = float(os.getenv("EVALBARS_STREAM_TIMEOUT_S", "30"))


@dataclass(slots=True)
class TrackerSettings:
    """Polling cadence and blunder heuristics for tracked links."""

    poll_interval_s: float = float(os.getenv("EVALBARS_POLL_INTERVAL_S", "2"))
    link_delay_s: float = float(os.getenv("EVALBARS_LINK_DELAY_S", "0.2"))
    blunder_threshold: float = float(os.getenv("EVALBARS_BLUNDER_THRESHOLD", "2"))
    contested_band: float = float(os.getenv("EVALBARS_CONTESTED_BAND", "4"))
    blunder_cooldown_s: float = float(os.getenv("EVALBARS_BLUNDER_COOLDOWN_S", "10"))
    alert_duration_s: float = float(os.getenv("EVALBARS_ALERT_DURATION_S", "10"))
    warmup_s: float = float(os.getenv("EVALBARS_WARMUP_S", "5"))


@dataclass(slots=True, init=False)
class Settings:
    """Central configuration for feeds, evaluation and link tracking."""

    api_token: str = os.getenv("EVALBARS_API_TOKEN", "local-dev-token")
    evaluator: str = os.getenv("EVALBARS_EVALUATOR", EVALUATOR_ENGINE)
    cache_capacity: int = int(os.getenv("EVALBARS_CACHE_CAPACITY", "100"))
    round_id: str | None = os.getenv("EVALBARS_ROUND_ID") or None
    game_ids: list[str] = field(
        default_factory=lambda: _split_game_ids(os.getenv("EVALBARS_GAME_IDS"))
    )
    log_level: str = os.getenv("EVALBARS_LOG_LEVEL", "INFO")
    host: str = os.getenv("EVALBARS_HOST", "127.0.0.1")
    port: int = int(os.getenv("EVALBARS_PORT", "8000"))

    engine: EngineSettings = field(default_factory=EngineSettings)
    remote: RemoteEvalSettings = field(default_factory=RemoteEvalSettings)
    broadcast: BroadcastSettings = field(default_factory=BroadcastSettings)
    tracker: TrackerSettings = field(default_factory=TrackerSettings)

    def __init__(self, **kwargs: object) -> None:
        for name, field_info in self.__dataclass_fields__.items():
            setattr(self, name, _field_value(name, field_info, kwargs))
        _apply_settings_aliases(self, kwargs)
        _raise_on_unexpected_kwargs(kwargs)
        if self.evaluator not in _EVALUATORS:
            raise ValueError(f"Unsupported evaluator: {self.evaluator}")

    @property
    def stockfish_path(self) -> Path:
        return self.engine.path

    @stockfish_path.setter
    def stockfish_path(self, value: Path | str) -> None:
        self.engine.path = Path(value)

    @property
    def stockfish_fallback_path(self) -> Path | None:
        return self.engine.fallback_path

    @stockfish_fallback_path.setter
    def stockfish_fallback_path(self, value: Path | str | None) -> None:
        self.engine.fallback_path = Path(value) if value else None

    @property
    def stockfish_threads(self) -> int:
        return self.engine.threads

    @stockfish_threads.setter
    def stockfish_threads(self, value: int) -> None:
        self.engine.threads = value

    @property
    def stockfish_hash_mb(self) -> int:
        return self.engine.hash_mb

    @stockfish_hash_mb.setter
    def stockfish_hash_mb(self, value: int) -> None:
        self.engine.hash_mb = value

    @property
    def stockfish_depth(self) -> int:
        return self.engine.max_depth

    @stockfish_depth.setter
    def stockfish_depth(self, value: int) -> None:
        self.engine.max_depth = value

    @property
    def stockfish_timeout_s(self) -> float:
        return self.engine.search_timeout_s

    @stockfish_timeout_s.setter
    def stockfish_timeout_s(self, value: float) -> None:
        self.engine.search_timeout_s = value

    @property
    def stockfish_cooldown_ms(self) -> int:
        return self.engine.cooldown_ms

    @stockfish_cooldown_ms.setter
    def stockfish_cooldown_ms(self, value: int) -> None:
        self.engine.cooldown_ms = value

    @property
    def remote_eval_url(self) -> str:
        return self.remote.url

    @remote_eval_url.setter
    def remote_eval_url(self, value: str) -> None:
        self.remote.url = value

    @property
    def remote_eval_method(self) -> str:
        return self.remote.method

    @remote_eval_method.setter
    def remote_eval_method(self, value: str) -> None:
        self.remote.method = value.lower()

    @property
    def broadcast_base_url(self) -> str:
        return self.broadcast.base_url

    @broadcast_base_url.setter
    def broadcast_base_url(self, value: str) -> None:
        self.broadcast.base_url = value

    @property
    def poll_interval_s(self) -> float:
        return self.tracker.poll_interval_s

    @poll_interval_s.setter
    def poll_interval_s(self, value: float) -> None:
        self.tracker.poll_interval_s = value

    @property
    def link_delay_s(self) -> float:
        return self.tracker.link_delay_s

    @link_delay_s.setter
    def link_delay_s(self, value: float) -> None:
        self.tracker.link_delay_s = value

    @property
    def blunder_cooldown_s(self) -> float:
        return self.tracker.blunder_cooldown_s

    @blunder_cooldown_s.setter
    def blunder_cooldown_s(self, value: float) -> None:
        self.tracker.blunder_cooldown_s = value

    @property
    def warmup_s(self) -> float:
        return self.tracker.warmup_s

    @warmup_s.setter
    def warmup_s(self, value: float) -> None:
        self.tracker.warmup_s = value


def _apply_env_overrides(settings: Settings) -> None:
    evaluator = os.getenv("EVALBARS_EVALUATOR")
    if evaluator in _EVALUATORS:
        settings.evaluator = evaluator
    round_id = os.getenv("EVALBARS_ROUND_ID")
    if round_id:
        settings.round_id = round_id
    game_ids = _split_game_ids(os.getenv("EVALBARS_GAME_IDS"))
    if game_ids:
        settings.game_ids = game_ids
    stockfish_path = os.getenv("STOCKFISH_PATH")
    if stockfish_path:
        settings.stockfish_path = stockfish_path


def get_settings(**overrides: object) -> Settings:
    load_dotenv()
    settings = Settings()
    _apply_env_overrides(settings)
    if overrides:
        _apply_settings_aliases(settings, overrides)
        for name in list(overrides):
            if name in settings.__dataclass_fields__:
                setattr(settings, name, overrides.pop(name))
        _raise_on_unexpected_kwargs(overrides)
    return settings
