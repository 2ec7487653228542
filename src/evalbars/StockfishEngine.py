"""Local UCI engine evaluation backend."""

# pylint: disable=invalid-name

from __future__ import annotations

import threading
from contextlib import suppress
from pathlib import Path
from typing import Any

import chess
import chess.engine

from evalbars._apply_engine_options import _apply_engine_options
from evalbars._initialize_engine import _initialize_engine, _resolve_command
from evalbars.config import EngineSettings
from evalbars.errors import EngineCrashedError
from evalbars.evaluation import Evaluation
from evalbars.ports.evaluation_backend import ProgressCallback
from evalbars.utils.logger import get_logger

logger = get_logger(__name__)

_ENGINE_FAILURES = (chess.engine.EngineError, chess.engine.EngineTerminatedError, OSError)


def _board_from_fen(fen: str) -> chess.Board:
    board = chess.Board(fen, chess960=True)
    board.chess960 = board.has_chess960_castling_rights()
    return board


class StockfishEngine:
    """Long-lived engine process searching one position at a time.

    Each search runs `go depth <max_depth>` and streams `info` updates to the
    progress callback. A watchdog timer sends `stop` once `search_timeout_s`
    elapses, so the call returns the deepest score seen rather than hanging.
    Callers must serialize searches; `EvaluationQueue` does that.
    """

    def __init__(self, settings: EngineSettings) -> None:
        self.settings = settings
        self.engine: chess.engine.SimpleEngine | None = None
        self.command: str | None = None
        self.applied_options: dict[str, Any] = {}
        self._analysis: chess.engine.SimpleAnalysisResult | None = None
        self._analysis_lock = threading.Lock()

    def __enter__(self) -> StockfishEngine:
        if self.engine is None:
            self._start_engine()
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:
        self.close()

    @property
    def is_ready(self) -> bool:
        return self.engine is not None

    def close(self) -> None:
        """Shut down the engine if running."""
        self.stop()
        if self.engine is None:
            return
        with suppress(*_ENGINE_FAILURES):
            self.engine.quit()
        self.engine = None

    def restart(self) -> bool:
        """Replace the engine process, trying the fallback variant if needed."""
        if self.engine is not None:
            with suppress(*_ENGINE_FAILURES):
                self.engine.quit()
        self._reset_engine_state()
        return self._start_engine()

    def _candidate_paths(self) -> list[Path]:
        paths = [self.settings.path]
        if self.settings.fallback_path is not None and self.settings.fallback_path != self.settings.path:
            paths.append(self.settings.fallback_path)
        return paths

    def _configure_options(self) -> dict[str, Any]:
        return {
            "Threads": self.settings.threads,
            "Hash": self.settings.hash_mb,
        }

    def _start_engine(self) -> bool:
        """Start the first engine variant that comes up; False if none does."""
        for path in self._candidate_paths():
            command = _resolve_command(path)
            if command is None:
                logger.warning("Engine binary not found: %s", path)
                continue
            engine = _initialize_engine(command, self.settings)
            if engine is None:
                continue
            self.engine = engine
            self.command = command
            self.applied_options = _apply_engine_options(engine, self._configure_options())
            logger.info("Engine ready: %s", command)
            return True
        self._reset_engine_state()
        return False

    def _reset_engine_state(self) -> None:
        self.engine = None
        self.command = None
        self.applied_options = {}

    def _recover(self) -> None:
        logger.error("Engine %s terminated; reinitializing", self.command)
        if not self.restart():
            logger.error("No engine variant could be restarted")

    def evaluate(
        self,
        fen: str,
        on_progress: ProgressCallback | None = None,
    ) -> Evaluation | None:
        """Search the position and return the deepest scored update.

        Returns None when no engine can be started or the search produced no
        scored update before it ended.

        Raises:
            EngineCrashedError: The engine died mid-search. The engine has already
                been reinitialized for the next request when this is raised.
        """
        if self.engine is None and not self._start_engine():
            logger.error("Engine unavailable; cannot evaluate %s", fen)
            return None
        engine = self.engine
        if engine is None:
            return None
        board = _board_from_fen(fen)

        best: Evaluation | None = None
        try:
            analysis = engine.analysis(board, chess.engine.Limit(depth=self.settings.max_depth))
            with self._analysis_lock:
                self._analysis = analysis
            watchdog = threading.Timer(self.settings.search_timeout_s, analysis.stop)
            watchdog.daemon = True
            watchdog.start()
            try:
                with analysis:
                    for info in analysis:
                        update = Evaluation.from_engine_info(info)
                        if update is None:
                            continue
                        best = update
                        if on_progress is not None:
                            on_progress(update)
                        if update.depth >= self.settings.max_depth:
                            break
            finally:
                watchdog.cancel()
                with self._analysis_lock:
                    self._analysis = None
        except _ENGINE_FAILURES as exc:
            self._recover()
            raise EngineCrashedError(f"Engine failed while evaluating {fen}: {exc}") from exc
        return best

    def stop(self) -> None:
        """Stop the search in flight; its best score so far is still returned."""
        with self._analysis_lock:
            analysis = self._analysis
        if analysis is not None:
            with suppress(*_ENGINE_FAILURES):
                analysis.stop()
