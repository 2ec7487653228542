"""Start a UCI engine process."""

import shutil
from pathlib import Path

import chess.engine

from evalbars.config import EngineSettings
from evalbars.utils.logger import get_logger

logger = get_logger(__name__)


def _resolve_command(path: Path) -> str | None:
    """Return an executable command for the engine path, if one exists."""
    if path.exists():
        return str(path)
    return shutil.which(str(path))


def _initialize_engine(command: str, settings: EngineSettings) -> chess.engine.SimpleEngine | None:
    """Return a started engine, or None when the process fails to come up."""
    try:
        return chess.engine.SimpleEngine.popen_uci(command, timeout=settings.init_timeout_s)
    except (OSError, TimeoutError, chess.engine.EngineError) as exc:
        logger.warning("Engine %s failed to start: %s", command, exc)
        return None
