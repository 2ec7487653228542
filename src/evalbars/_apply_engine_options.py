from typing import Any

import chess.engine

from evalbars.utils.logger import get_logger

logger = get_logger(__name__)


def _filter_supported_options(
    engine: chess.engine.SimpleEngine,
    options: dict[str, Any],
) -> dict[str, Any]:
    supported = getattr(engine, "options", {}) or {}
    return {
        name: value
        for name, value in options.items()
        if value is not None and name in supported
    }


def _apply_engine_options(
    engine: chess.engine.SimpleEngine,
    options: dict[str, Any],
) -> dict[str, Any]:
    """Send the options the engine advertises and return the ones applied."""
    applied_options = _filter_supported_options(engine, options)
    if not applied_options:
        return {}
    try:
        engine.configure(applied_options)
    except chess.engine.EngineError as exc:  # pragma: no cover - engine-specific
        logger.warning("Engine option configuration failed: %s", exc)
        return {}
    return applied_options
