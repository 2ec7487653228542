"""Logger configuration and convenience helpers."""

from __future__ import annotations

import logging
import sys
import time
from functools import wraps

_DEFAULT_LOGGER_NAME = "evalbars"
_DEFAULT_LOG_LEVEL = logging.INFO
_DEFAULT_FORMATTER = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
_DEFAULT_HANDLER = logging.StreamHandler(sys.stdout)
_DEFAULT_HANDLER.setFormatter(_DEFAULT_FORMATTER)


def _configure_logger(logger: logging.Logger, level: int) -> None:
    """
    Attach the shared stdout handler to a logger.

    The level is only applied when the logger has none of its own, so a level set
    through `set_level` survives later `get_logger` calls for the same name.

    Parameters
    ----------
    logger : logging.Logger
        The logger instance to configure.
    level : int
        Level applied when the logger's level is still NOTSET.

    Examples
    --------
    >>> import logging
    >>> from evalbars.utils.logger import _configure_logger
    >>> logger = logging.getLogger("evalbars.example")
    >>> _configure_logger(logger, logging.INFO)
    >>> logger.info("ready")
    """
    if logger.level == logging.NOTSET:
        logger.setLevel(level)
    if not logger.handlers:
        logger.addHandler(_DEFAULT_HANDLER)
    logger.propagate = False


def get_logger(name: str | None = None, level: int = _DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Return a configured logger for the given name."""
    logger = logging.getLogger(name or _DEFAULT_LOGGER_NAME)
    _configure_logger(logger, level)
    return logger


def set_level(level: int | str, logger_names: list[str] | None = None) -> None:
    """Set the log level for one or more logger names."""
    names = logger_names or [_DEFAULT_LOGGER_NAME, "uvicorn"]
    for name in names:
        logging.getLogger(name).setLevel(level)
    for name, existing in logging.root.manager.loggerDict.items():
        if name.startswith(f"{_DEFAULT_LOGGER_NAME}.") and isinstance(existing, logging.Logger):
            existing.setLevel(level)


class Logger(logging.Logger):
    """Logger pre-wired with the evalbars handler and format."""

    def __init__(self, name: str = _DEFAULT_LOGGER_NAME, level: int = _DEFAULT_LOG_LEVEL) -> None:
        super().__init__(name, level)
        _configure_logger(self, level)


def funclogger(func):
    """Decorator that traces a call at debug level.

    Logs the qualified function name, its positional and keyword arguments,
    the elapsed time and the return value.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        function_path = f"{func.__module__}.{func.__qualname__}".replace("<", "").replace(">", "")
        logger = get_logger(function_path)
        if not logger.isEnabledFor(logging.DEBUG):
            return func(*args, **kwargs)

        for i, arg in enumerate(args):
            logger.debug(" %s. %s (%s)", i, arg, type(arg).__name__)
        for key, value in kwargs.items():
            logger.debug(" - %s (%s): %s", key, type(value).__name__, value)

        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed_time = time.perf_counter() - start_time
        logger.debug("Finished %s in %.4f seconds", func.__qualname__, elapsed_time)
        logger.debug("Return Value: %s (%s)", result, type(result).__name__)
        return result

    return wrapper
