"""Utility exports for the evalbars package."""

from .logger import Logger, funclogger, get_logger, set_level
from .now import Now

__all__ = [
    "Logger",
    "Now",
    "funclogger",
    "get_logger",
    "set_level",
]
