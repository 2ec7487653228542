"""Port interfaces for the evalbars application."""

from evalbars.ports.evaluation_backend import EvaluationBackend, ProgressCallback  # noqa: F401
from evalbars.ports.game_source import GameSource  # noqa: F401
