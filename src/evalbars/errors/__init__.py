"""Custom error types used in evalbars."""

import requests


class EvaluationBackendError(requests.HTTPError):
    """The remote evaluation service failed or returned an unusable payload."""


class StreamUnavailableError(requests.HTTPError):
    """The live broadcast stream could not be opened."""


class EngineCrashedError(RuntimeError):
    """The local engine terminated while a search was in flight."""
