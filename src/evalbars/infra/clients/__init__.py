"""Infrastructure client adapters."""

from evalbars.infra.clients.broadcast_client import BroadcastClient
from evalbars.infra.clients.remote_eval_client import RemoteEvaluationBackend

__all__ = [
    "BroadcastClient",
    "RemoteEvaluationBackend",
]
