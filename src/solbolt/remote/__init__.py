"""
Remote compiler and symbolic-execution service support.

The service runs both jobs asynchronously; this module submits them,
polls them with backoff and feeds their results into the mapping store.
"""

from .client import RemoteServiceClient, PollResult
from .poller import TaskPoller, TaskKind, TaskStatus, POLL_INTERVALS
from .session import ExplorerSession

__all__ = [
    "RemoteServiceClient",
    "PollResult",
    "TaskPoller",
    "TaskKind",
    "TaskStatus",
    "POLL_INTERVALS",
    "ExplorerSession",
]
