"""Concurrent polling engine.

One :class:`PollWorker` per entity, coordinated by a shared
:class:`CancellationSignal` and joined by the :class:`Supervisor`.
"""

from fleetlog.polling.cancellation import CancellationSignal
from fleetlog.polling.source import RemoteDataSource
from fleetlog.polling.stop import OperatorStopListener
from fleetlog.polling.supervisor import RunResult, Supervisor, WorkerHandle
from fleetlog.polling.worker import PollWorker, WorkerState, WorkerStats

__all__ = [
    "CancellationSignal",
    "OperatorStopListener",
    "PollWorker",
    "RemoteDataSource",
    "RunResult",
    "Supervisor",
    "WorkerHandle",
    "WorkerState",
    "WorkerStats",
]
