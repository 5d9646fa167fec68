"""Worker supervisor.

Spawns one :class:`PollWorker` per entity, waits for a stop request,
broadcasts cancellation and joins every worker before returning.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from fleetlog._constants import DEFAULT_POLL_INTERVAL
from fleetlog.exceptions import FleetlogError, WorkerSpawnError
from fleetlog.models.device import Device
from fleetlog.models.reading import UnitSystem
from fleetlog.polling.cancellation import CancellationSignal
from fleetlog.polling.source import RemoteDataSource
from fleetlog.polling.worker import PollWorker, WorkerStats
from fleetlog.storage.sink import ReadingSink

_logger = logging.getLogger(__name__)

WorkerFactory = Callable[[Device, CancellationSignal], PollWorker]
"""Builds the worker for one entity; bound to the supervisor's signal."""


@dataclass(slots=True)
class WorkerHandle:
    """A running worker owned by the supervisor."""

    entity_id: str
    worker: PollWorker
    task: asyncio.Task[WorkerStats]


@dataclass
class RunResult:
    """Outcome of :meth:`Supervisor.run`."""

    started: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    stats: dict[str, WorkerStats] = field(default_factory=dict)
    stop_reason: str | None = None

    @property
    def worker_count(self) -> int:
        return len(self.started)

    @property
    def readings_written(self) -> int:
        return sum(stats.readings_written for stats in self.stats.values())


class Supervisor:
    """Owns the workers of one polling run.

    Usage::

        supervisor = Supervisor(client, ReadingSink("VehiclesInfoBackup"))
        result = await supervisor.run(devices, stop_requested=listener.wait())

    A supervisor runs once; its cancellation signal is broadcast-once.
    """

    def __init__(
        self,
        source: RemoteDataSource,
        sink: ReadingSink,
        *,
        unit_system: UnitSystem = UnitSystem.METRIC,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        worker_factory: WorkerFactory | None = None,
    ) -> None:
        self._source = source
        self._sink = sink
        self._unit_system = unit_system
        self._poll_interval = poll_interval
        self._worker_factory = worker_factory or self._default_worker
        self._signal = CancellationSignal()
        self._handles: list[WorkerHandle] = []
        self._ran = False

    @property
    def signal(self) -> CancellationSignal:
        return self._signal

    @property
    def active_workers(self) -> int:
        return sum(1 for handle in self._handles if not handle.task.done())

    def request_stop(self, reason: str = "stop requested") -> bool:
        """Broadcast cancellation to every worker.

        Safe to call any number of times; only the first call has an
        effect and returns ``True``.
        """
        return self._signal.trigger(reason)

    def _default_worker(self, entity: Device, signal: CancellationSignal) -> PollWorker:
        return PollWorker(
            entity,
            self._source,
            self._sink,
            signal,
            unit_system=self._unit_system,
            poll_interval=self._poll_interval,
        )

    def _spawn(self, entity: Device) -> WorkerHandle:
        try:
            worker = self._worker_factory(entity, self._signal)
            task = asyncio.create_task(worker.run(), name=f"poll-{worker.entity_id}")
        except Exception as exc:
            raise WorkerSpawnError(
                f"Could not start worker for device {entity.name or entity.id!r}: {exc}",
                entity_id=entity.id,
            ) from exc
        return WorkerHandle(entity_id=worker.entity_id, worker=worker, task=task)

    def _on_stop_requested(self, task: asyncio.Future[Any]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.error("Stop listener failed; stopping workers", exc_info=exc)
            self.request_stop("stop listener failed")
            return
        result = task.result()
        self.request_stop(str(result) if result else "operator stop")

    async def run(
        self,
        entities: Sequence[Device],
        stop_requested: Awaitable[Any] | None = None,
    ) -> RunResult:
        """Poll *entities* until a stop is requested, then join all workers.

        Parameters
        ----------
        entities : sequence of Device
            Entities to poll.  An empty sequence returns immediately.
        stop_requested : awaitable or None
            Resolves once when the operator asks to stop.  Without it the
            run lasts until :meth:`request_stop` is called or the calling
            task is cancelled.

        Returns
        -------
        RunResult
            Spawned and skipped entity ids plus per-worker stats.
        """
        if self._ran:
            raise FleetlogError("Supervisor.run() may only be called once")
        self._ran = True

        result = RunResult()
        if not entities:
            if asyncio.iscoroutine(stop_requested):
                stop_requested.close()
            _logger.info("No devices to poll")
            return result

        seen: set[str] = set()
        for entity in entities:
            if entity.id and entity.id in seen:
                _logger.warning("Device %s listed twice; polling it once", entity.id)
                result.skipped.append(entity.id)
                continue
            try:
                handle = self._spawn(entity)
            except WorkerSpawnError as exc:
                _logger.error("Skipping device [%s]: %s", entity.name or entity.id, exc, exc_info=exc.__cause__)
                result.skipped.append(entity.id)
                continue
            seen.add(handle.entity_id)
            self._handles.append(handle)
            result.started.append(handle.entity_id)
            _logger.info("Polling started for device [%s]", entity.name or handle.entity_id)

        if not self._handles:
            if asyncio.iscoroutine(stop_requested):
                stop_requested.close()
            return result

        stop_task: asyncio.Future[Any] | None = None
        if stop_requested is not None:
            stop_task = asyncio.ensure_future(stop_requested)
            stop_task.add_done_callback(self._on_stop_requested)

        try:
            await self._signal.wait()
        finally:
            self.request_stop("supervisor shutting down")
            if stop_task is not None and not stop_task.done():
                stop_task.cancel()
            result.stats = await self._join()
            result.stop_reason = self._signal.reason

        return result

    async def _join(self) -> dict[str, WorkerStats]:
        """Wait for every worker to reach its terminal state."""
        _logger.info("Waiting for %d workers to stop...", self.active_workers)
        outcomes = await asyncio.gather(*(handle.task for handle in self._handles), return_exceptions=True)

        stats: dict[str, WorkerStats] = {}
        for handle, outcome in zip(self._handles, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                _logger.error("Worker for %s ended with an error", handle.entity_id, exc_info=outcome)
                stats[handle.entity_id] = handle.worker.stats
            else:
                stats[handle.entity_id] = outcome
        self._handles.clear()
        _logger.info("All workers stopped")
        return stats
