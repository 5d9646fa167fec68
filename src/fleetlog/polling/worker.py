"""Per-entity poll loop.

One :class:`PollWorker` owns one entity for the whole run.  Each cycle
fetches a snapshot, transforms it into a reading and appends the reading
to the entity's log, then sleeps until the next interval or until the
shared :class:`CancellationSignal` fires.

Cancellation is cooperative: the signal is checked at the top of every
cycle and interrupts the sleep, but an in-flight fetch or write is always
allowed to finish.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from fleetlog._constants import DEFAULT_POLL_INTERVAL
from fleetlog.exceptions import FleetlogError, SinkWriteError
from fleetlog.ingestion.transform import transform_snapshot
from fleetlog.models.device import Device
from fleetlog.models.reading import Reading, UnitSystem
from fleetlog.polling.cancellation import CancellationSignal
from fleetlog.polling.source import RemoteDataSource
from fleetlog.storage.sink import ReadingSink

_logger = logging.getLogger(__name__)


class WorkerState(StrEnum):
    RUNNING = "running"
    FETCHING = "fetching"
    TRANSFORMING = "transforming"
    PERSISTING = "persisting"
    SLEEPING = "sleeping"
    CANCELLED = "cancelled"


@dataclass(slots=True)
class WorkerStats:
    """Counters kept by a worker over its lifetime."""

    cycles: int = 0
    readings_written: int = 0
    fetch_failures: int = 0
    write_failures: int = 0
    last_timestamp: datetime | None = None


class PollWorker:
    """Fetch → transform → persist loop for a single entity."""

    def __init__(
        self,
        entity: Device,
        source: RemoteDataSource,
        sink: ReadingSink,
        signal: CancellationSignal,
        *,
        unit_system: UnitSystem = UnitSystem.METRIC,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        if not entity.id.strip():
            # Bind a generated id once so every reading lands in the same file.
            entity = entity.model_copy(update={"id": uuid.uuid4().hex})
        self._entity = entity
        self._source = source
        self._sink = sink
        self._signal = signal
        self._unit_system = unit_system
        self._poll_interval = poll_interval
        self._state = WorkerState.RUNNING
        self._stats = WorkerStats()

    @property
    def entity(self) -> Device:
        return self._entity

    @property
    def entity_id(self) -> str:
        return self._entity.id

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def stats(self) -> WorkerStats:
        return self._stats

    async def run(self) -> WorkerStats:
        """Poll until the cancellation signal fires; return the final stats."""
        _logger.debug("Worker for %s started (interval=%ss)", self.entity_id, self._poll_interval)
        while not self._signal.is_triggered:
            await self.run_cycle()
            self._state = WorkerState.SLEEPING
            if await self._signal.wait(self._poll_interval):
                break
            self._state = WorkerState.RUNNING

        self._state = WorkerState.CANCELLED
        _logger.debug(
            "Worker for %s cancelled after %d cycles (%d readings)",
            self.entity_id,
            self._stats.cycles,
            self._stats.readings_written,
        )
        return self._stats

    async def run_cycle(self) -> Reading | None:
        """Run a single cycle, returning the persisted reading if any.

        Fetch and write failures are absorbed here: the cycle yields no
        reading and the worker keeps polling.
        """
        self._stats.cycles += 1

        self._state = WorkerState.FETCHING
        try:
            snapshot = await self._source.fetch_snapshot(self.entity_id, as_of=self._stats.last_timestamp)
        except FleetlogError as exc:
            self._stats.fetch_failures += 1
            _logger.warning("Fetch for %s failed, skipping cycle: %s", self.entity_id, exc)
            _logger.debug("Fetch failure detail for %s", self.entity_id, exc_info=True)
            return None
        except Exception:
            self._stats.fetch_failures += 1
            _logger.warning("Unexpected fetch error for %s, skipping cycle", self.entity_id, exc_info=True)
            return None

        self._state = WorkerState.TRANSFORMING
        reading = transform_snapshot(self._entity, snapshot, unit_system=self._unit_system)

        self._state = WorkerState.PERSISTING
        try:
            await asyncio.to_thread(self._sink.append, self.entity_id, reading)
        except SinkWriteError:
            self._stats.write_failures += 1
            _logger.error("Dropping reading for %s", self.entity_id, exc_info=True)
            return None

        self._stats.readings_written += 1
        # Only persisted readings advance the odometer window, and it never moves back.
        previous = self._stats.last_timestamp
        if reading.timestamp is not None and (previous is None or reading.timestamp > previous):
            self._stats.last_timestamp = reading.timestamp
        return reading
