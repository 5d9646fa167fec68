from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from fleetlog.exceptions import FleetlogTransportError, SinkWriteError
from fleetlog.models.device import Device
from fleetlog.models.reading import Reading, UnitSystem
from fleetlog.models.snapshot import RawSnapshot
from fleetlog.polling.cancellation import CancellationSignal
from fleetlog.polling.worker import PollWorker, WorkerState
from fleetlog.storage.sink import ReadingSink

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@dataclass
class FakeSource:
    """In-memory data source returning one snapshot per call."""

    fail_calls: set[int] = field(default_factory=set)
    failure: Exception = field(default_factory=lambda: FleetlogTransportError("backend unreachable", method="Get"))
    offsets: list[int] | None = None
    as_of_seen: list[datetime | None] = field(default_factory=list)
    calls: int = 0

    async def list_entities(self) -> list[Device]:
        return []

    async def fetch_snapshot(self, entity_id: str, as_of: datetime | None = None) -> RawSnapshot:
        self.calls += 1
        self.as_of_seen.append(as_of)
        if self.calls in self.fail_calls:
            raise self.failure
        offset = self.offsets[self.calls - 1] if self.offsets is not None else self.calls
        return RawSnapshot(
            entity_id=entity_id,
            observed_at=T0 + timedelta(seconds=offset),
            latitude=43.65,
            longitude=-79.38,
            cumulative_distance=15000 + self.calls,
        )


@dataclass
class BlockingSource:
    """Data source whose fetch waits until ``release`` is set."""

    started: asyncio.Event = field(default_factory=asyncio.Event)
    release: asyncio.Event = field(default_factory=asyncio.Event)

    async def list_entities(self) -> list[Device]:
        return []

    async def fetch_snapshot(self, entity_id: str, as_of: datetime | None = None) -> RawSnapshot:
        self.started.set()
        await self.release.wait()
        return RawSnapshot(entity_id=entity_id, observed_at=T0, cumulative_distance=15000)


class FlakySink(ReadingSink):
    """Sink whose first append fails."""

    def __init__(self, directory: Path) -> None:
        super().__init__(directory)
        self.attempts = 0

    def append(self, entity_id: str, reading: Reading) -> None:
        self.attempts += 1
        if self.attempts == 1:
            raise SinkWriteError("disk full", entity_id=entity_id)
        super().append(entity_id, reading)


def _worker(
    source: FakeSource | BlockingSource,
    sink: ReadingSink,
    signal: CancellationSignal,
    *,
    poll_interval: float = 0.01,
) -> PollWorker:
    return PollWorker(
        Device(id="b1", name="Truck 1", vin="VIN1"),
        source,
        sink,
        signal,
        unit_system=UnitSystem.METRIC,
        poll_interval=poll_interval,
    )


@pytest.mark.asyncio
async def test_each_successful_cycle_appends_one_line(tmp_path: Path) -> None:
    source = FakeSource()
    sink = ReadingSink(tmp_path)
    worker = _worker(source, sink, CancellationSignal())

    await worker.run_cycle()
    await worker.run_cycle()

    rows = sink.read_lines("b1")
    assert [row[4] for row in rows] == ["15001", "15002"]
    assert worker.stats.readings_written == 2
    assert worker.stats.last_timestamp == T0 + timedelta(seconds=2)


@pytest.mark.asyncio
async def test_fetch_failure_skips_cycle_without_writing(tmp_path: Path) -> None:
    source = FakeSource(fail_calls={1})
    sink = ReadingSink(tmp_path)
    worker = _worker(source, sink, CancellationSignal())

    assert await worker.run_cycle() is None
    assert sink.read_lines("b1") == []
    assert worker.stats.fetch_failures == 1

    assert await worker.run_cycle() is not None
    assert len(sink.read_lines("b1")) == 1


@pytest.mark.asyncio
async def test_sink_failure_does_not_stop_worker(tmp_path: Path) -> None:
    sink = FlakySink(tmp_path)
    worker = _worker(FakeSource(), sink, CancellationSignal())

    assert await worker.run_cycle() is None
    assert await worker.run_cycle() is not None

    assert worker.stats.write_failures == 1
    assert len(sink.read_lines("b1")) == 1


@pytest.mark.asyncio
async def test_last_timestamp_is_passed_as_of_next_fetch(tmp_path: Path) -> None:
    source = FakeSource()
    worker = _worker(source, ReadingSink(tmp_path), CancellationSignal())

    await worker.run_cycle()
    await worker.run_cycle()

    assert source.as_of_seen == [None, T0 + timedelta(seconds=1)]


@pytest.mark.asyncio
async def test_cancellation_interrupts_sleep(tmp_path: Path) -> None:
    signal = CancellationSignal()
    worker = _worker(FakeSource(), ReadingSink(tmp_path), signal, poll_interval=60)

    task = asyncio.create_task(worker.run())
    while worker.stats.cycles == 0 or worker.state is not WorkerState.SLEEPING:
        await asyncio.sleep(0.001)
    signal.trigger()

    stats = await asyncio.wait_for(task, 1)

    assert stats.cycles == 1
    assert worker.state is WorkerState.CANCELLED


@pytest.mark.asyncio
async def test_pre_triggered_signal_runs_no_cycle(tmp_path: Path) -> None:
    signal = CancellationSignal()
    signal.trigger()
    source = FakeSource()
    worker = _worker(source, ReadingSink(tmp_path), signal)

    stats = await worker.run()

    assert stats.cycles == 0
    assert source.calls == 0


def test_blank_entity_id_is_bound_once(tmp_path: Path) -> None:
    worker = PollWorker(Device(name="No id"), FakeSource(), ReadingSink(tmp_path), CancellationSignal())

    assert worker.entity_id
    assert worker.entity_id == worker.entity.id


@pytest.mark.asyncio
async def test_unexpected_fetch_error_does_not_end_worker(tmp_path: Path) -> None:
    signal = CancellationSignal()
    source = FakeSource(fail_calls={1}, failure=TimeoutError("read timed out"))
    sink = ReadingSink(tmp_path)
    worker = _worker(source, sink, signal)

    task = asyncio.create_task(worker.run())
    while worker.stats.readings_written == 0:
        assert not task.done()
        await asyncio.sleep(0.001)
    signal.trigger()
    stats = await asyncio.wait_for(task, 1)

    assert stats.fetch_failures == 1
    assert stats.cycles >= 2
    assert len(sink.read_lines("b1")) == stats.readings_written


@pytest.mark.asyncio
async def test_in_flight_cycle_finishes_after_cancellation(tmp_path: Path) -> None:
    signal = CancellationSignal()
    source = BlockingSource()
    sink = ReadingSink(tmp_path)
    worker = _worker(source, sink, signal, poll_interval=60)

    task = asyncio.create_task(worker.run())
    await asyncio.wait_for(source.started.wait(), 1)
    signal.trigger()
    await asyncio.sleep(0.01)
    assert not task.done()

    source.release.set()
    stats = await asyncio.wait_for(task, 1)

    assert stats.cycles == 1
    assert stats.readings_written == 1
    assert len(sink.read_lines("b1")) == 1
    assert worker.state is WorkerState.CANCELLED


@pytest.mark.asyncio
async def test_last_timestamp_never_moves_backwards(tmp_path: Path) -> None:
    source = FakeSource(offsets=[5, 2])
    worker = _worker(source, ReadingSink(tmp_path), CancellationSignal())

    await worker.run_cycle()
    await worker.run_cycle()

    assert worker.stats.readings_written == 2
    assert worker.stats.last_timestamp == T0 + timedelta(seconds=5)


@pytest.mark.asyncio
async def test_failed_write_does_not_advance_last_timestamp(tmp_path: Path) -> None:
    source = FakeSource()
    worker = _worker(source, FlakySink(tmp_path), CancellationSignal())

    await worker.run_cycle()
    assert worker.stats.last_timestamp is None

    await worker.run_cycle()
    assert worker.stats.last_timestamp == T0 + timedelta(seconds=2)
    assert source.as_of_seen == [None, None]
