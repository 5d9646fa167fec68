"""Remote data source interface consumed by poll workers."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from fleetlog.models.device import Device
from fleetlog.models.snapshot import RawSnapshot


class RemoteDataSource(Protocol):
    """Structural interface of the telemetry backend.

    :class:`fleetlog.client.FleetClient` is the production implementation;
    tests pass in-memory doubles.
    """

    async def list_entities(self) -> list[Device]:
        ...

    async def fetch_snapshot(self, entity_id: str, as_of: datetime | None = None) -> RawSnapshot:
        ...
