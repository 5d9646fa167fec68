"""Snapshot assembly.

A snapshot combines two reads: the device status (position and the
time the device was last observed) and the newest odometer sample at or
after ``as_of``.  The underlying calls live in :mod:`fleetlog._api.status`.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fleetlog._api.status import fetch_device_status_info, fetch_odometer_status_data
from fleetlog._transport import Transport
from fleetlog.exceptions import FleetlogNotFoundError
from fleetlog.models.snapshot import RawSnapshot
from fleetlog.models.status import StatusData
from fleetlog.session import Session

_logger = logging.getLogger(__name__)


def latest_sample(samples: list[StatusData]) -> StatusData | None:
    """Return the most recent sample that carries a value."""
    candidates = [sample for sample in samples if sample.data is not None]
    if not candidates:
        return None
    dated = [sample for sample in candidates if sample.date_time is not None]
    if dated:
        return max(dated, key=lambda sample: sample.date_time)  # type: ignore[arg-type,return-value]
    return candidates[-1]


async def fetch_snapshot(
    *,
    session: Session,
    transport: Transport,
    entity_id: str,
    as_of: datetime | None = None,
) -> RawSnapshot:
    """Fetch the current snapshot for *entity_id*.

    Raises
    ------
    FleetlogNotFoundError
        If the backend has no status record for the entity.
    """
    statuses = await fetch_device_status_info(session, transport, entity_id)
    if not statuses:
        raise FleetlogNotFoundError(
            f"No status found for device {entity_id}",
            method="Get",
        )
    status = statuses[0]

    from_date = as_of if as_of is not None else status.date_time
    samples = await fetch_odometer_status_data(session, transport, entity_id, from_date=from_date)
    odometer = latest_sample(samples)
    if odometer is None:
        _logger.debug("No odometer sample for %s since %s", entity_id, from_date)

    return RawSnapshot(
        entity_id=entity_id,
        observed_at=status.date_time,
        latitude=status.latitude,
        longitude=status.longitude,
        cumulative_distance=odometer.data if odometer is not None else None,
    )
