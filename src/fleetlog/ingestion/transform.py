"""Snapshot → reading transformation.

:func:`transform_snapshot` is pure and total: it never raises for
missing telemetry and returns the same reading for the same inputs
(apart from the generated id fallback, which only applies to entities
without an id).
"""

from __future__ import annotations

import uuid

from fleetlog._constants import km_to_miles
from fleetlog.models.device import Device
from fleetlog.models.reading import Reading, UnitSystem
from fleetlog.models.snapshot import RawSnapshot


def convert_odometer(distance: float | None, unit_system: UnitSystem) -> int:
    """Convert a raw odometer value to the display unit, rounded to an integer.

    Metric values pass through unchanged; imperial values are treated as
    metres, scaled to kilometres and converted to miles.  A missing value
    is ``0``.
    """
    if distance is None:
        return 0
    if unit_system is UnitSystem.IMPERIAL:
        return int(round(km_to_miles(distance / 1000)))
    return int(round(distance))


def transform_snapshot(entity: Device, snapshot: RawSnapshot, *, unit_system: UnitSystem) -> Reading:
    """Build the normalized :class:`Reading` for one poll cycle."""
    entity_id = entity.id.strip() or uuid.uuid4().hex
    return Reading(
        entity_id=entity_id,
        name=entity.name,
        vin=entity.vin,
        timestamp=snapshot.observed_at,
        odometer=convert_odometer(snapshot.cumulative_distance, unit_system),
        latitude=snapshot.latitude if snapshot.latitude is not None else 0.0,
        longitude=snapshot.longitude if snapshot.longitude is not None else 0.0,
    )
