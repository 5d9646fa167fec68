"""Raw per-cycle telemetry snapshot."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class RawSnapshot(BaseModel):
    """Point-in-time telemetry fetched for one entity.

    Produced once per poll cycle and consumed immediately by
    :func:`fleetlog.ingestion.transform.transform_snapshot`.

    Parameters
    ----------
    entity_id : str
        Id of the entity the snapshot was fetched for.
    observed_at : datetime or None
        When the backend last observed the entity; ``None`` when no
        status has been recorded yet.
    latitude : float or None
        Latitude in decimal degrees.
    longitude : float or None
        Longitude in decimal degrees.
    cumulative_distance : float or None
        Raw odometer value in metres.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    entity_id: str
    observed_at: datetime | None = None
    latitude: float | None = None
    longitude: float | None = None
    cumulative_distance: float | None = None
