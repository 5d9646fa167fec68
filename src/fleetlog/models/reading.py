"""Normalized reading persisted once per poll cycle."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator

from fleetlog.exceptions import FleetlogConfigError


class UnitSystem(StrEnum):
    """Display unit system for stored odometer values."""

    METRIC = "metric"
    IMPERIAL = "imperial"

    @classmethod
    def parse(cls, value: str) -> UnitSystem:
        """Parse a case-insensitive unit system name.

        Raises :class:`FleetlogConfigError` for unknown names.
        """
        normalized = str(value).strip().lower()
        try:
            return cls(normalized)
        except ValueError as exc:
            choices = ", ".join(member.value for member in cls)
            raise FleetlogConfigError(f"unit system must be one of {choices}, got {value!r}") from exc


class Reading(BaseModel):
    """A normalized reading for one entity.

    Parameters
    ----------
    entity_id : str
        Non-empty, file-system-safe entity id.
    name : str
        Entity display name.
    vin : str or None
        Vehicle Identification Number, when known.
    timestamp : datetime or None
        When the backend observed the entity; ``None`` means no status
        has been observed yet and is never replaced by a sentinel.
    odometer : int
        Odometer in the configured display unit, rounded to an integer.
    latitude : float
        Latitude in decimal degrees (``0.0`` when unknown).
    longitude : float
        Longitude in decimal degrees (``0.0`` when unknown).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    entity_id: str
    name: str = ""
    vin: str | None = None
    timestamp: datetime | None = None
    odometer: int = 0
    latitude: float = 0.0
    longitude: float = 0.0

    @field_validator("entity_id")
    @classmethod
    def _require_entity_id(cls, value: str) -> str:
        entity_id = value.strip()
        if not entity_id:
            raise ValueError("entity_id must be non-empty")
        return entity_id
