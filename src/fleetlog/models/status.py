"""Device status models (position and diagnostic data)."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from fleetlog.ingestion.normalize import safe_float, safe_id
from fleetlog.models._base import ApiDateTime, FleetBaseModel


class DeviceStatusInfo(FleetBaseModel):
    """Latest known status of a device.

    Parameters
    ----------
    device_id : str or None
        Id of the device this status belongs to.
    date_time : datetime or None
        When the status was recorded (UTC).
    latitude : float or None
        Latitude in decimal degrees.
    longitude : float or None
        Longitude in decimal degrees.
    """

    device_id: str | None = Field(default=None, validation_alias=AliasChoices("device", "deviceId"))
    date_time: ApiDateTime = None
    latitude: float | None = None
    longitude: float | None = None

    @field_validator("device_id", mode="before")
    @classmethod
    def _coerce_device(cls, value: Any) -> str | None:
        return safe_id(value)

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)


class StatusData(FleetBaseModel):
    """A single diagnostic sample (e.g. an odometer reading in metres)."""

    device_id: str | None = Field(default=None, validation_alias=AliasChoices("device", "deviceId"))
    diagnostic_id: str | None = Field(default=None, validation_alias=AliasChoices("diagnostic", "diagnosticId"))
    date_time: ApiDateTime = None
    data: float | None = None

    @field_validator("device_id", "diagnostic_id", mode="before")
    @classmethod
    def _coerce_refs(cls, value: Any) -> str | None:
        return safe_id(value)

    @field_validator("data", mode="before")
    @classmethod
    def _coerce_data(cls, value: Any) -> float | None:
        return safe_float(value)
