"""Device model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from fleetlog.ingestion.normalize import safe_str
from fleetlog.models._base import FleetBaseModel


class Device(FleetBaseModel):
    """A tracked device (vehicle) on the account.

    Fields are mapped from the ``Get`` response for ``typeName=Device``.
    Only ``id`` and ``name`` are guaranteed; the remaining fields depend
    on the device kind (GO devices carry a VIN, custom devices do not).
    """

    id: str = ""
    """Stable device id (e.g. ``"b1A2"``)."""
    name: str = ""
    """User-facing device name."""
    vin: str | None = Field(
        default=None,
        validation_alias=AliasChoices("vehicleIdentificationNumber", "vin"),
    )
    """Vehicle Identification Number, when reported by the device."""
    serial_number: str | None = None
    """Hardware serial number."""
    device_type: str | None = None
    """Device kind (e.g. ``"GO9"``, ``"CustomDevice"``)."""

    @field_validator("id", "name", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return safe_str(value) or ""

    @field_validator("vin", "serial_number", "device_type", mode="before")
    @classmethod
    def _coerce_optional_str(cls, value: Any) -> str | None:
        return safe_str(value)
