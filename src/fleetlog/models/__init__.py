"""Data models for fleetlog."""

from fleetlog.models.device import Device
from fleetlog.models.reading import Reading, UnitSystem
from fleetlog.models.snapshot import RawSnapshot
from fleetlog.models.status import DeviceStatusInfo, StatusData

__all__ = [
    "Device",
    "DeviceStatusInfo",
    "RawSnapshot",
    "Reading",
    "StatusData",
    "UnitSystem",
]
