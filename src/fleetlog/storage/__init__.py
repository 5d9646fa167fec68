"""Durable storage for readings."""

from fleetlog.storage.sink import ReadingSink

__all__ = ["ReadingSink"]
