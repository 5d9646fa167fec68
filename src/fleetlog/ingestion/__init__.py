"""Ingestion layer.

This package contains the helpers that turn raw API payloads into
snapshots and snapshots into normalized readings.
"""

__all__: list[str] = []
