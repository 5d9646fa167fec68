"""Custom exception hierarchy for fleetlog."""

from __future__ import annotations


class FleetlogError(Exception):
    """Base exception for all fleetlog errors."""


class FleetlogConfigError(FleetlogError):
    """Invalid or missing configuration."""


class FleetlogTransportError(FleetlogError):
    """HTTP-level failure (network, timeout, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        method: str = "",
    ) -> None:
        self.status_code = status_code
        self.method = method
        super().__init__(message)


class FleetlogApiError(FleetlogError):
    """API returned a JSON-RPC ``error`` object (application-level error)."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "",
        method: str = "",
    ) -> None:
        self.code = code
        self.method = method
        super().__init__(message)


class FleetlogAuthenticationError(FleetlogApiError):
    """Authentication failed (bad credentials, unknown database)."""


class FleetlogSessionExpiredError(FleetlogAuthenticationError):
    """Session credentials rejected by the server after login.

    The client catches this internally and re-authenticates once before
    repeating the call.
    """


class FleetlogDatabaseUnavailableError(FleetlogAuthenticationError):
    """The requested database is unavailable on the target server."""


class FleetlogNotFoundError(FleetlogApiError):
    """The requested entity no longer exists on the backend.

    Pollers treat this exactly like a transport failure: the cycle is
    skipped and the entity is polled again on the next interval.
    """


class SinkWriteError(FleetlogError):
    """Appending a reading to the per-entity log failed."""

    def __init__(self, message: str, *, entity_id: str = "") -> None:
        self.entity_id = entity_id
        super().__init__(message)


class WorkerSpawnError(FleetlogError):
    """A poll worker could not be started for an entity."""

    def __init__(self, message: str, *, entity_id: str = "") -> None:
        self.entity_id = entity_id
        super().__init__(message)
