"""High-level async client for the fleet telemetry API."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, TypeVar

import aiohttp

from fleetlog._api.devices import fetch_devices
from fleetlog._api.login import authenticate
from fleetlog._transport import JsonRpcTransport
from fleetlog.config import FleetlogConfig
from fleetlog.exceptions import FleetlogError, FleetlogSessionExpiredError
from fleetlog.ingestion.snapshot import fetch_snapshot
from fleetlog.models.device import Device
from fleetlog.models.snapshot import RawSnapshot
from fleetlog.session import Session

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class FleetClient:
    """Async client for the telemetry API.

    Implements the :class:`fleetlog.polling.source.RemoteDataSource`
    protocol consumed by the poll workers.

    Usage::

        async with FleetClient(config) as client:
            await client.login()
            devices = await client.list_entities()
    """

    def __init__(
        self,
        config: FleetlogConfig,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: JsonRpcTransport | None = None
        self._session: Session | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FleetClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._config.request_timeout),
            )
        self._transport = JsonRpcTransport(self._config.base_url, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._transport = None

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def login(self) -> Session:
        """Authenticate and store the session credentials."""
        transport = self._require_transport()
        credentials, base_url = await authenticate(self._config, transport, transport.base_url)
        if base_url != transport.base_url:
            transport.redirect(base_url)

        ttl = self._config.session_ttl if self._config.session_ttl > 0 else float("inf")
        self._session = Session(
            database=credentials["database"],
            user_name=credentials["userName"],
            session_id=credentials["sessionId"],
            base_url=base_url,
            ttl=ttl,
        )
        _logger.info("Authenticated as %s on %s", self._session.user_name, base_url)
        return self._session

    async def ensure_session(self) -> Session:
        """Return an active session, re-authenticating if expired."""
        if self._session is not None and not self._session.is_expired:
            return self._session
        return await self.login()

    def invalidate_session(self) -> None:
        """Force session invalidation (next call will re-authenticate)."""
        self._session = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> JsonRpcTransport:
        if self._transport is None:
            raise FleetlogError("Client not initialized. Use 'async with FleetClient(...) as client:'")
        return self._transport

    async def _call_with_reauth(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Run an API call, retrying once on session expiry."""
        try:
            return await fn()
        except FleetlogSessionExpiredError:
            _logger.debug("Session rejected; re-authenticating", exc_info=True)
            self.invalidate_session()
            await self.ensure_session()
            return await fn()

    # ------------------------------------------------------------------
    # Read endpoints
    # ------------------------------------------------------------------

    async def list_entities(self) -> list[Device]:
        """Fetch all devices associated with the account."""

        async def _call() -> list[Device]:
            session = await self.ensure_session()
            return await fetch_devices(session, self._require_transport())

        return await self._call_with_reauth(_call)

    async def fetch_snapshot(self, entity_id: str, as_of: datetime | None = None) -> RawSnapshot:
        """Fetch position, last-seen time and odometer for one device."""

        async def _call() -> RawSnapshot:
            session = await self.ensure_session()
            return await fetch_snapshot(
                session=session,
                transport=self._require_transport(),
                entity_id=entity_id,
                as_of=as_of,
            )

        return await self._call_with_reauth(_call)
