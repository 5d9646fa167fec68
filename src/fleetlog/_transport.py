"""JSON-RPC transport over HTTPS."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from fleetlog._constants import API_PATH, USER_AGENT
from fleetlog._redact import redact_for_log
from fleetlog.exceptions import FleetlogTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`JsonRpcTransport`) concrete.
    """

    async def call(self, method: str, params: Mapping[str, Any]) -> dict[str, Any]:
        ...


class JsonRpcTransport:
    """Posts JSON-RPC requests and returns the decoded response envelope.

    The returned dict still carries either ``result`` or ``error``;
    mapping API errors to exceptions is left to the endpoint helpers.
    """

    def __init__(self, base_url: str, http_session: aiohttp.ClientSession) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = http_session

    @property
    def base_url(self) -> str:
        return self._base_url

    def redirect(self, base_url: str) -> None:
        """Point subsequent calls at another server (after an auth redirect)."""
        _logger.debug("Redirecting API calls from %s to %s", self._base_url, base_url)
        self._base_url = base_url.rstrip("/")

    async def call(self, method: str, params: Mapping[str, Any]) -> dict[str, Any]:
        """Send one JSON-RPC call.

        Raises
        ------
        FleetlogTransportError
            On network failure, timeout, non-200 status or a body that is
            not a JSON object.
        """
        url = f"{self._base_url}{API_PATH}"
        body = json.dumps({"method": method, "params": dict(params)}, separators=(",", ":"))
        headers = {
            "accept-encoding": "gzip",
            "content-type": "application/json; charset=UTF-8",
            "user-agent": USER_AGENT,
        }

        _logger.debug("POST %s method=%s params=%s", url, method, redact_for_log(dict(params)))

        try:
            async with self._http.post(url, data=body, headers=headers) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise FleetlogTransportError(
                        f"HTTP {resp.status} from {method}: {text[:200]}",
                        status_code=resp.status,
                        method=method,
                    )
        except FleetlogTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError, UnicodeDecodeError) as exc:
            raise FleetlogTransportError(
                f"Request {method} failed: {exc!r}",
                method=method,
            ) from exc

        try:
            decoded = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FleetlogTransportError(
                f"Invalid JSON from {method}: {text[:200]}",
                method=method,
            ) from exc

        if not isinstance(decoded, dict):
            raise FleetlogTransportError(
                f"Unexpected response shape from {method}: {type(decoded).__name__}",
                method=method,
            )
        return decoded
